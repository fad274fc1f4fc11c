from __future__ import annotations


class PdfError(Exception):
    """Base class for document generation failures."""


class AssetError(PdfError):
    """The signature image could not be decoded or re-encoded.

    Recoverable: the caller may render the document without a signature.
    """


class SerializationInvariantViolation(PdfError):
    """The object graph is inconsistent. Always a bug in the builder, never bad input."""
