"""Minimal single-page PDF generation with an optional embedded signature."""

from __future__ import annotations

from .content import ContentStream, FontFace, build_content
from .document import Document, build_filename, derive_filename, safe_name
from .errors import AssetError, PdfError, SerializationInvariantViolation
from .image import decode_image_source, prepare_signature, prepare_signature_async
from .layout import sanitize_text, wrap_lines
from .models import ContentEntry, EntryKind, RenderedDocument, SignatureAsset
from .serializer import ObjectGraph, build_document, serialize

__all__ = [
    "AssetError",
    "ContentEntry",
    "ContentStream",
    "Document",
    "EntryKind",
    "FontFace",
    "ObjectGraph",
    "PdfError",
    "RenderedDocument",
    "SerializationInvariantViolation",
    "SignatureAsset",
    "build_content",
    "build_document",
    "build_filename",
    "decode_image_source",
    "derive_filename",
    "prepare_signature",
    "prepare_signature_async",
    "safe_name",
    "sanitize_text",
    "serialize",
    "wrap_lines",
]
