"""formdoc: dependency-light PDF rendering for filled-in company forms."""

from __future__ import annotations

from .pdf import AssetError, ContentEntry, Document, EntryKind, RenderedDocument

__all__ = ["AssetError", "ContentEntry", "Document", "EntryKind", "RenderedDocument"]

__version__ = "0.1.0"
