from __future__ import annotations

import logging
import re
import unicodedata
from typing import Any, Iterable

from ..core.config import FormdocConfig
from ..core.logging import log_event
from .content import build_content
from .image import ImageSource, prepare_signature, prepare_signature_async
from .models import ContentEntry, RenderedDocument, SignatureAsset
from .serializer import build_document

logger = logging.getLogger(__name__)

EMPTY_VALUE_PLACEHOLDER = "-"
DEFAULT_STEM = "document"

_UNSAFE_RE = re.compile(r"[^\w\s-]", re.ASCII)
_SPACES_RE = re.compile(r"\s+")


def safe_name(value: Any) -> str:
    text = unicodedata.normalize("NFD", str(value or ""))
    text = _UNSAFE_RE.sub("", text).strip()
    return _SPACES_RE.sub("-", text).lower()


def build_filename(*parts: Any) -> str:
    """Join the non-empty parts with ``-``, e.g. ``proposta-associado-2024-17-acme.pdf``."""
    stem = "-".join(str(p) for p in parts if p not in (None, ""))
    return derive_filename(stem)


def derive_filename(name: str | None) -> str:
    stem = (name or "").strip()
    if stem.lower().endswith(".pdf"):
        stem = stem[:-4]
    return f"{safe_name(stem) or DEFAULT_STEM}.pdf"


class Document:
    """Collects content entries and an optional signature, then renders one PDF page.

    Entries are laid out strictly in the order they were added.
    """

    def __init__(self, config: FormdocConfig | None = None) -> None:
        self.config = config or FormdocConfig()
        self._entries: list[ContentEntry] = []
        self._signature: SignatureAsset | None = None

    @property
    def entries(self) -> tuple[ContentEntry, ...]:
        return tuple(self._entries)

    @property
    def signature(self) -> SignatureAsset | None:
        return self._signature

    def add(self, entry: ContentEntry) -> "Document":
        self._entries.append(entry)
        return self

    def extend(self, entries: Iterable[ContentEntry]) -> "Document":
        for entry in entries:
            self.add(entry)
        return self

    def add_title(self, text: str, blank_lines_after: int = 0) -> "Document":
        return self.add(ContentEntry.title(text, blank_lines_after))

    def add_section(self, text: str, blank_lines_after: int = 0) -> "Document":
        return self.add(ContentEntry.heading(text, blank_lines_after))

    def add_paragraph(self, text: str, blank_lines_after: int = 0) -> "Document":
        return self.add(ContentEntry.paragraph(text, blank_lines_after))

    def add_key_value(self, label: str, value: Any = None, blank_lines_after: int = 0) -> "Document":
        shown = "" if value is None else str(value).strip()
        return self.add_paragraph(f"{label}: {shown or EMPTY_VALUE_PLACEHOLDER}", blank_lines_after)

    def add_spacer(self, lines: int = 1) -> "Document":
        return self.add(ContentEntry.spacer(lines))

    def add_signature(self, blank_lines_after: int = 0) -> "Document":
        """Mark where the attached signature image is drawn."""
        return self.add(ContentEntry.signature(blank_lines_after))

    def attach_signature(self, source: ImageSource) -> SignatureAsset:
        # Prepare first: a failed decode must leave any previous signature untouched.
        asset = prepare_signature(source, self.config.signature)
        self._signature = asset
        return asset

    async def attach_signature_async(self, source: ImageSource) -> SignatureAsset:
        asset = await prepare_signature_async(source, self.config.signature)
        self._signature = asset
        return asset

    def clear_signature(self) -> None:
        self._signature = None

    def finalize(self, filename: str | None = None) -> RenderedDocument:
        layout = self.config.layout
        content = build_content(self._entries, self._signature, layout)
        payload = build_document(content, self._signature if content.uses_image else None, layout)
        rendered = RenderedDocument(content=payload, filename=derive_filename(filename))
        log_event(
            logger,
            "pdf.document.finalized",
            filename=rendered.filename,
            entries=len(self._entries),
            lines=content.line_count,
            signature=content.uses_image,
            bytes=rendered.size,
        )
        return rendered
