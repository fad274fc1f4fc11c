from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, Mapping

from ..core.validation import (
    ValidationError,
    ValidationIssue,
    as_str,
    get_optional,
    get_required,
    require_choice,
    require_non_negative_int,
)


class EntryKind(StrEnum):
    title = "title"
    heading = "heading"
    text = "text"
    spacer = "spacer"
    signature = "signature"


_TEXT_KINDS = frozenset({EntryKind.title, EntryKind.heading, EntryKind.text})


@dataclass(frozen=True, slots=True)
class ContentEntry:
    kind: EntryKind
    text: str = ""
    blank_lines_after: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EntryKind(self.kind))
        if self.blank_lines_after < 0:
            raise ValueError("blank_lines_after must be >= 0")
        if self.kind not in _TEXT_KINDS and self.text:
            raise ValueError(f"{self.kind.value} entries carry no text")

    @property
    def is_text(self) -> bool:
        return self.kind in _TEXT_KINDS

    @staticmethod
    def title(text: str, blank_lines_after: int = 0) -> "ContentEntry":
        return ContentEntry(EntryKind.title, text, blank_lines_after)

    @staticmethod
    def heading(text: str, blank_lines_after: int = 0) -> "ContentEntry":
        return ContentEntry(EntryKind.heading, text, blank_lines_after)

    @staticmethod
    def paragraph(text: str, blank_lines_after: int = 0) -> "ContentEntry":
        return ContentEntry(EntryKind.text, text, blank_lines_after)

    @staticmethod
    def spacer(lines: int = 1) -> "ContentEntry":
        return ContentEntry(EntryKind.spacer, blank_lines_after=lines)

    @staticmethod
    def signature(blank_lines_after: int = 0) -> "ContentEntry":
        return ContentEntry(EntryKind.signature, blank_lines_after=blank_lines_after)

    @staticmethod
    def from_mapping(data: Mapping[str, Any], *, path: str) -> "ContentEntry":
        """Parse one ``{kind, text?, blank_lines_after?}`` item of the input contract."""
        kind = EntryKind(
            require_choice(
                get_required(data, "kind", path=path),
                (k.value for k in EntryKind),
                path=f"{path}.kind",
            )
        )
        # A bare spacer means one blank line, as with Document.add_spacer.
        default_blank = 1 if kind is EntryKind.spacer else 0
        blank_raw = get_optional(data, "blank_lines_after", get_optional(data, "blankLinesAfter", default_blank))
        blank_lines_after = require_non_negative_int(blank_raw, path=f"{path}.blank_lines_after")

        if kind in _TEXT_KINDS:
            text = as_str(get_optional(data, "text", ""), path=f"{path}.text")
            return ContentEntry(kind, text, blank_lines_after)

        if get_optional(data, "text"):
            raise ValidationError([ValidationIssue(f"{path}.text", f"not allowed for {kind.value} entries")])
        return ContentEntry(kind, blank_lines_after=blank_lines_after)


@dataclass(frozen=True, slots=True)
class SignatureAsset:
    """A signature image ready to embed: baseline JPEG bytes plus both size pairs."""

    pixel_width: int
    pixel_height: int
    point_width: float
    point_height: float
    data: bytes


@dataclass(frozen=True, slots=True)
class RenderedDocument:
    content: bytes
    filename: str

    @property
    def size(self) -> int:
        return len(self.content)

    def write_to(self, path: str | Path) -> None:
        with open(path, "wb") as handle:
            handle.write(self.content)
