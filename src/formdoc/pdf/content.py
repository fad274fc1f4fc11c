from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable

from ..core.config import LayoutConfig
from ..core.logging import log_event
from .layout import wrap_lines
from .models import ContentEntry, EntryKind, SignatureAsset

logger = logging.getLogger(__name__)

IMAGE_RESOURCE = "Im1"


class FontFace(StrEnum):
    """Logical fonts; the value is the resource name used in the page dictionary."""

    regular = "F1"
    bold = "F2"


BASE_FONTS = {
    FontFace.regular: "Helvetica",
    FontFace.bold: "Helvetica-Bold",
}


def fmt(value: float) -> str:
    """Format a coordinate the way PDF expects: no exponent, no trailing zeros."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


@dataclass(frozen=True, slots=True)
class ContentStream:
    data: bytes
    fonts: frozenset[FontFace]
    uses_image: bool
    line_count: int
    cursor: float


class _StreamWriter:
    def __init__(self, layout: LayoutConfig) -> None:
        self.layout = layout
        self.cursor = layout.top
        self.lowest = layout.top
        self.ops: list[str] = []
        self.in_text = False
        self.font: tuple[FontFace, float] | None = None
        self.fonts: set[FontFace] = set()
        self.uses_image = False
        self.line_count = 0

    def begin_text(self) -> None:
        if not self.in_text:
            self.ops.append("BT")
            self.in_text = True

    def end_text(self) -> None:
        if self.in_text:
            self.ops.append("ET")
            self.in_text = False

    def advance(self, lines: int) -> None:
        self.cursor -= lines * self.layout.line_height

    def show_line(self, face: FontFace, size: float, line: str) -> None:
        if line:
            self.begin_text()
            if self.font != (face, size):
                self.ops.append(f"/{face.value} {fmt(size)} Tf")
                self.font = (face, size)
                self.fonts.add(face)
            self.ops.append(f"1 0 0 1 {fmt(self.layout.margin_left)} {fmt(self.cursor)} Tm")
            self.ops.append(f"({line}) Tj")
            self.line_count += 1
            self.lowest = min(self.lowest, self.cursor)
        self.advance(1)

    def draw_image(self, asset: SignatureAsset) -> None:
        # Image XObjects are not allowed inside a BT/ET text object.
        self.end_text()
        x = self.layout.margin_left
        y = self.cursor - asset.point_height
        self.ops.append("q")
        self.ops.append(f"{fmt(asset.point_width)} 0 0 {fmt(asset.point_height)} {fmt(x)} {fmt(y)} cm")
        self.ops.append(f"/{IMAGE_RESOURCE} Do")
        self.ops.append("Q")
        self.uses_image = True
        self.lowest = min(self.lowest, y)
        self.cursor = y - self.layout.line_height

    def finish(self) -> ContentStream:
        self.end_text()
        data = ("\n".join(self.ops) + "\n").encode("ascii") if self.ops else b""
        return ContentStream(
            data=data,
            fonts=frozenset(self.fonts),
            uses_image=self.uses_image,
            line_count=self.line_count,
            cursor=self.cursor,
        )


def _font_for(kind: EntryKind, layout: LayoutConfig) -> tuple[FontFace, float]:
    if kind is EntryKind.title:
        return FontFace.bold, layout.title_font_size
    if kind is EntryKind.heading:
        return FontFace.bold, layout.heading_font_size
    return FontFace.regular, layout.body_font_size


def build_content(
    entries: Iterable[ContentEntry],
    asset: SignatureAsset | None,
    layout: LayoutConfig,
) -> ContentStream:
    """Lay out ``entries`` top to bottom on a single page and emit the operator stream."""
    writer = _StreamWriter(layout)

    for entry in entries:
        if entry.is_text:
            face, size = _font_for(entry.kind, layout)
            for line in wrap_lines(entry.text, layout.max_chars(size)):
                writer.show_line(face, size, line)
        elif entry.kind is EntryKind.signature:
            if asset is None:
                log_event(logger, "pdf.signature.missing", level=logging.WARNING)
            else:
                writer.draw_image(asset)
        elif entry.kind is EntryKind.spacer:
            pass
        else:
            raise ValueError(f"unsupported entry kind: {entry.kind!r}")
        writer.advance(entry.blank_lines_after)

    if writer.lowest < layout.margin_bottom:
        # Single page only: overflowing content is clipped by the viewer.
        log_event(
            logger,
            "pdf.content.overflow",
            level=logging.WARNING,
            lowest=round(writer.lowest, 2),
            margin_bottom=layout.margin_bottom,
        )

    return writer.finish()
