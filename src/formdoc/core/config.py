"""Configuration for document geometry and signature embedding.

All values have defaults matching an A4 page with Helvetica text, so a missing
configuration file is valid. A YAML file may override any subset:

    layout:
      margin_left: 40
      body_font_size: 10
    signature:
      jpeg_quality: 80
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .validation import (
    ValidationError,
    ValidationIssue,
    as_mapping,
    get_optional,
    require_int_range,
    require_non_negative_number,
    require_positive_int,
    require_positive_number,
)

# Screen pixels (96 dpi) to PDF points (72 per inch).
PX_TO_PT = 72 / 96


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Page geometry and font sizes shared by the content builder and the serializer."""

    page_width: float = 595
    page_height: float = 842
    margin_left: float = 50
    margin_right: float = 50
    margin_top: float = 50
    margin_bottom: float = 50
    line_height: float = 16
    title_font_size: float = 16
    heading_font_size: float = 13
    body_font_size: float = 11
    # Average Helvetica glyph advance as a fraction of the font size.
    char_width_ratio: float = 0.5

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def top(self) -> float:
        return self.page_height - self.margin_top

    def max_chars(self, font_size: float) -> int:
        """Wrap width in characters for text set at ``font_size``."""
        return max(1, int(self.content_width / (font_size * self.char_width_ratio)))

    @staticmethod
    def from_mapping(data: Mapping[str, Any], *, path: str) -> "LayoutConfig":
        defaults = LayoutConfig()
        values: dict[str, float] = {}
        for name in ("page_width", "page_height", "line_height", "title_font_size",
                     "heading_font_size", "body_font_size", "char_width_ratio"):
            values[name] = require_positive_number(
                get_optional(data, name, getattr(defaults, name)),
                path=f"{path}.{name}",
            )
        for name in ("margin_left", "margin_right", "margin_top", "margin_bottom"):
            values[name] = require_non_negative_number(
                get_optional(data, name, getattr(defaults, name)),
                path=f"{path}.{name}",
            )

        layout = LayoutConfig(**values)

        issues: list[ValidationIssue] = []
        if layout.content_width <= 0:
            issues.append(ValidationIssue(path, "horizontal margins leave no room for content"))
        if layout.margin_top + layout.margin_bottom >= layout.page_height:
            issues.append(ValidationIssue(path, "vertical margins leave no room for content"))
        elif layout.margin_top + layout.line_height > layout.page_height:
            issues.append(ValidationIssue(f"{path}.line_height", "must fit below the top margin"))
        if issues:
            raise ValidationError(issues)
        return layout


@dataclass(frozen=True, slots=True)
class SignatureConfig:
    """Bounding box (in source pixels) and JPEG quality for the embedded signature."""

    max_width_px: int = 420
    max_height_px: int = 220
    jpeg_quality: int = 85

    @staticmethod
    def from_mapping(data: Mapping[str, Any], *, path: str) -> "SignatureConfig":
        max_width_px = require_positive_int(
            get_optional(data, "max_width_px", 420),
            path=f"{path}.max_width_px",
        )
        max_height_px = require_positive_int(
            get_optional(data, "max_height_px", 220),
            path=f"{path}.max_height_px",
        )
        # Pillow's documented JPEG quality scale tops out at 95.
        jpeg_quality = require_int_range(
            get_optional(data, "jpeg_quality", 85),
            1,
            95,
            path=f"{path}.jpeg_quality",
        )
        return SignatureConfig(
            max_width_px=max_width_px,
            max_height_px=max_height_px,
            jpeg_quality=jpeg_quality,
        )


@dataclass(frozen=True, slots=True)
class FormdocConfig:
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    signature: SignatureConfig = field(default_factory=SignatureConfig)

    @staticmethod
    def from_mapping(data: Mapping[str, Any], *, path: str = "$") -> "FormdocConfig":
        layout = as_mapping(get_optional(data, "layout", {}) or {}, path=f"{path}.layout")
        signature = as_mapping(get_optional(data, "signature", {}) or {}, path=f"{path}.signature")
        return FormdocConfig(
            layout=LayoutConfig.from_mapping(layout, path=f"{path}.layout"),
            signature=SignatureConfig.from_mapping(signature, path=f"{path}.signature"),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(path: str | Path | None = None) -> FormdocConfig:
    if path is None:
        return FormdocConfig()

    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValidationError([ValidationIssue(str(p), f"cannot read config: {exc}")]) from exc
    except yaml.YAMLError as exc:
        raise ValidationError([ValidationIssue(str(p), f"invalid YAML: {exc}")]) from exc

    if raw is None:
        return FormdocConfig()
    return FormdocConfig.from_mapping(as_mapping(raw, path="$"), path="$")
