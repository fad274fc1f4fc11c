from __future__ import annotations

from pathlib import Path

import pytest

from formdoc.core.config import FormdocConfig, LayoutConfig, SignatureConfig, load_config
from formdoc.core.validation import ValidationError
from formdoc.pdf.models import ContentEntry, EntryKind


def test_defaults_without_file():
    cfg = load_config(None)
    assert cfg == FormdocConfig()
    assert cfg.layout.page_width == 595
    assert cfg.layout.top == 792
    assert cfg.signature.max_width_px == 420


def test_max_chars_tracks_page_width():
    layout = LayoutConfig()
    assert layout.max_chars(11) == 90
    assert layout.max_chars(16) == 61
    assert LayoutConfig(page_width=1000).max_chars(11) == 163
    assert LayoutConfig(page_width=101, margin_left=50, margin_right=50).max_chars(11) == 1


def test_load_partial_yaml(tmp_path: Path):
    p = tmp_path / "cfg.yaml"
    p.write_text(
        """
layout:
  margin_left: 40
  body_font_size: 10
signature:
  jpeg_quality: 70
""",
        encoding="utf-8",
    )

    cfg = load_config(p)
    assert cfg.layout.margin_left == 40
    assert cfg.layout.body_font_size == 10
    assert cfg.layout.page_height == 842
    assert cfg.signature == SignatureConfig(jpeg_quality=70)
    assert cfg.to_dict()["layout"]["margin_left"] == 40


def test_empty_yaml_gives_defaults(tmp_path: Path):
    p = tmp_path / "cfg.yaml"
    p.write_text("", encoding="utf-8")
    assert load_config(p) == FormdocConfig()


@pytest.mark.parametrize(
    "text,fragment",
    [
        ("layout:\n  page_width: -1\n", "$.layout.page_width"),
        ("layout:\n  line_height: true\n", "$.layout.line_height"),
        ("layout:\n  margin_left: 300\n  margin_right: 300\n", "horizontal margins"),
        ("layout:\n  margin_top: 500\n  margin_bottom: 400\n", "vertical margins"),
        ("signature:\n  jpeg_quality: 100\n", "$.signature.jpeg_quality"),
        ("signature:\n  max_width_px: 0\n", "$.signature.max_width_px"),
        ("signature: [1, 2]\n", "$.signature"),
        ("- just\n- a list\n", "$"),
    ],
)
def test_invalid_values_report_paths(tmp_path: Path, text: str, fragment: str):
    p = tmp_path / "cfg.yaml"
    p.write_text(text, encoding="utf-8")

    with pytest.raises(ValidationError) as e:
        load_config(p)
    assert fragment in str(e.value)


def test_line_height_must_fit_below_top_margin():
    with pytest.raises(ValidationError) as e:
        LayoutConfig.from_mapping({"page_height": 100, "margin_top": 95, "margin_bottom": 0, "line_height": 10}, path="$.layout")
    assert "$.layout.line_height" in str(e.value)


def test_unreadable_and_malformed_files(tmp_path: Path):
    with pytest.raises(ValidationError, match="cannot read config"):
        load_config(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("layout: [unclosed\n", encoding="utf-8")
    with pytest.raises(ValidationError, match="invalid YAML"):
        load_config(bad)


def test_entry_from_mapping():
    entry = ContentEntry.from_mapping({"kind": "Title", "text": "Olá", "blankLinesAfter": 1}, path="$[0]")
    assert entry == ContentEntry(EntryKind.title, "Olá", 1)

    spacer = ContentEntry.from_mapping({"kind": "spacer", "blank_lines_after": 2}, path="$[1]")
    assert spacer == ContentEntry.spacer(2)


def test_bare_spacer_mapping_is_one_line():
    assert ContentEntry.from_mapping({"kind": "spacer"}, path="$[0]") == ContentEntry.spacer()
    assert ContentEntry.from_mapping({"kind": "text"}, path="$[0]").blank_lines_after == 0


@pytest.mark.parametrize(
    "data,fragment",
    [
        ({}, "missing required key 'kind'"),
        ({"kind": "table"}, "$[0].kind"),
        ({"kind": "text", "text": 5}, "$[0].text"),
        ({"kind": "text", "blank_lines_after": -1}, "$[0].blank_lines_after"),
        ({"kind": "signature", "text": "nope"}, "$[0].text"),
    ],
)
def test_entry_from_mapping_rejects_bad_input(data, fragment):
    with pytest.raises(ValidationError) as e:
        ContentEntry.from_mapping(data, path="$[0]")
    assert fragment in str(e.value)
