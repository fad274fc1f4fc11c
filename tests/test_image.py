from __future__ import annotations

import asyncio
import base64
import io
from pathlib import Path

import pytest
from PIL import Image

from formdoc.core.config import SignatureConfig
from formdoc.pdf.errors import AssetError
from formdoc.pdf.image import decode_image_source, fit_within, prepare_signature, prepare_signature_async


def test_fit_within_scales_down_preserving_aspect():
    assert fit_within(1000, 500, 420, 220) == (420, 210)


def test_fit_within_never_upscales():
    assert fit_within(100, 40, 420, 220) == (100, 40)


def test_fit_within_keeps_at_least_one_pixel():
    assert fit_within(5000, 2, 420, 220) == (420, 1)


def test_prepare_bounds_and_converts_dimensions(make_png):
    asset = prepare_signature(make_png(1000, 500), SignatureConfig(max_width_px=420, max_height_px=220))

    assert (asset.pixel_width, asset.pixel_height) == (420, 210)
    assert asset.point_width == pytest.approx(315.0)
    assert asset.point_height == pytest.approx(157.5)
    assert asset.data.startswith(b"\xff\xd8")

    with Image.open(io.BytesIO(asset.data)) as decoded:
        assert decoded.format == "JPEG"
        assert decoded.mode == "RGB"
        assert decoded.size == (420, 210)


def test_transparency_is_flattened_onto_white(make_png):
    asset = prepare_signature(make_png(40, 20, color=(0, 0, 0, 0)))

    with Image.open(io.BytesIO(asset.data)) as decoded:
        r, g, b = decoded.getpixel((20, 10))
    assert min(r, g, b) >= 250


def test_opaque_strokes_survive(make_png):
    asset = prepare_signature(make_png(40, 20, color=(0, 0, 0, 255)))

    with Image.open(io.BytesIO(asset.data)) as decoded:
        r, g, b = decoded.getpixel((20, 10))
    assert max(r, g, b) <= 5


def test_data_url_source(make_png):
    raw = make_png(30, 10)
    url = "data:image/png;base64," + base64.b64encode(raw).decode("ascii")

    assert decode_image_source(url) == raw
    assert prepare_signature(url).pixel_width == 30


def test_path_source(make_png, tmp_path: Path):
    p = tmp_path / "sig.png"
    p.write_bytes(make_png(12, 8))

    asset = prepare_signature(p)
    assert (asset.pixel_width, asset.pixel_height) == (12, 8)


def test_missing_file_is_asset_error(tmp_path: Path):
    with pytest.raises(AssetError):
        prepare_signature(tmp_path / "missing.png")


@pytest.mark.parametrize(
    "source",
    [
        "not a data url",
        "data:text/plain;base64,aGVsbG8=",
        "data:image/png;base64,@@@not-base64@@@",
        "data:image/png,rawdata",
    ],
)
def test_bad_data_urls_are_rejected(source):
    with pytest.raises(AssetError):
        decode_image_source(source)


def test_undecodable_bytes_are_asset_error():
    with pytest.raises(AssetError) as e:
        prepare_signature(b"definitely not an image")
    assert "decode" in str(e.value)


def test_truncated_png_is_asset_error():
    buffer = io.BytesIO()
    with Image.effect_noise((256, 256), 64) as img:
        img.save(buffer, format="PNG")
    raw = buffer.getvalue()

    with pytest.raises(AssetError):
        prepare_signature(raw[: len(raw) // 2])


def test_unsupported_source_type():
    with pytest.raises(AssetError):
        decode_image_source(12345)  # type: ignore[arg-type]


def test_fixed_quality_is_deterministic(make_png):
    raw = make_png(300, 120, color=(10, 20, 200, 180))
    assert prepare_signature(raw).data == prepare_signature(raw).data


def test_async_variant_matches_sync(make_png):
    raw = make_png(64, 32)
    asset = asyncio.run(prepare_signature_async(raw))
    assert asset == prepare_signature(raw)
