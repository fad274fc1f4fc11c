from __future__ import annotations

import asyncio
import base64
import binascii
import io
import logging
from pathlib import Path

from PIL import Image

from ..core.config import PX_TO_PT, SignatureConfig
from ..core.logging import log_event
from .errors import AssetError
from .models import SignatureAsset

logger = logging.getLogger(__name__)

ImageSource = bytes | str | Path

_DATA_URL_PREFIX = "data:image/"
_WHITE = (255, 255, 255)


def decode_image_source(source: ImageSource) -> bytes:
    """Return raw image bytes from bytes, a ``data:image/...;base64,`` URL or a file path."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)

    if isinstance(source, Path):
        try:
            return source.read_bytes()
        except OSError as exc:
            raise AssetError(f"cannot read signature file {source}: {exc}") from exc

    if isinstance(source, str):
        header, sep, payload = source.partition(",")
        if not sep or not header.startswith(_DATA_URL_PREFIX) or not header.endswith(";base64"):
            raise AssetError("signature must be a base64 image data URL")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AssetError(f"signature data URL is not valid base64: {exc}") from exc

    raise AssetError(f"unsupported signature source type: {type(source).__name__}")


def fit_within(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    scale = min(1.0, max_width / width, max_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def prepare_signature(source: ImageSource, config: SignatureConfig | None = None) -> SignatureAsset:
    """Decode, bound, flatten and re-encode a signature as baseline JPEG.

    JPEG has no alpha channel, so transparent strokes from a canvas capture are
    composited onto white first.
    """
    cfg = config or SignatureConfig()
    raw = decode_image_source(source)

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            natural_width, natural_height = img.size
            if natural_width <= 0 or natural_height <= 0:
                raise AssetError("signature image has no pixels")
            size = fit_within(natural_width, natural_height, cfg.max_width_px, cfg.max_height_px)

            with img.convert("RGBA") as rgba:
                if rgba.size != size:
                    scaled = rgba.resize(size, Image.Resampling.LANCZOS)
                else:
                    scaled = rgba.copy()
                with scaled, Image.new("RGB", size, _WHITE) as canvas:
                    canvas.paste(scaled, (0, 0), scaled)
                    buffer = io.BytesIO()
                    canvas.save(buffer, format="JPEG", quality=cfg.jpeg_quality)
    except AssetError:
        raise
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise AssetError(f"cannot decode signature image: {exc}") from exc

    data = buffer.getvalue()
    pixel_width, pixel_height = size
    log_event(
        logger,
        "pdf.signature.prepared",
        natural_width=natural_width,
        natural_height=natural_height,
        pixel_width=pixel_width,
        pixel_height=pixel_height,
        bytes=len(data),
    )
    return SignatureAsset(
        pixel_width=pixel_width,
        pixel_height=pixel_height,
        point_width=pixel_width * PX_TO_PT,
        point_height=pixel_height * PX_TO_PT,
        data=data,
    )


async def prepare_signature_async(
    source: ImageSource, config: SignatureConfig | None = None
) -> SignatureAsset:
    return await asyncio.to_thread(prepare_signature, source, config)
