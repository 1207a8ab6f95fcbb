from __future__ import annotations

import io
from pathlib import Path
from typing import Protocol

import numpy as np
from PIL import Image, UnidentifiedImageError

from .contracts import RasterImage
from .errors import ImageDecodeError


class ImageDecoder(Protocol):
    def decode(self, data: bytes) -> RasterImage: ...


class PillowDecoder:
    """Decode any Pillow-readable format into an RGBA8 buffer."""

    def decode(self, data: bytes) -> RasterImage:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
            rgba = img.convert("RGBA")
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageDecodeError(f"Could not decode image ({len(data)} bytes)") from e
        return RasterImage(pixels=np.array(rgba, dtype=np.uint8))


def encode_png(image: RasterImage) -> bytes:
    """
    Lossless RGBA PNG bytes.
    """
    buf = io.BytesIO()
    Image.fromarray(image.pixels).save(buf, format="PNG", optimize=False)
    return buf.getvalue()


def read_bytes(path: str) -> bytes:
    return Path(path).read_bytes()


def save_bytes(data: bytes, path: str) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)
