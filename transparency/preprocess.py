from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

import cv2
import numpy as np

from .contracts import RasterImage, Seed
from .errors import RenderTargetError


@dataclass(frozen=True)
class WorkingMeta:
    """Mapping between the caller's image and the working-resolution buffer."""

    orig_h: int
    orig_w: int
    work_h: int
    work_w: int
    scale: float

    @property
    def resized(self) -> bool:
        return (self.work_h, self.work_w) != (self.orig_h, self.orig_w)


def working_size(width: int, height: int, max_dimension: int) -> Tuple[int, int, float]:
    """
    Uniform downscale so the longer side equals max_dimension; never upscales.

    Returns (work_w, work_h, scale).
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size: {(width, height)}")
    longest = max(width, height)
    if longest <= max_dimension:
        return width, height, 1.0
    scale = float(max_dimension) / float(longest)
    work_w = max(1, int(round(width * scale)))
    work_h = max(1, int(round(height * scale)))
    return work_w, work_h, scale


def to_working_resolution(image: RasterImage, max_dimension: int) -> Tuple[np.ndarray, WorkingMeta]:
    """
    Private RGBA copy of the input at working resolution (INTER_AREA when shrinking).
    """
    orig_h, orig_w = image.height, image.width
    work_w, work_h, scale = working_size(orig_w, orig_h, max_dimension)
    meta = WorkingMeta(orig_h=orig_h, orig_w=orig_w, work_h=work_h, work_w=work_w, scale=scale)

    if not meta.resized:
        return image.pixels.copy(), meta

    try:
        resized = cv2.resize(image.pixels, (work_w, work_h), interpolation=cv2.INTER_AREA)
    except cv2.error as e:
        raise RenderTargetError(f"Could not resize {orig_w}x{orig_h} -> {work_w}x{work_h}") from e
    if resized is None or resized.shape != (work_h, work_w, 4):
        raise RenderTargetError(f"Unexpected working buffer shape: {None if resized is None else resized.shape}")
    return np.ascontiguousarray(resized, dtype=np.uint8), meta


def rescale_seeds(seeds: Iterable[Seed], meta: WorkingMeta) -> Tuple[Seed, ...]:
    """Map seeds from input coordinates into the working buffer, clamping to bounds."""
    out = []
    for s in seeds:
        x = int(s.x * meta.scale)
        y = int(s.y * meta.scale)
        x = max(0, min(x, meta.work_w - 1))
        y = max(0, min(y, meta.work_h - 1))
        out.append(Seed(x=x, y=y, force=s.force))
    return tuple(out)
