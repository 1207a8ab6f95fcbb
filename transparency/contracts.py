from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from .config import (
    DEFAULT_COLOR_TOL,
    DEFAULT_FEATHER,
    DEFAULT_GRAD_KEEP,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_MODE,
    DEFAULT_TILE_GUESS,
)

Mode = Literal["auto", "seed", "auto+seed"]


@dataclass(frozen=True)
class RasterImage:
    """Row-major RGBA8 pixel buffer of shape (H, W, 4)."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        px = self.pixels
        if not isinstance(px, np.ndarray):
            raise ValueError(f"Expected numpy pixel array, got {type(px).__name__}")
        if px.ndim != 3 or px.shape[2] != 4:
            raise ValueError(f"Expected RGBA image (H,W,4), got shape={px.shape}")
        if px.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got dtype={px.dtype}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "RasterImage":
        """
        Wrap an RGB or RGBA uint8 array; RGB input gets an opaque alpha channel.
        """
        if arr.ndim == 3 and arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr.astype(np.uint8, copy=False), alpha], axis=2)
        return cls(pixels=np.ascontiguousarray(arr))


class Seed(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    force: bool = False


class SegmentOptions(BaseModel):
    """
    Immutable per-call configuration. camelCase aliases match the UI payload.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    color_tol: float = Field(default=DEFAULT_COLOR_TOL, ge=0, alias="colorTol")
    tile_guess: float = Field(default=DEFAULT_TILE_GUESS, ge=1, alias="tileGuess")
    grad_keep: float = Field(default=DEFAULT_GRAD_KEEP, ge=0, alias="gradKeep")
    feather: float = Field(default=DEFAULT_FEATHER, ge=0)
    seed_points: Tuple[Seed, ...] = Field(default=(), alias="seedPoints")
    mode: Mode = DEFAULT_MODE
    max_dimension: int = Field(default=DEFAULT_MAX_DIMENSION, ge=1, alias="maxDimension")

    @property
    def uses_border(self) -> bool:
        return self.mode in ("auto", "auto+seed")

    @property
    def uses_seeds(self) -> bool:
        return self.mode in ("seed", "auto+seed")

    @property
    def active_seeds(self) -> Tuple[Seed, ...]:
        return self.seed_points if self.uses_seeds else ()
