from __future__ import annotations

import math

import cv2
import numpy as np


def visited_to_mask(visited: np.ndarray) -> np.ndarray:
    """1.0 where background was committed, 0.0 elsewhere (float64)."""
    if visited.ndim != 2:
        raise ValueError(f"Expected 2D visited map, got shape={visited.shape}")
    return visited.astype(np.float64)


def feather_radius(feather: float) -> int:
    if feather <= 0:
        return 0
    return max(1, int(math.floor(feather)))


def _window_counts(n: int, radius: int) -> np.ndarray:
    idx = np.arange(n)
    return (np.minimum(n - 1, idx + radius) - np.maximum(0, idx - radius) + 1).astype(np.float64)


def feather_mask(mask: np.ndarray, radius: int) -> np.ndarray:
    """
    Separable box blur: horizontal pass into a temporary buffer, then vertical.

    Each output is the mean of its (2*radius+1) window truncated at the image
    boundary (no padding values enter the mean).
    """
    if mask.ndim != 2:
        raise ValueError(f"Expected 2D mask, got shape={mask.shape}")
    m = np.clip(mask.astype(np.float64, copy=False), 0.0, 1.0)
    if radius <= 0:
        return m
    h, w = m.shape
    k = 2 * radius + 1

    # BORDER_CONSTANT pads with zeros, so the unnormalized sums only cover real pixels
    tmp = cv2.boxFilter(m, -1, (k, 1), normalize=False, borderType=cv2.BORDER_CONSTANT)
    tmp /= _window_counts(w, radius)[np.newaxis, :]

    out = cv2.boxFilter(tmp, -1, (1, k), normalize=False, borderType=cv2.BORDER_CONSTANT)
    out /= _window_counts(h, radius)[:, np.newaxis]
    return np.clip(out, 0.0, 1.0)


def refine_mask(visited: np.ndarray, feather: float) -> np.ndarray:
    return feather_mask(visited_to_mask(visited), feather_radius(feather))


def alpha_from_mask(mask: np.ndarray) -> np.ndarray:
    """alpha = round((1 - mask) * 255), halves rounded up."""
    m = np.clip(mask, 0.0, 1.0)
    return np.floor((1.0 - m) * 255.0 + 0.5).astype(np.uint8)


def write_alpha(pixels: np.ndarray, mask: np.ndarray) -> None:
    """Overwrite the alpha channel of an (H, W, 4) uint8 buffer in place."""
    if pixels.ndim != 3 or pixels.shape[2] != 4:
        raise ValueError(f"Expected RGBA buffer (H,W,4), got shape={pixels.shape}")
    if mask.shape != pixels.shape[:2]:
        raise ValueError(f"Mask shape {mask.shape} does not match buffer {pixels.shape[:2]}")
    pixels[..., 3] = alpha_from_mask(mask)
