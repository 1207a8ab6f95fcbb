from __future__ import annotations

import cv2
import numpy as np

from .config import LUMA_WEIGHTS


def luminance_map(rgb: np.ndarray) -> np.ndarray:
    """
    Perceptual luminance per pixel on the 0-255 scale, float64 (H, W).
    """
    if rgb.ndim != 3 or rgb.shape[2] < 3:
        raise ValueError(f"Expected RGB(A) image (H,W,C), got shape={rgb.shape}")
    weights = np.array(LUMA_WEIGHTS, dtype=np.float64)
    return rgb[..., :3].astype(np.float64) @ weights


def gradient_magnitude(lum: np.ndarray) -> np.ndarray:
    """
    3x3 Sobel magnitude / 8 for interior pixels.

    The 1-pixel border stays 0 (unprotected) since region growth starts there.
    """
    if lum.ndim != 2:
        raise ValueError(f"Expected 2D luminance map, got shape={lum.shape}")
    h, w = lum.shape
    grad = np.zeros((h, w), dtype=np.float64)
    if h < 3 or w < 3:
        return grad

    src = lum.astype(np.float64, copy=False)
    gx = cv2.Sobel(src, cv2.CV_64F, 1, 0, ksize=3)
    gy = cv2.Sobel(src, cv2.CV_64F, 0, 1, ksize=3)
    grad[1:-1, 1:-1] = np.hypot(gx[1:-1, 1:-1], gy[1:-1, 1:-1]) / 8.0
    return grad
