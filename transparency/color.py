"""
sRGB (8-bit) -> CIE L*a*b* (D65) and the Euclidean Lab distance.

All functions are pure; the vectorized form is the reference implementation
and the scalar helpers go through it so both agree bit-for-bit.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

Lab = Tuple[float, float, float]

_RGB_TO_XYZ = np.array(
    [
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ]
)
_D65_WHITE = np.array([0.95047, 1.00000, 1.08883])

_LAB_EPSILON = 0.008856
_LAB_SLOPE = 7.787


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """Convert RGB (0-255) array to CIELAB. Input shape: (..., 3); output float64 (..., 3)."""
    if rgb.shape[-1] != 3:
        raise ValueError(f"Expected trailing RGB axis of size 3, got shape={rgb.shape}")
    rgb_norm = rgb.astype(np.float64) / 255.0

    # Linearize sRGB
    rgb_lin = np.where(rgb_norm <= 0.04045, rgb_norm / 12.92, ((rgb_norm + 0.055) / 1.055) ** 2.4)

    xyz = (rgb_lin @ _RGB_TO_XYZ.T) / _D65_WHITE

    # cbrt keeps tiny negative rounding noise finite
    f = np.where(xyz > _LAB_EPSILON, np.cbrt(xyz), _LAB_SLOPE * xyz + 16.0 / 116.0)

    lab = np.empty_like(xyz)
    lab[..., 0] = 116.0 * f[..., 1] - 16.0
    lab[..., 1] = 500.0 * (f[..., 0] - f[..., 1])
    lab[..., 2] = 200.0 * (f[..., 1] - f[..., 2])
    return lab


def rgb_to_lab(r: float, g: float, b: float) -> Lab:
    lab = rgb_to_lab_array(np.array([r, g, b], dtype=np.float64))
    return float(lab[0]), float(lab[1]), float(lab[2])


def lab_distance(p: Sequence[float], q: Sequence[float]) -> float:
    dl = p[0] - q[0]
    da = p[1] - q[1]
    db = p[2] - q[2]
    return float(np.sqrt(dl * dl + da * da + db * db))


def lab_distance_map(lab: np.ndarray, ref: Sequence[float]) -> np.ndarray:
    """Per-pixel distance from an (..., 3) Lab array to a single reference color."""
    diff = lab - np.asarray(ref, dtype=np.float64)
    return np.sqrt(np.sum(diff * diff, axis=-1))
