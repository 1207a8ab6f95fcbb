"""
Edge-aware breadth-first region growth over the background.

Per-pixel state is `unvisited` or `visited` (committed background). A pixel is
admitted when its Lab distance to the nearest background reference is within
the threshold of the call that tested it; forced calls get a wider threshold
and skip the edge guard. Border points are forced only for their own test and
expand unforced; forced user seeds keep the forced test for their whole flood.
"""

from __future__ import annotations

from typing import Iterable, List, NamedTuple, Sequence

import numpy as np

from .color import Lab, lab_distance, lab_distance_map
from .config import (
    CLUSTER_SPREAD_SCALE,
    EDGE_MATCH_SCALE,
    FORCE_TOLERANCE_SCALE,
    MAX_TOLERANCE,
    MIN_TOLERANCE,
)
from .contracts import Seed
from .sampler import BackgroundEstimate, border_positions


class FrontierPoint(NamedTuple):
    x: int
    y: int
    force: bool
    spread: bool = False  # neighbours are tested with the forced map too


def derive_tolerance(color_tol: float, estimate: BackgroundEstimate) -> float:
    """
    Widen the tolerance with the spread between two distinct background tones
    (a high-contrast checkerboard needs more room than a near-solid backdrop).
    """
    tolerance = max(float(color_tol), MIN_TOLERANCE)
    if estimate.distinct:
        c1, c2 = estimate.clusters
        spread = lab_distance(c1.lab, c2.lab) * CLUSTER_SPREAD_SCALE
        tolerance = min(MAX_TOLERANCE, max(tolerance, spread))
    return tolerance


def border_frontier(width: int, height: int, stride: int) -> List[FrontierPoint]:
    return [FrontierPoint(x, y, True) for x, y in border_positions(width, height, stride)]


def seed_frontier(seeds: Iterable[Seed]) -> List[FrontierPoint]:
    return [FrontierPoint(s.x, s.y, s.force, s.force) for s in seeds]


def background_distance(lab: np.ndarray, refs: Sequence[Lab]) -> np.ndarray:
    """Min Lab distance to any background reference, shape (H, W)."""
    if not refs:
        raise ValueError("At least one background reference is required")
    dist = lab_distance_map(lab, refs[0])
    for ref in refs[1:]:
        np.minimum(dist, lab_distance_map(lab, ref), out=dist)
    return dist


def admission_maps(
    dist: np.ndarray,
    grad: np.ndarray,
    tolerance: float,
    grad_keep: float,
):
    """
    Returns (plain, forced) boolean maps of pixels each kind of call would admit.
    """
    plain = dist <= tolerance
    protected = (grad > grad_keep) & (dist > tolerance * EDGE_MATCH_SCALE)
    plain &= ~protected
    forced = dist <= tolerance * FORCE_TOLERANCE_SCALE
    return plain, forced


def _drain(
    queue: np.ndarray,
    head: int,
    tail: int,
    visited: np.ndarray,
    admit: np.ndarray,
    w: int,
) -> int:
    """Expand queued pixels to 4-neighbours passing `admit`; returns the new tail."""
    total = visited.shape[0]
    while head < tail:
        idx = int(queue[head])
        head += 1
        x = idx % w
        for n_idx, inside in (
            (idx + 1, x + 1 < w),
            (idx - 1, x > 0),
            (idx + w, idx + w < total),
            (idx - w, idx >= w),
        ):
            if inside and not visited[n_idx] and admit[n_idx]:
                visited[n_idx] = 1
                queue[tail] = n_idx
                tail += 1
    return tail


def grow_region(
    lab: np.ndarray,
    grad: np.ndarray,
    refs: Sequence[Lab],
    tolerance: float,
    grad_keep: float,
    frontier: Iterable[FrontierPoint],
) -> np.ndarray:
    """
    BFS flood fill from `frontier`. Returns the visited set as bool (H, W).

    Spreading points (forced user seeds) are flooded first against the forced
    map; the remaining points then flood against the plain map. Plain
    admission implies forced admission, so the result does not depend on the
    order the points were given in.

    Queue and visited bitmap are sized to W*H up front; each pixel is enqueued
    at most once across both floods, so the traversal never reallocates.
    """
    h, w = grad.shape
    if lab.shape[:2] != (h, w):
        raise ValueError(f"Lab shape {lab.shape[:2]} does not match gradient {grad.shape}")
    total = h * w

    dist = background_distance(lab, refs)
    plain_map, forced_map = admission_maps(dist, grad, tolerance, grad_keep)
    plain = plain_map.ravel()
    forced = forced_map.ravel()

    visited = np.zeros(total, dtype=np.uint8)
    queue = np.empty(total, dtype=np.int64)
    tail = 0

    points = [p for p in frontier if 0 <= p.x < w and 0 <= p.y < h]
    for spreading, admit in ((True, forced), (False, plain)):
        head = tail
        for point in points:
            if point.spread != spreading:
                continue
            idx = point.y * w + point.x
            if visited[idx]:
                continue
            admitted = forced[idx] if point.force else plain[idx]
            if admitted:
                visited[idx] = 1
                queue[tail] = idx
                tail += 1
        tail = _drain(queue, head, tail, visited, admit, w)

    return visited.reshape(h, w).astype(bool)
