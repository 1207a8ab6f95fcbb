"""
Background color estimation from sparse evidence (image border + user seeds).

Samples are greedily clustered in Lab space; the two best supported clusters
become the background reference pair. A single surviving cluster is
duplicated so downstream code can always assume a pair.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .color import Lab, lab_distance
from .config import (
    MAX_BACKGROUND_CLUSTERS,
    MERGE_DISTANCE_SCALE,
    MIN_CLUSTER_SAMPLES,
    MIN_MERGE_DISTANCE,
    MIN_TILE_DIVISOR,
    SEED_SAMPLE_WEIGHT,
    SYNTHETIC_DEDUP_DISTANCE,
)
from .contracts import Seed
from .errors import NoBackgroundEstimate

RGB = Tuple[float, float, float]


@dataclass(frozen=True)
class Sample:
    x: int
    y: int
    rgb: RGB
    lab: Lab


@dataclass(frozen=True)
class Cluster:
    """Running Lab/RGB mean over the samples merged so far."""

    lab: Lab
    rgb: RGB
    count: int

    @classmethod
    def from_sample(cls, sample: Sample) -> "Cluster":
        return cls(lab=sample.lab, rgb=sample.rgb, count=1)

    def merge(self, sample: Sample) -> "Cluster":
        n = self.count + 1
        lab = tuple(m + (v - m) / n for m, v in zip(self.lab, sample.lab))
        rgb = tuple(m + (v - m) / n for m, v in zip(self.rgb, sample.rgb))
        return Cluster(lab=lab, rgb=rgb, count=n)

    def distance(self, lab: Sequence[float]) -> float:
        return lab_distance(self.lab, lab)


@dataclass(frozen=True)
class BackgroundEstimate:
    clusters: Tuple[Cluster, Cluster]
    distinct: bool

    @property
    def labs(self) -> List[Lab]:
        return [c.lab for c in self.clusters]


def sampling_stride(width: int, height: int, tile_guess: float) -> int:
    """Border stride; fractional tile hints are floored through the division."""
    return max(1, int(min(width, height) // max(MIN_TILE_DIVISOR, tile_guess)))


def border_positions(width: int, height: int, stride: int) -> List[Tuple[int, int]]:
    """
    Border walk at `stride` plus the four corners, de-duplicated, in a fixed order.
    """
    positions: List[Tuple[int, int]] = []
    for x in range(0, width, stride):
        positions.append((x, 0))
        positions.append((x, height - 1))
    for y in range(0, height, stride):
        positions.append((0, y))
        positions.append((width - 1, y))
    positions.extend([(0, 0), (width - 1, 0), (0, height - 1), (width - 1, height - 1)])
    return list(dict.fromkeys(positions))


def _sample_at(rgb: np.ndarray, lab: np.ndarray, x: int, y: int) -> Sample:
    r, g, b = (float(v) for v in rgb[y, x, :3])
    l_, a_, b_ = (float(v) for v in lab[y, x])
    return Sample(x=x, y=y, rgb=(r, g, b), lab=(l_, a_, b_))


def collect_samples(
    rgb: np.ndarray,
    lab: np.ndarray,
    stride: int,
    *,
    use_border: bool,
    seeds: Iterable[Seed] = (),
) -> List[Sample]:
    h, w = rgb.shape[:2]
    samples: List[Sample] = []
    if use_border:
        samples.extend(_sample_at(rgb, lab, x, y) for x, y in border_positions(w, h, stride))
    for seed in seeds:
        if seed.force:
            s = _sample_at(rgb, lab, seed.x, seed.y)
            samples.extend([s] * SEED_SAMPLE_WEIGHT)
    return samples


def cluster_samples(samples: Iterable[Sample], color_tol: float) -> List[Cluster]:
    """
    Greedy nearest-cluster assignment; returns clusters sorted by support (desc).
    """
    merge_distance = max(MIN_MERGE_DISTANCE, float(color_tol) * MERGE_DISTANCE_SCALE)
    clusters: List[Cluster] = []
    for sample in samples:
        best_i = -1
        best_d = float("inf")
        for i, cluster in enumerate(clusters):
            d = cluster.distance(sample.lab)
            if d < best_d:
                best_i, best_d = i, d
        if best_i >= 0 and best_d < merge_distance:
            clusters[best_i] = clusters[best_i].merge(sample)
        else:
            clusters.append(Cluster.from_sample(sample))
    # sorted() is stable: equal counts keep discovery order
    return sorted(clusters, key=lambda c: c.count, reverse=True)


def estimate_background(
    rgb: np.ndarray,
    lab: np.ndarray,
    stride: int,
    color_tol: float,
    *,
    use_border: bool,
    seeds: Sequence[Seed] = (),
) -> BackgroundEstimate:
    """
    Returns the background reference pair.

    Raises NoBackgroundEstimate when neither sampling nor seeds yield a color.
    """
    samples = collect_samples(rgb, lab, stride, use_border=use_border, seeds=seeds)
    ranked = cluster_samples(samples, color_tol)
    chosen = [c for c in ranked if c.count >= MIN_CLUSTER_SAMPLES][:MAX_BACKGROUND_CLUSTERS]

    for seed in seeds:
        if len(chosen) >= MAX_BACKGROUND_CLUSTERS:
            break
        synthetic = Cluster.from_sample(_sample_at(rgb, lab, seed.x, seed.y))
        if any(c.distance(synthetic.lab) <= SYNTHETIC_DEDUP_DISTANCE for c in chosen):
            continue
        chosen.append(synthetic)

    if not chosen:
        raise NoBackgroundEstimate(
            f"No background estimate from {len(samples)} samples ({len(ranked)} clusters, {len(seeds)} seeds)"
        )
    if len(chosen) == 1:
        return BackgroundEstimate(clusters=(chosen[0], chosen[0]), distinct=False)
    return BackgroundEstimate(clusters=(chosen[0], chosen[1]), distinct=True)
