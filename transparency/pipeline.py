from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

import numpy as np

from .color import rgb_to_lab_array
from .contracts import RasterImage, SegmentOptions
from .edges import gradient_magnitude, luminance_map
from .errors import TransparencyError
from .grower import border_frontier, derive_tolerance, grow_region, seed_frontier
from .io import ImageDecoder, PillowDecoder, encode_png
from .preprocess import WorkingMeta, rescale_seeds, to_working_resolution
from .refine import refine_mask, write_alpha
from .sampler import BackgroundEstimate, estimate_background, sampling_stride

logger = logging.getLogger(__name__)

OptionsLike = Union[SegmentOptions, Mapping[str, Any], None]


@dataclass(frozen=True)
class StageTimings:
    prepare_s: float
    sample_s: float
    edges_s: float
    grow_s: float
    refine_s: float
    total_s: float


@dataclass(frozen=True)
class SegmentResult:
    image: RasterImage
    mask: np.ndarray
    background: BackgroundEstimate
    tolerance: float
    stride: int
    meta: WorkingMeta
    timings: StageTimings


def _coerce_options(options: OptionsLike) -> SegmentOptions:
    if options is None:
        return SegmentOptions()
    if isinstance(options, SegmentOptions):
        return options
    return SegmentOptions.model_validate(dict(options))


def run_pipeline(image: RasterImage, options: OptionsLike = None) -> SegmentResult:
    """
    Deterministic, linear pipeline:
      1) Working-resolution copy (+ seed rescale)
      2) Lab + luminance precompute
      3) Background sampling / clustering
      4) Edge guard
      5) Region growth
      6) Mask refine + alpha write-back

    Raises TransparencyError subclasses on adverse input; see `segment` for
    the pass-through variant.
    """
    opts = _coerce_options(options)
    if not isinstance(image, RasterImage):
        raise ValueError(f"Expected RasterImage, got {type(image).__name__}")
    t0 = time.perf_counter()

    # Prepare
    work, meta = to_working_resolution(image, opts.max_dimension)
    seeds = rescale_seeds(opts.active_seeds, meta)
    rgb = work[..., :3]
    lab = rgb_to_lab_array(rgb)
    lum = luminance_map(rgb)
    t_prep = time.perf_counter()

    # Sample
    stride = sampling_stride(meta.work_w, meta.work_h, opts.tile_guess)
    estimate = estimate_background(
        rgb,
        lab,
        stride,
        opts.color_tol,
        use_border=opts.uses_border,
        seeds=seeds,
    )
    tolerance = derive_tolerance(opts.color_tol, estimate)
    t_sample = time.perf_counter()
    logger.debug(
        "background=%s distinct=%s tolerance=%.2f stride=%d",
        [tuple(round(v) for v in c.rgb) for c in estimate.clusters],
        estimate.distinct,
        tolerance,
        stride,
    )

    # Edges
    grad = gradient_magnitude(lum)
    t_edges = time.perf_counter()

    # Grow
    frontier = []
    if opts.uses_border:
        frontier.extend(border_frontier(meta.work_w, meta.work_h, stride))
    frontier.extend(seed_frontier(seeds))
    visited = grow_region(lab, grad, estimate.labs, tolerance, opts.grad_keep, frontier)
    t_grow = time.perf_counter()

    # Refine
    mask = refine_mask(visited, opts.feather)
    write_alpha(work, mask)
    t_refine = time.perf_counter()

    return SegmentResult(
        image=RasterImage(pixels=work),
        mask=mask,
        background=estimate,
        tolerance=tolerance,
        stride=stride,
        meta=meta,
        timings=StageTimings(
            prepare_s=t_prep - t0,
            sample_s=t_sample - t_prep,
            edges_s=t_edges - t_sample,
            grow_s=t_grow - t_edges,
            refine_s=t_refine - t_grow,
            total_s=t_refine - t0,
        ),
    )


def segment(image: RasterImage, options: OptionsLike = None) -> RasterImage:
    """
    Best-effort background removal.

    Returns the input object itself, untouched, when the engine cannot
    produce a cutout. Invalid options or malformed buffers still raise.
    """
    opts = _coerce_options(options)
    try:
        return run_pipeline(image, opts).image
    except TransparencyError as e:
        logger.warning("Background removal skipped (%s): %s", type(e).__name__, e)
        return image


def _decoder_or_default(decoder: Optional[ImageDecoder]) -> ImageDecoder:
    return decoder if decoder is not None else PillowDecoder()


def remove_background_bytes(
    data: bytes,
    options: OptionsLike = None,
    decoder: Optional[ImageDecoder] = None,
) -> bytes:
    """
    Encoded image in, RGBA PNG out; the original bytes come back on failure.
    """
    opts = _coerce_options(options)
    try:
        image = _decoder_or_default(decoder).decode(data)
        return encode_png(run_pipeline(image, opts).image)
    except TransparencyError as e:
        logger.warning("Background removal skipped (%s): %s", type(e).__name__, e)
        return data


async def remove_background_async(
    data: bytes,
    options: OptionsLike = None,
    decoder: Optional[ImageDecoder] = None,
) -> bytes:
    """
    Same contract as `remove_background_bytes`; decoding runs off the event loop.
    """
    opts = _coerce_options(options)
    try:
        image = await asyncio.to_thread(_decoder_or_default(decoder).decode, data)
        return encode_png(run_pipeline(image, opts).image)
    except TransparencyError as e:
        logger.warning("Background removal skipped (%s): %s", type(e).__name__, e)
        return data
