from __future__ import annotations

import argparse
import os
import time
from pathlib import Path

from dotenv import load_dotenv
from tqdm import tqdm

from transparency.config import (
    DEFAULT_COLOR_TOL,
    DEFAULT_FEATHER,
    DEFAULT_GRAD_KEEP,
    DEFAULT_MAX_DIMENSION,
    DEFAULT_TILE_GUESS,
)
from transparency.contracts import SegmentOptions
from transparency.errors import TransparencyError
from transparency.io import PillowDecoder, encode_png, read_bytes, save_bytes
from transparency.pipeline import run_pipeline


def _iter_images(input_dir: Path):
    exts = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff"}
    for p in sorted(input_dir.rglob("*")):
        if p.is_file() and p.suffix.lower() in exts:
            yield p


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Color-keyed background transparency (border/seed region growth).")
    parser.add_argument("--input", required=True, type=str, help="Input directory containing images.")
    parser.add_argument("--output", required=True, type=str, help="Output directory for RGBA PNGs.")
    parser.add_argument(
        "--color-tol",
        type=float,
        default=_env_float("TRANSPARENCY_COLOR_TOL", DEFAULT_COLOR_TOL),
        help="Lab distance tolerance for background pixels.",
    )
    parser.add_argument("--tile-guess", type=float, default=DEFAULT_TILE_GUESS, help="Expected backdrop tile size in pixels.")
    parser.add_argument("--grad-keep", type=float, default=DEFAULT_GRAD_KEEP, help="Edge magnitude above which detail is protected.")
    parser.add_argument("--feather", type=float, default=DEFAULT_FEATHER, help="Box-blur radius applied to the mask (0 disables).")
    parser.add_argument(
        "--max-dimension",
        type=int,
        default=_env_int("TRANSPARENCY_MAX_DIMENSION", DEFAULT_MAX_DIMENSION),
        help="Longest working side; larger inputs are downscaled.",
    )
    args = parser.parse_args()

    input_dir = Path(args.input)
    output_dir = Path(args.output)
    if not input_dir.exists():
        raise FileNotFoundError(f"Input dir not found: {input_dir}")

    options = SegmentOptions(
        color_tol=args.color_tol,
        tile_guess=args.tile_guess,
        grad_keep=args.grad_keep,
        feather=args.feather,
        max_dimension=args.max_dimension,
    )
    decoder = PillowDecoder()

    images = list(_iter_images(input_dir))
    if not images:
        print(f"No images found under {input_dir}")
        return 0

    skipped = 0
    total0 = time.perf_counter()
    for img_path in tqdm(images, desc="Processing", unit="img"):
        rel = img_path.relative_to(input_dir)
        out_path = (output_dir / rel).with_suffix(".png")
        data = read_bytes(str(img_path))
        try:
            result = run_pipeline(decoder.decode(data), options)
        except TransparencyError as e:
            # pass-through: keep the original bytes next to the cutouts
            skipped += 1
            save_bytes(data, str(out_path.with_suffix(img_path.suffix.lower())))
            print(f"{img_path.name}: skipped ({type(e).__name__}: {e})")
            continue
        save_bytes(encode_png(result.image), str(out_path))

        t = result.timings
        print(
            f"{img_path.name}: total={t.total_s:.3f}s "
            f"(prep={t.prepare_s:.3f}s sample={t.sample_s:.3f}s edges={t.edges_s:.3f}s "
            f"grow={t.grow_s:.3f}s refine={t.refine_s:.3f}s) tol={result.tolerance:.1f}"
        )

    total1 = time.perf_counter()
    print(f"Done. {len(images)} images ({skipped} passed through) in {total1-total0:.2f}s")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
