import numpy as np
import pytest
from pydantic import ValidationError

from transparency.contracts import RasterImage, Seed, SegmentOptions


def test_defaults():
    opts = SegmentOptions()
    assert opts.color_tol == 10
    assert opts.tile_guess == 16
    assert opts.grad_keep == 10
    assert opts.feather == 2
    assert opts.seed_points == ()
    assert opts.mode == "auto"
    assert opts.max_dimension == 512


def test_camel_case_payload():
    opts = SegmentOptions.model_validate(
        {
            "colorTol": 14,
            "tileGuess": 8,
            "gradKeep": 6,
            "feather": 0,
            "seedPoints": [{"x": 3, "y": 4, "force": True}],
            "mode": "auto+seed",
            "maxDimension": 256,
        }
    )
    assert opts.color_tol == 14
    assert opts.seed_points == (Seed(x=3, y=4, force=True),)
    assert opts.uses_border and opts.uses_seeds


def test_seeds_ignored_in_auto_mode():
    opts = SegmentOptions(seed_points=[Seed(x=1, y=1, force=True)])
    assert opts.active_seeds == ()
    assert SegmentOptions(mode="seed", seed_points=[Seed(x=1, y=1)]).active_seeds == (Seed(x=1, y=1),)


@pytest.mark.parametrize(
    "payload",
    [
        {"color_tol": -1},
        {"tile_guess": 0},
        {"feather": -0.5},
        {"max_dimension": 0},
        {"mode": "magic"},
        {"seed_points": [{"x": -1, "y": 0}]},
        {"unknown": 1},
    ],
)
def test_malformed_options_fail_fast(payload):
    with pytest.raises(ValidationError):
        SegmentOptions.model_validate(payload)


def test_options_are_frozen():
    opts = SegmentOptions()
    with pytest.raises(ValidationError):
        opts.feather = 5


def test_raster_image_validation():
    with pytest.raises(ValueError):
        RasterImage(pixels=np.zeros((4, 4, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        RasterImage(pixels=np.zeros((4, 4, 4), dtype=np.float32))


def test_raster_image_from_rgb():
    img = RasterImage.from_array(np.full((3, 5, 3), 7, dtype=np.uint8))
    assert (img.width, img.height) == (5, 3)
    assert (img.pixels[..., 3] == 255).all()


def test_fractional_tile_hint_is_accepted():
    assert SegmentOptions(tile_guess=16.5).tile_guess == 16.5
    assert SegmentOptions.model_validate({"tileGuess": 8.25}).tile_guess == 8.25
