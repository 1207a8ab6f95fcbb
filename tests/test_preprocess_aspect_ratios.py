import unittest

import numpy as np

from transparency.contracts import RasterImage, Seed
from transparency.preprocess import rescale_seeds, to_working_resolution, working_size

MAX_DIMENSION = 512


class TestWorkingResolution(unittest.TestCase):
    def _make_rgba(self, h: int, w: int) -> RasterImage:
        # deterministic synthetic RGBA
        img = np.zeros((h, w, 4), dtype=np.uint8)
        img[..., 0] = 10
        img[..., 1] = 20
        img[..., 2] = 30
        img[..., 3] = 255
        return RasterImage(pixels=img)

    def test_working_size_wide(self):
        w, h, scale = working_size(1024, 256, MAX_DIMENSION)
        self.assertEqual((w, h), (512, 128))
        self.assertAlmostEqual(scale, 0.5)

    def test_working_size_tall(self):
        w, h, scale = working_size(300, 1000, MAX_DIMENSION)
        self.assertEqual(h, 512)
        self.assertEqual(w, round(300 * 0.512))

    def test_working_size_never_upscales(self):
        self.assertEqual(working_size(200, 100, MAX_DIMENSION), (200, 100, 1.0))
        self.assertEqual(working_size(512, 512, MAX_DIMENSION), (512, 512, 1.0))

    def test_working_size_extreme_aspect(self):
        w, h, _ = working_size(5000, 3, MAX_DIMENSION)
        self.assertEqual((w, h), (512, 1))

    def test_resize_wide(self):
        work, meta = to_working_resolution(self._make_rgba(256, 1024), MAX_DIMENSION)
        self.assertEqual(work.shape, (128, 512, 4))
        self.assertEqual(work.dtype, np.uint8)
        self.assertTrue(meta.resized)
        # area resampling of a flat image keeps the color
        self.assertEqual(work[64, 256].tolist(), [10, 20, 30, 255])

    def test_no_resize_returns_private_copy(self):
        image = self._make_rgba(40, 60)
        work, meta = to_working_resolution(image, MAX_DIMENSION)
        self.assertFalse(meta.resized)
        self.assertEqual(work.shape, (40, 60, 4))
        work[..., 3] = 0
        self.assertTrue((image.pixels[..., 3] == 255).all())

    def test_seeds_follow_downscale(self):
        _, meta = to_working_resolution(self._make_rgba(256, 1024), MAX_DIMENSION)
        seeds = rescale_seeds([Seed(x=1000, y=100, force=True), Seed(x=1023, y=255)], meta)
        self.assertEqual(seeds[0], Seed(x=500, y=50, force=True))
        self.assertEqual((seeds[1].x, seeds[1].y), (511, 127))

    def test_seeds_are_clamped(self):
        _, meta = to_working_resolution(self._make_rgba(10, 10), MAX_DIMENSION)
        (seed,) = rescale_seeds([Seed(x=99, y=3)], meta)
        self.assertEqual((seed.x, seed.y), (9, 3))

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            working_size(0, 10, MAX_DIMENSION)


if __name__ == "__main__":
    unittest.main()
