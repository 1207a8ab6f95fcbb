import numpy as np
import pytest

from transparency.edges import gradient_magnitude, luminance_map


def test_luminance_weights():
    rgb = np.array([[[255, 255, 255], [255, 0, 0], [0, 0, 0]]], dtype=np.uint8)
    lum = luminance_map(rgb)
    assert lum.shape == (1, 3)
    assert lum[0, 0] == pytest.approx(255.0)
    assert lum[0, 1] == pytest.approx(0.2126 * 255)
    assert lum[0, 2] == 0.0


def test_luminance_ignores_alpha():
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    rgba[..., 1] = 100
    rgba[..., 3] = 7
    assert np.allclose(luminance_map(rgba), 0.7152 * 100)


def test_vertical_step_edge_magnitude():
    lum = np.zeros((6, 8), dtype=np.float64)
    lum[:, 5:] = 255.0
    grad = gradient_magnitude(lum)

    # Sobel gx = 4 * 255 on both sides of the step, normalized by 8
    assert np.allclose(grad[1:-1, 4], 127.5)
    assert np.allclose(grad[1:-1, 5], 127.5)
    assert np.allclose(grad[1:-1, 1:4], 0.0)
    assert np.allclose(grad[1:-1, 6], 0.0)


def test_border_is_unprotected():
    rng = np.random.default_rng(0)
    lum = rng.uniform(0, 255, size=(9, 11))
    grad = gradient_magnitude(lum)
    assert (grad[0, :] == 0).all()
    assert (grad[-1, :] == 0).all()
    assert (grad[:, 0] == 0).all()
    assert (grad[:, -1] == 0).all()
    assert (grad[1:-1, 1:-1] > 0).any()


def test_tiny_images_have_no_interior():
    assert (gradient_magnitude(np.full((2, 5), 9.0)) == 0).all()
    assert gradient_magnitude(np.zeros((1, 1))).shape == (1, 1)


def test_uniform_luminance_has_zero_gradient():
    assert np.allclose(gradient_magnitude(np.full((7, 7), 80.0)), 0.0)
