import warnings

import numpy as np
import pytest
from skimage.transform import estimate_transform

from src.geometry.homography import (
    apply_homography,
    check_nondegenerate,
    compute_homography,
    destination_rectangle,
)
from src.geometry.quad import flip_winding
from src.geometry.solver import SingularMatrixError

QUADS = [
    [[0, 0], [100, 0], [100, 100], [0, 100]],
    [[10, 10], [90, 12], [88, 85], [12, 90]],
    [[12.5, 20.25], [180.75, 8.5], [195.0, 140.0], [5.5, 120.0]],
    [[300, 40], [620, 110], [580, 470], [260, 400]],
]


def test_destination_rectangle_uses_last_pixel_centres():
    rect = destination_rectangle(50, 30)
    assert np.array_equal(rect, [[0, 0], [49, 0], [49, 29], [0, 29]])


def test_pure_scale_is_exact():
    quad = [[0, 0], [98, 0], [98, 98], [0, 98]]
    H = compute_homography(quad, destination_rectangle(50, 50))
    expected = np.array([[2.0, 0.0, 0.0],
                         [0.0, 2.0, 0.0],
                         [0.0, 0.0, 1.0]])
    assert np.array_equal(H, expected)


def test_full_image_quad_scale_follows_rectangle_convention():
    quad = [[0, 0], [100, 0], [100, 100], [0, 100]]
    H = compute_homography(quad, destination_rectangle(50, 50))
    assert np.allclose(H, [[100 / 49, 0, 0], [0, 100 / 49, 0], [0, 0, 1]],
                       atol=1e-12)


def test_identity_when_quad_equals_rectangle():
    rect = destination_rectangle(8, 6)
    H = compute_homography(rect, rect)
    assert np.array_equal(H, np.eye(3))


@pytest.mark.parametrize("quad", QUADS)
def test_corners_round_trip(quad):
    rect = destination_rectangle(64, 48)
    H = compute_homography(quad, rect)
    assert H[2, 2] == 1.0
    sx, sy = apply_homography(H, rect[:, 0], rect[:, 1])
    assert np.max(np.abs(sx - np.asarray(quad)[:, 0])) < 1e-9
    assert np.max(np.abs(sy - np.asarray(quad)[:, 1])) < 1e-9


@pytest.mark.parametrize("quad", QUADS)
def test_agrees_with_skimage(quad):
    rect = destination_rectangle(64, 48)
    H = compute_homography(quad, rect)
    tform = estimate_transform("projective", rect, np.asarray(quad, dtype=float))
    reference = tform.params / tform.params[2, 2]
    assert np.allclose(H, reference, rtol=1e-6, atol=1e-9)


@pytest.mark.parametrize("quad", [
    [[0, 0], [50, 0], [100, 0], [0, 100]],        # three on the top edge
    [[0, 0], [0, 0], [100, 100], [0, 100]],       # duplicate corner
    [[0, 0], [100, 0], [50, 50], [0, 100]],       # BR on the TR-BL diagonal
    [[5, 5], [5, 5], [5, 5], [5, 5]],             # collapsed
])
def test_degenerate_quads_are_singular(quad):
    with pytest.raises(SingularMatrixError):
        compute_homography(quad, destination_rectangle(50, 50))


def test_degenerate_rectangle_is_singular():
    quad = QUADS[1]
    with pytest.raises(SingularMatrixError):
        compute_homography(quad, destination_rectangle(1, 50))


def test_nearly_collinear_but_valid_quad_passes():
    check_nondegenerate(np.array([[0, 0], [1000, 0], [1000, 1000], [0, 1000.0]]))
    check_nondegenerate(np.array([[0, 0], [100, 0.5], [200, 0], [0, 100.0]]))


def test_winding_swap_changes_homography():
    quad = QUADS[1]
    rect = destination_rectangle(50, 50)
    H = compute_homography(quad, rect)
    H_flipped = compute_homography(flip_winding(quad), rect)
    assert np.all(np.isfinite(H_flipped))
    assert not np.allclose(H, H_flipped)


def test_bad_quad_shape():
    with pytest.raises(ValueError):
        compute_homography([[0, 0], [1, 0], [1, 1]], destination_rectangle(4, 4))


def test_apply_homography_scalar():
    H = np.array([[2.0, 0.0, 3.0],
                  [0.0, 0.5, -1.0],
                  [0.0, 0.0, 1.0]])
    x, y = apply_homography(H, 4.0, 6.0)
    assert x == 11.0
    assert y == 2.0


def test_apply_homography_projective_division():
    H = np.array([[1.0, 0.0, 0.0],
                  [0.0, 1.0, 0.0],
                  [0.5, 0.0, 1.0]])
    x, y = apply_homography(H, 2.0, 4.0)
    assert x == pytest.approx(1.0)
    assert y == pytest.approx(2.0)


def test_apply_homography_keeps_array_shape():
    H = np.eye(3)
    ys, xs = np.mgrid[0:3, 0:5]
    sx, sy = apply_homography(H, xs, ys)
    assert sx.shape == (3, 5)
    assert np.array_equal(sx, xs)
    assert np.array_equal(sy, ys)


def test_zero_divisor_does_not_raise():
    H = np.array([[1.0, 0.0, 0.0],
                  [0.0, 1.0, 0.0],
                  [1.0, 0.0, 1.0]])
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        x, y = apply_homography(H, -1.0, 0.0)
    assert not np.isfinite(x)
    assert not np.isfinite(y)
