import numpy as np
import pytest


@pytest.fixture
def checkerboard():
    """Opaque 8 x 6 RGBA image with a distinct value in every pixel."""
    h, w = 6, 8
    ys, xs = np.mgrid[0:h, 0:w]
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[..., 0] = xs * 30
    img[..., 1] = ys * 40
    img[..., 2] = (xs + ys) * 10
    img[..., 3] = 255
    return img


@pytest.fixture
def solid_red():
    img = np.zeros((100, 100, 4), dtype=np.uint8)
    img[..., 0] = 255
    img[..., 3] = 255
    return img
