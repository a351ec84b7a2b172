"""
Image I/O helpers.

Thin wrappers around PIL and scikit-image that turn decoded images into the
H x W x 4 uint8 RGBA buffers the rectifier works on, write results back to
disk, and manage output directories.
"""

import os
import numpy as np
from PIL import Image
from skimage.color import gray2rgba


def load_rgba(path: str) -> np.ndarray:
    """Load an image file as an H x W x 4 uint8 RGBA array."""
    with Image.open(path) as im:
        return np.array(im.convert("RGBA"))


def as_rgba(img: np.ndarray) -> np.ndarray:
    """Coerce a grayscale, RGB or RGBA uint8 array to RGBA.

    Parameters
    ----------
    img : np.ndarray
        H x W, H x W x 3 or H x W x 4 uint8 image.

    Returns
    -------
    np.ndarray
        H x W x 4 uint8 C-contiguous array.  Added alpha is fully opaque.
    """
    img = np.asarray(img)
    if img.dtype != np.uint8:
        raise ValueError(f"expected a uint8 image, got dtype {img.dtype}")

    if img.ndim == 2:
        return gray2rgba(img, alpha=255)
    if img.ndim == 3 and img.shape[2] == 3:
        alpha = np.full(img.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([img, alpha], axis=2)
    if img.ndim == 3 and img.shape[2] == 4:
        return np.ascontiguousarray(img)
    raise ValueError(f"unsupported image shape {img.shape}")


def save_rgba(img: np.ndarray, path: str) -> None:
    """Write an RGBA buffer to *path*, creating parent directories.

    The format follows the file extension; formats without an alpha
    channel (e.g. JPEG) receive the RGB channels only.
    """
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    im = Image.fromarray(as_rgba(img))
    if os.path.splitext(path)[1].lower() in (".jpg", ".jpeg", ".bmp"):
        im = im.convert("RGB")
    im.save(path)


def ensure_output_dirs(names: list, base: str = "results") -> None:
    """Create output subdirectories for each job name.

    Parameters
    ----------
    names : list of str
        Job identifiers (one subdirectory is created per job).
    base : str
        Root output directory.
    """
    for name in names:
        os.makedirs(os.path.join(base, name), exist_ok=True)
