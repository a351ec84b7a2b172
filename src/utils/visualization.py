"""
Visualization utilities for the rectification tool.

All functions save figures to disk rather than displaying them interactively,
making the module suitable for headless execution.
"""

import os
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend
import matplotlib.pyplot as plt

from src.geometry.quad import CORNER_LABELS


def _draw_quad(ax, img: np.ndarray, quad: np.ndarray) -> None:
    """Draw the image with the quad outline, filled area and labelled handles."""
    ax.imshow(img)
    closed = np.vstack([quad, quad[:1]])
    ax.fill(quad[:, 0], quad[:, 1], color=(0.41, 0.70, 1.0), alpha=0.12)
    ax.plot(closed[:, 0], closed[:, 1], "-", color=(0.41, 0.70, 1.0), linewidth=2)
    ax.plot(quad[:, 0], quad[:, 1], "o", color=(0.41, 0.70, 1.0),
            markersize=8, markeredgecolor="black")
    for (x, y), label in zip(quad, CORNER_LABELS):
        ax.text(x + 10, y - 10, label, color="black", fontsize=8, weight="bold",
                bbox=dict(boxstyle="round,pad=0.2", facecolor="white", alpha=0.6))


# ---------------------------------------------------------------------------
# Source with quad overlay
# ---------------------------------------------------------------------------

def save_quad_overlay(img: np.ndarray, quad: np.ndarray,
                      name: str, out_dir: str, dpi: int = 150) -> str:
    """Save the source image with the selected quad drawn on top."""
    fig, ax = plt.subplots(figsize=(10, 8))
    _draw_quad(ax, img, quad)
    ax.set_title(f"{name} – source {img.shape[1]}×{img.shape[0]}")
    ax.axis("off")

    path = os.path.join(out_dir, name, "quad_overlay.jpg")
    plt.tight_layout()
    plt.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path


# ---------------------------------------------------------------------------
# Side-by-side result
# ---------------------------------------------------------------------------

def save_rectified(img: np.ndarray, quad: np.ndarray, rectified: np.ndarray,
                   name: str, out_dir: str, dpi: int = 150) -> str:
    """Save the source (with quad) next to the rectified output."""
    fig, axes = plt.subplots(1, 2, figsize=(16, 8))

    _draw_quad(axes[0], img, quad)
    axes[0].set_title("Source + quad"); axes[0].axis("off")

    axes[1].imshow(rectified)
    axes[1].set_title(f"Rectified {rectified.shape[1]}×{rectified.shape[0]}")
    axes[1].axis("off")

    path = os.path.join(out_dir, name, "comparison.jpg")
    plt.tight_layout()
    plt.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    return path
