#!/usr/bin/env python3
"""
run_rectify.py – Quadrilateral Perspective Rectification

Loads configuration from configs/default.yaml (or a user-specified file),
rectifies the quad of every job defined in the config, and writes the
rectified images (plus optional comparison figures) to the results
directory.  A single image can also be processed straight from the
command line.

Usage
-----
    python run_rectify.py
    python run_rectify.py --config configs/default.yaml
    python run_rectify.py --jobs whiteboard document
    python run_rectify.py --image photo.jpg --quad 40 30 610 55 590 470 25 440
    python run_rectify.py --image photo.jpg --size 800 --maintain-aspect --flip
    python run_rectify.py --no-figures
"""

import argparse
import os
import sys
import time

import numpy as np
import yaml

# Ensure the project root is on the Python path when invoked directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.geometry.quad import (
    as_quad, clamp_quad, default_quad, flip_winding, output_size, rescale_quad,
)
from src.geometry.solver import SingularMatrixError
from src.rectification.warp import rectify
from src.utils.image_io import load_rgba, save_rgba, ensure_output_dirs
from src.utils.visualization import save_quad_overlay, save_rectified


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────

def load_config(path: str) -> dict:
    with open(path, "r") as fh:
        return yaml.safe_load(fh) or {}


def banner(text: str) -> None:
    width = 60
    print("\n" + "─" * width)
    print(f"  {text}")
    print("─" * width)


def resolve_quad(job: dict, img: np.ndarray, cfg: dict) -> np.ndarray:
    """Configured quad clamped to the image, or the default inset quad.

    A job may give its quad in the pixel space of a differently sized
    raster (e.g. a downscaled preview) via ``quad_size: [width, height]``;
    the quad is then rescaled to the loaded image first.
    """
    h, w = img.shape[:2]
    if job.get("quad") is not None:
        quad = job["quad"]
        if job.get("quad_size") is not None:
            quad = rescale_quad(quad, tuple(job["quad_size"]), (w, h))
        quad = clamp_quad(quad, w, h)
    else:
        inset = cfg.get("quad", {}).get("inset", 10)
        quad = default_quad(w, h, inset=inset)
    if job.get("flip", False):
        quad = flip_winding(quad)
    return quad


def resolve_size(job: dict, quad: np.ndarray, cfg: dict) -> tuple:
    out_cfg = cfg.get("output", {})
    base = job.get("size") or out_cfg.get("base_size", 512)
    keep = job.get("maintain_aspect", out_cfg.get("maintain_aspect", False))
    return output_size(base, quad, maintain_aspect=keep,
                       min_size=out_cfg.get("min_size", 64))


# ──────────────────────────────────────────────────────────────────────────────
# Per-job pipeline
# ──────────────────────────────────────────────────────────────────────────────

def run_job(job: dict, cfg: dict, results_dir: str, save_figures: bool) -> dict:
    """Rectify a single job and return summary metrics."""
    name = job["name"]
    banner(f"Job: {name}")

    metrics = {
        "job": name,
        "source": None,
        "output": None,
        "transparent": None,
        "status": "skipped",
    }

    # ── 1. Load image ─────────────────────────────────────────────────────────
    img = load_rgba(job["image"])
    metrics["source"] = f"{img.shape[1]}×{img.shape[0]}"
    print(f"  Loaded image  {metrics['source']}")

    # ── 2. Quad + output size ─────────────────────────────────────────────────
    quad = resolve_quad(job, img, cfg)
    corners = "  ".join(f"({x:.1f}, {y:.1f})" for x, y in quad)
    print(f"  Quad          {corners}")

    # ── 3. Rectify ────────────────────────────────────────────────────────────
    try:
        out_w, out_h = resolve_size(job, quad, cfg)
        print(f"  Output size   {out_w}×{out_h}")
        rectified = rectify(img, quad, out_w, out_h)
    except SingularMatrixError as exc:
        print(f"  Rectification skipped – degenerate quad ({exc})")
        return metrics
    except ValueError as exc:
        print(f"  Rectification skipped – unusable output size ({exc})")
        return metrics

    transparent = float(np.mean(rectified[:, :, 3] == 0))
    print(f"  Transparent   {100 * transparent:.1f}% of output pixels")

    out_path = os.path.join(results_dir, name, "rectified.png")
    save_rgba(rectified, out_path)
    print(f"  Saved rectified image → {out_path}")

    # ── 4. Figures ────────────────────────────────────────────────────────────
    if save_figures:
        dpi = cfg.get("visualization", {}).get("dpi", 150)
        save_quad_overlay(img, quad, name, results_dir, dpi=dpi)
        save_rectified(img, quad, rectified, name, results_dir, dpi=dpi)
        print(f"  Saved figures → {os.path.join(results_dir, name)}/")

    metrics.update(output=f"{out_w}×{out_h}", transparent=transparent,
                   status="ok")
    return metrics


# ──────────────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Rectify a quadrilateral region of an image to a rectangle"
    )
    p.add_argument(
        "--config", default="configs/default.yaml",
        help="Path to YAML configuration file (default: configs/default.yaml)",
    )
    p.add_argument(
        "--jobs", nargs="*", default=None,
        help="Subset of job names to process (default: all jobs in config)",
    )
    p.add_argument(
        "--image", default=None,
        help="Rectify this image instead of the configured jobs",
    )
    p.add_argument(
        "--quad", nargs=8, type=float, default=None,
        metavar=("X0", "Y0", "X1", "Y1", "X2", "Y2", "X3", "Y3"),
        help="Quad corners TL TR BR BL for --image (default: inset border)",
    )
    p.add_argument(
        "--quad-size", nargs=2, type=float, default=None, metavar=("W", "H"),
        help="Size of the raster the --quad corners were marked on "
             "(default: the image itself)",
    )
    p.add_argument(
        "--size", type=int, default=None,
        help="Base output size in pixels for --image",
    )
    p.add_argument(
        "--maintain-aspect", action="store_true",
        help="Derive the short output side from the quad's aspect ratio",
    )
    p.add_argument(
        "--flip", action="store_true",
        help="Swap the last two quad corners (reverse the winding)",
    )
    p.add_argument(
        "--no-figures", action="store_true",
        help="Skip the overlay / comparison figures",
    )
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Load configuration (optional for a single --image run)
    if os.path.exists(args.config):
        cfg = load_config(args.config)
    elif args.image:
        cfg = {}
    else:
        print(f"[ERROR] Config file not found: {args.config}")
        sys.exit(1)

    results_dir = cfg.get("results_dir", "results")

    if args.image:
        name = os.path.splitext(os.path.basename(args.image))[0]
        jobs = [{
            "name": name,
            "image": args.image,
            "quad": as_quad(np.reshape(args.quad, (4, 2))) if args.quad else None,
            "quad_size": args.quad_size,
            "size": args.size,
            "maintain_aspect": args.maintain_aspect,
            "flip": args.flip,
        }]
    else:
        jobs = cfg.get("jobs", [])

    # Optionally restrict to a subset of jobs
    if args.jobs:
        jobs = [j for j in jobs if j["name"] in args.jobs]
        if not jobs:
            print(f"[ERROR] No matching jobs found for: {args.jobs}")
            sys.exit(1)

    # Validate that image files exist
    for job in jobs:
        if not os.path.exists(job["image"]):
            print(f"[ERROR] Image not found: {job['image']}")
            sys.exit(1)

    ensure_output_dirs([j["name"] for j in jobs], base=results_dir)

    save_figures = (cfg.get("visualization", {}).get("enabled", True)
                    and not args.no_figures)

    banner("Quadrilateral Perspective Rectification")
    print(f"  Config  : {args.config if cfg else '(defaults)'}")
    print(f"  Jobs    : {[j['name'] for j in jobs]}")
    print(f"  Figures : {'enabled' if save_figures else 'disabled'}")
    print(f"  Output  : {results_dir}/")

    t0 = time.time()
    all_metrics = []

    for job in jobs:
        metrics = run_job(job, cfg, results_dir, save_figures)
        all_metrics.append(metrics)

    # ── Summary table ──────────────────────────────────────────────────────
    banner("Results Summary")
    header = f"{'Job':<14} {'Source':>11} {'Output':>11} {'Transp.':>8} {'Status':>8}"
    print(header)
    print("─" * len(header))
    for m in all_metrics:
        src = m["source"] or "–"
        out = m["output"] or "–"
        tr = f"{100*m['transparent']:.1f}%" if m["transparent"] is not None else "–"
        print(f"{m['job']:<14} {src:>11} {out:>11} {tr:>8} {m['status']:>8}")

    elapsed = time.time() - t0
    print(f"\nRectification complete in {elapsed:.1f}s")
    print(f"Results saved to: {os.path.abspath(results_dir)}/")
    return all_metrics


def cli():
    """Console-script entry point; exit status 0 unless an input is missing."""
    main()


if __name__ == "__main__":
    cli()
