"""
Headless front-end for the mandelview engine.

Usage examples:
  python -m mandelview render --res 1280x720 --center -0.745 0.113 --zoom 200 \
      --max-iter 1000 --out frame.png

  python -m mandelview ascii --res 40x40 --max-iter 10

  python -m mandelview bench --res 800x600,1920x1080 --workers 1,2,4,8 --runs 3
"""
from __future__ import annotations

import argparse
import csv
import logging
import os
import platform
import sys
import time
from typing import List, Optional, Sequence, Tuple

from mandelview.coloring.cosine import CosineColoring
from mandelview.fractals.base import RenderSettings
from mandelview.fractals.view import Camera
from mandelview.rendering.core import Renderer
from mandelview.utils.enums import PrecisionMode
from mandelview.utils.image_helpers import ascii_preview, save_png

logger = logging.getLogger("mandelview")

_PRECISIONS = {
    "f32": PrecisionMode.Single,
    "float32": PrecisionMode.Single,
    "f64": PrecisionMode.Double,
    "float64": PrecisionMode.Double,
    "double": PrecisionMode.Double,
    "mp": PrecisionMode.Arbitrary,
    "arbitrary": PrecisionMode.Arbitrary,
}

# --- Helpers -----------------------------------------------------------------

def parse_resolution(token: str) -> Tuple[int, int]:
    """
    Parse a resolution like "800x600".
    """
    token = token.strip().lower().replace(" ", "")
    try:
        w, h = token.split("x")
        return int(w), int(h)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid resolution: {token!r} (expected WxH)")


def parse_resolution_list(res_str: str) -> List[Tuple[int, int]]:
    """
    Parse resolutions like "800x600,1280x720".
    """
    return [parse_resolution(t) for t in res_str.split(",") if t.strip()]


def parse_int_list(token: str) -> List[int]:
    return [int(t) for t in token.split(",") if t.strip()]


def precision_from_tag(tag: str) -> PrecisionMode:
    try:
        return _PRECISIONS[tag.lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(f"Unsupported precision: {tag}")


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    return RenderSettings(
        max_iter=args.max_iter,
        radius=args.radius,
        epsilon=args.epsilon,
        precision=args.precision,
        workers=getattr(args, "threads", None),
        mp_dps=args.dps,
        iteration_scaling=args.scale_iter,
    )


def renderer_from_args(args: argparse.Namespace, width: int, height: int) -> Renderer:
    x, y = args.center
    camera = Camera(width, height, x_center=x, y_center=y, magnification=args.zoom)
    return Renderer(settings=settings_from_args(args), camera=camera,
                    coloring=CosineColoring())

# --- Commands ----------------------------------------------------------------

def cmd_render(args: argparse.Namespace) -> int:
    w, h = args.res
    renderer = renderer_from_args(args, w, h)
    frame = renderer.render_frame()
    save_png(frame, args.out)
    print(f"Saved {w}x{h} frame to {args.out} ({renderer.last_frame_ms:.1f} ms)")
    return 0


def cmd_ascii(args: argparse.Namespace) -> int:
    w, h = args.res
    renderer = renderer_from_args(args, w, h)
    escape = renderer.compute_escape()
    print(ascii_preview(escape.iterations, escape.max_iter))
    return 0


def benchmark_workers(renderer: Renderer, workers: int, runs: int) -> Tuple[float, float]:
    renderer.set_workers(workers)
    renderer.render_frame()   # warm-up (numba compilation, buffer allocation)
    times = []
    for _ in range(runs):
        start = time.perf_counter()
        renderer.render_frame()
        times.append(time.perf_counter() - start)
    avg = sum(times) / len(times)
    fps = 1.0 / avg if avg > 0 else 0.0
    return avg, fps


def cmd_bench(args: argparse.Namespace) -> int:
    cpu_info = platform.processor() or platform.machine() or "Unknown CPU"
    print("=== Hardware Summary ===")
    print("CPU:", cpu_info, f"({os.cpu_count()} logical cores)")
    print()

    if os.path.exists(args.csv):
        os.remove(args.csv)
    with open(args.csv, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Hardware Summary"])
        writer.writerow(["CPU", cpu_info])
        writer.writerow([])
        header = ["Resolution"]
        for n in args.workers:
            header.extend([f"{n} workers Time (s)", f"{n} workers FPS"])
        writer.writerow(header)

        for (w, h) in args.res:
            print(f"=== {w}x{h} ===")
            renderer = renderer_from_args(args, w, h)
            row = [f"{w}x{h}"]
            for n in args.workers:
                avg, fps = benchmark_workers(renderer, n, args.runs)
                print(f"{n:>4} workers  avg={avg:.4f}s  fps={fps:.2f}")
                row.extend([f"{avg:.4f}", f"{fps:.2f}"])
            writer.writerow(row)
            print()

    print(f"Benchmark results saved to {args.csv}")
    return 0

# --- CLI ---------------------------------------------------------------------

def _add_view_args(p: argparse.ArgumentParser, default_res: str) -> None:
    p.add_argument("--center", nargs=2, type=float, default=(0.0, 0.0), metavar=("X", "Y"),
                   help="Plane-space center")
    p.add_argument("--zoom", type=float, default=1.0, help="Magnification (> 0)")
    p.add_argument("--max-iter", type=int, default=256)
    p.add_argument("--radius", type=float, default=100.0, help="Escape radius")
    p.add_argument("--epsilon", type=float, default=0.1,
                   help="Derivative threshold for interior detection")
    p.add_argument("--precision", type=precision_from_tag, default=PrecisionMode.Double,
                   help="f32, f64 or mp")
    p.add_argument("--dps", type=int, default=30,
                   help="Decimal digits for --precision mp")
    p.add_argument("--scale-iter", action="store_true",
                   help="Grow the iteration budget with log(1 + zoom)")
    if default_res:
        p.add_argument("--res", type=parse_resolution, default=parse_resolution(default_res))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mandelview",
                                description="Escape-time Mandelbrot frames on the CPU.")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="-v for INFO, -vv for DEBUG logging")
    sub = p.add_subparsers(dest="command", required=True)

    pr = sub.add_parser("render", help="Render one frame to a PNG file")
    _add_view_args(pr, "800x600")
    pr.add_argument("--threads", type=int, default=None, help="Worker count (default: cpu count)")
    pr.add_argument("--out", type=str, default="mandelbrot.png")
    pr.set_defaults(func=cmd_render)

    pa = sub.add_parser("ascii", help="Print a text preview of the set")
    _add_view_args(pa, "40x40")
    pa.set_defaults(func=cmd_ascii)

    pb = sub.add_parser("bench", help="Time frames for several worker counts")
    _add_view_args(pb, "")
    pb.add_argument("--res", type=parse_resolution_list, default=[(800, 600), (1280, 720), (1920, 1080)],
                    help="Comma separated WxH list")
    pb.add_argument("--workers", type=parse_int_list, default=[1, os.cpu_count() or 1],
                    help="Comma separated worker counts")
    pb.add_argument("--runs", type=int, default=3)
    pb.add_argument("--csv", type=str, default="benchmark_results.csv")
    pb.set_defaults(func=cmd_bench)
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except ValueError as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
