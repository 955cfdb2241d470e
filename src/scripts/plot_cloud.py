#!/usr/bin/env python3
"""
Render a saved DLA cloud (.csv or .npz) to a PNG.
"""

import argparse
import os
import sys
from pathlib import Path

# Add src/ to path
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dla_cloud import export
from dla_cloud.render import SHADES, render


def format_title(meta, num_particles=None):
    """
    Title string with the key statistics from metadata.
    """
    if not meta:
        return None

    num = num_particles if num_particles is not None else meta.get("num", "?")
    seed = meta.get("seed")
    parts = [f"dim={meta.get('dim', '?')}", f"N={num}", f"seed={seed if seed is not None else '?'}"]

    stickiness = meta.get("stickiness")
    if stickiness is not None:
        parts.append(f"stick={stickiness:.2f}")
    stubbornness = meta.get("stubbornness")
    if stubbornness:
        parts.append(f"stub={stubbornness}")
    layout = meta.get("layout")
    if layout:
        parts.append(f"layout={layout}")

    return " | ".join(parts)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render a saved DLA cloud")
    parser.add_argument("file", help="Path to a .csv or .npz cloud")
    parser.add_argument("--out", default=None,
                        help="Output image path (auto-generated if not provided)")
    parser.add_argument("--cmap", default="magma", help="Matplotlib colormap (default: magma)")
    parser.add_argument("--shade", choices=SHADES, default="age",
                        help="Colour by growth order or by height (default: age)")
    parser.add_argument("--res", type=int, default=2048,
                        help="Output image width in pixels (default: 2048)")
    parser.add_argument("--dpi", type=int, default=300, help="DPI for output file (default: 300)")
    args = parser.parse_args(argv)

    if not os.path.exists(args.file):
        print(f"Error: file not found: {args.file}")
        return 1

    if args.out is None:
        input_path = Path(args.file)
        args.out = str(input_path.parent / f"{input_path.stem}_{args.cmap}.png")

    result = export.load_result(args.file)
    title = format_title(result.meta, num_particles=result.num_points)

    render(
        result,
        output=args.out,
        title=title,
        cmap=args.cmap,
        shade=args.shade,
        res=args.res,
        dpi=args.dpi,
        verbose=True,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
