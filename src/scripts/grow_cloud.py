#!/usr/bin/env python3
"""
Single DLA Cloud Runner

Seeds an aggregation engine, grows it, and saves the cloud as CSV
(index,parent,x,y,z) or .npz. Parameters may come from a JSON/TOML file;
explicit flags override the file.
"""

import argparse
import sys
import time
from pathlib import Path

# Add src/ to path
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dla_cloud import RunParams, build_engine, export, utils
from dla_cloud.seeds import SEED_LAYOUTS

PARAM_FLAGS = (
    "num_particles",
    "dim",
    "seed",
    "layout",
    "particle_spacing",
    "attraction_distance",
    "min_move_distance",
    "stubbornness",
    "stickiness",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Grow a single DLA point cloud",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--params", type=str, default=None,
                        help="JSON or TOML file with run parameters")
    parser.add_argument("--N", dest="num_particles", type=int, default=None,
                        help="Number of particles to grow (default: 1000)")
    parser.add_argument("--dim", type=int, choices=[2, 3], default=None,
                        help="2 for a flat cloud, 3 for a volumetric one (default: 2)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Random seed for reproducibility")
    parser.add_argument("--layout", choices=sorted(SEED_LAYOUTS), default=None,
                        help="Seed layout (default: origin)")
    parser.add_argument("--spacing", dest="particle_spacing", type=float, default=None,
                        help="Distance between a joined particle and its parent")
    parser.add_argument("--attraction", dest="attraction_distance", type=float, default=None,
                        help="Capture radius")
    parser.add_argument("--min-move", dest="min_move_distance", type=float, default=None,
                        help="Minimum random walk step")
    parser.add_argument("--stubbornness", type=int, default=None,
                        help="Contacts a point needs before it accepts a join")
    parser.add_argument("--stickiness", type=float, default=None,
                        help="Probability of accepting a join")
    parser.add_argument("--out", type=str, default=None,
                        help="Output .csv or .npz path (auto-generated if not provided)")
    parser.add_argument("--render", type=str, default=None,
                        help="Also render the cloud to this PNG path")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser


def resolve_params(args: argparse.Namespace) -> RunParams:
    values = utils.load_params(args.params) if args.params else {}
    for name in PARAM_FLAGS:
        value = getattr(args, name)
        if value is not None:
            values[name] = value
    values["verbose"] = not args.quiet
    return RunParams.from_dict(values)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    params = resolve_params(args)

    if params.verbose:
        print(f"Growing {params.dim}-D cloud: N={params.num_particles}, "
              f"seed={params.seed}, layout={params.layout}")
    start_time = time.time()

    engine = build_engine(params)
    engine.grow(int(params.num_particles))

    elapsed_time = time.time() - start_time

    if args.out is None:
        output_dir = Path("results")
        output_dir.mkdir(exist_ok=True)
        args.out = str(
            output_dir / f"dla{params.dim}d_N{params.num_particles}_S{params.seed}_{utils.now_str()}.csv"
        )

    export.save(args.out, engine, meta={"seed": params.seed, "layout": params.layout})

    if args.render:
        from dla_cloud.render import render

        render(engine, output=args.render, shade="depth" if params.dim == 3 else "age",
               verbose=params.verbose)

    if params.verbose:
        print("\nGrowth completed")
        print(f"   Time elapsed: {elapsed_time:.2f} seconds")
        print(f"   Points: {len(engine)}")
        print(f"   Output saved to: {args.out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
