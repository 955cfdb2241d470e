#!/usr/bin/env python3
"""
Batch DLA Cloud Runner

Grows many independent clouds in parallel processes (one engine per
process) and records them in a JSON manifest.
"""

import argparse
import json
import multiprocessing
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict

# Add src/ to path
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dla_cloud import RunParams, build_engine, export, utils
from dla_cloud.seeds import SEED_LAYOUTS


def run_single_simulation(params: Dict[str, Any], output_path: str) -> Dict[str, Any]:
    """
    Grow one cloud and save it.

    Called in worker processes, so it lives at module level for pickling.
    """
    run = RunParams.from_dict(params)
    engine = build_engine(run)
    engine.grow(int(run.num_particles))
    export.save(output_path, engine, meta={"seed": run.seed, "layout": run.layout})

    return {
        "output_path": output_path,
        "seed": run.seed,
        "particles": len(engine),
        "rejections": engine.total_stats.rejections,
        "bounding_radius": engine.bounding_radius,
        "success": True,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a batch of DLA clouds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--N", type=int, required=True,
                        help="Number of particles grown per cloud")
    parser.add_argument("--count", type=int, required=True,
                        help="Number of clouds to generate")
    parser.add_argument("--dim", type=int, choices=[2, 3], default=2,
                        help="Cloud dimension (default: 2)")
    parser.add_argument("--layout", choices=sorted(SEED_LAYOUTS), default="origin",
                        help="Seed layout (default: origin)")
    parser.add_argument("--params", type=str, default=None,
                        help="JSON or TOML file with shared growth parameters")
    parser.add_argument("--jobs", type=int, default=1,
                        help="Number of parallel processes (default: 1)")
    parser.add_argument("--name", type=str, default="batch",
                        help="Batch name for output folder (default: 'batch')")
    parser.add_argument("--base-seed", type=int, default=42,
                        help="Base seed (each cloud gets base_seed + index) (default: 42)")
    parser.add_argument("--format", choices=["csv", "npz"], default="npz",
                        help="Output format per cloud (default: npz)")
    parser.add_argument("--out-dir", type=str, default="results/batches",
                        help="Parent directory for batch folders")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    shared = utils.load_params(args.params) if args.params else {}
    shared.update({"num_particles": args.N, "dim": args.dim, "layout": args.layout,
                   "verbose": False})

    first_seed = args.base_seed
    last_seed = args.base_seed + args.count - 1

    timestamp = utils.now_str()
    batch_dir = Path(args.out_dir) / f"{args.name}_{args.dim}d_N{args.N}_S{first_seed}-{last_seed}_{timestamp}"
    batch_dir.mkdir(parents=True, exist_ok=True)

    manifest = {
        "name": args.name,
        "params": shared,
        "count": args.count,
        "base_seed": args.base_seed,
        "jobs": args.jobs,
        "timestamp": timestamp,
    }
    manifest_path = batch_dir / "manifest.json"
    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    print("Batch generation started:")
    print(f"  Particles per cloud: {args.N}")
    print(f"  Total clouds: {args.count}")
    print(f"  Parallel jobs: {args.jobs}")
    print(f"  Output directory: {batch_dir}")
    print()

    tasks = []
    for i in range(args.count):
        seed = args.base_seed + i
        params = dict(shared, seed=seed)
        tasks.append((params, str(batch_dir / f"{seed}.{args.format}")))

    start_time = time.time()
    results = []
    failed = []

    # numba starts a threading layer in the parent; forked workers would inherit it locked
    spawn = multiprocessing.get_context("spawn")
    with ProcessPoolExecutor(max_workers=args.jobs, mp_context=spawn) as executor:
        future_to_task = {
            executor.submit(run_single_simulation, *task): task
            for task in tasks
        }

        completed = 0
        for future in as_completed(future_to_task):
            completed += 1
            task = future_to_task[future]
            try:
                result = future.result()
            except Exception as e:
                failed.append({"seed": task[0]["seed"], "error": str(e)})
                print(f"  [{completed}/{args.count}] FAILED: seed={task[0]['seed']} - {e}")
                continue
            results.append(result)
            print(
                f"  [{completed}/{args.count}] Completed: seed={result['seed']}, "
                f"particles={result['particles']}"
            )

    elapsed_time = time.time() - start_time

    manifest["results"] = {
        "total": args.count,
        "successful": len(results),
        "failed": len(failed),
        "elapsed_seconds": elapsed_time,
    }
    manifest["clouds"] = sorted(results, key=lambda r: r["seed"])
    if failed:
        manifest["failures"] = failed

    with open(manifest_path, "w") as f:
        json.dump(manifest, f, indent=2)

    print()
    print("=" * 60)
    print("Batch generation completed!")
    print(f"  Successful: {len(results)}/{args.count}")
    print(f"  Failed: {len(failed)}/{args.count}")
    print(f"  Total time: {elapsed_time:.2f} seconds")
    print(f"  Manifest: {manifest_path}")
    print("=" * 60)

    return 0 if not failed else 1


if __name__ == "__main__":
    sys.exit(main())
