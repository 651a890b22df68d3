"""
Command-line entry point.

Usage:
    python -m navbench                       # built-in demo scene
    python -m navbench scene.glb --plot out.png
    python -m navbench scene.obj --config run.json --query-runs 1000
"""

import argparse
import sys

from navbench import log


def _vec3(text):
    parts = text.split(",")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected x,y,z, got {text!r}")
    try:
        return tuple(float(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected x,y,z, got {text!r}") from None


def build_parser():
    parser = argparse.ArgumentParser(
        prog="navbench",
        description="Benchmark two navmesh backends on the same scene and compare their paths",
    )
    parser.add_argument(
        "scene",
        type=str,
        nargs="?",
        default=None,
        help="Scene file (.glb or .obj). Default: built-in demo scene",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="JSON run configuration",
    )
    parser.add_argument(
        "--backends",
        type=str,
        nargs=2,
        default=None,
        metavar=("A", "B"),
        help="Backends to compare (default: grid trigraph)",
    )
    parser.add_argument("--warmup", type=int, default=None, help="Generation warmup iterations")
    parser.add_argument("--runs", type=int, default=None, help="Generation timed iterations")
    parser.add_argument("--query-warmup", type=int, default=None, help="Find path warmup iterations")
    parser.add_argument("--query-runs", type=int, default=None, help="Find path timed iterations")
    parser.add_argument("--start", type=_vec3, default=None, help="Path start as x,y,z")
    parser.add_argument("--end", type=_vec3, default=None, help="Path end as x,y,z")
    parser.add_argument("--half-extents", type=_vec3, default=None, help="Snap box half extents as x,y,z")
    parser.add_argument(
        "--save-config",
        type=str,
        default=None,
        help="Write the effective configuration to this JSON file",
    )
    parser.add_argument("--plot", type=str, default=None, help="Save the comparison figure to this file")
    parser.add_argument("--show", action="store_true", help="Open the comparison figure")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def apply_overrides(config, args):
    """Command-line values take precedence over the configuration file."""
    from navbench.config import BenchmarkConfig, QueryConfig

    bench = config.benchmark
    config.benchmark = BenchmarkConfig.from_dict({
        "generation_warmup": args.warmup if args.warmup is not None else bench.generation_warmup,
        "generation_runs": args.runs if args.runs is not None else bench.generation_runs,
        "query_warmup": args.query_warmup if args.query_warmup is not None else bench.query_warmup,
        "query_runs": args.query_runs if args.query_runs is not None else bench.query_runs,
    })

    query = config.query
    config.query = QueryConfig(
        start=args.start or query.start,
        end=args.end or query.end,
        half_extents=args.half_extents or query.half_extents,
    )

    if args.backends:
        config.backends = list(args.backends)
    return config


def run(args):
    from navbench.backends import get_backend
    from navbench.config import RunConfig, load_config, save_config
    from navbench.harness import run_comparison
    from navbench.loaders import load_scene, make_demo_scene
    from navbench.report import format_summary

    config = load_config(args.config) if args.config else RunConfig()
    config = apply_overrides(config, args)
    if args.save_config:
        save_config(config, args.save_config)

    root = load_scene(args.scene) if args.scene else make_demo_scene()
    backend_a = get_backend(config.backends[0])
    backend_b = get_backend(config.backends[1])

    report = run_comparison(
        root,
        backend_a,
        backend_b,
        canonical=config.generation,
        start=config.query.start,
        end=config.query.end,
        half_extents=config.query.half_extents,
        generation_warmup=config.benchmark.generation_warmup,
        generation_runs=config.benchmark.generation_runs,
        query_warmup=config.benchmark.query_warmup,
        query_runs=config.benchmark.query_runs,
    )
    print(format_summary(report))

    if args.plot or args.show:
        from navbench import visualize

        figure = visualize.build_comparison_figure(report)
        if args.plot:
            figure.save(args.plot)
            log.info(f"[Main] Figure saved to {args.plot}")
        if args.show:
            visualize.show()
    return report


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    log.setup_logging(args.verbose)

    try:
        run(args)
    except Exception as e:
        log.error(e, "navbench run failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
