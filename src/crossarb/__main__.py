"""
Entry point for the arbitrage simulator.

Usage:
    python -m crossarb run [--input ticks.csv] [--export out.csv]
    python -m crossarb serve
    crossarb  # if installed via pip
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path


# Try to use uvloop for better performance
try:
    import uvloop

    uvloop.install()
    UVLOOP_ENABLED = True
except ImportError:
    UVLOOP_ENABLED = False


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="crossarb",
        description="Cross-exchange arbitrage simulator",
    )
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Run one simulation and print a summary")
    run.add_argument("--input", type=Path, help="Tick CSV to simulate (default: generated data)")
    run.add_argument("--export", type=Path, help="Write the simulated ticks to this CSV")
    run.add_argument("--snapshot", type=Path, help="Write the resulting state snapshot (JSON)")
    run.add_argument("--exchanges", type=int, help="Number of generated exchanges")
    run.add_argument("--points", type=int, help="Number of generated timestamps")
    run.add_argument("--seed", type=int, help="Random seed")

    subparsers.add_parser("serve", help="Start the dashboard API")
    return parser


def run_command(args: argparse.Namespace) -> int:
    """Execute the ``run`` command."""
    from crossarb.config.settings import get_settings
    from crossarb.core.errors import CrossArbError
    from crossarb.market.codec import read_csv_file, write_csv_file
    from crossarb.simulation import snapshot
    from crossarb.simulation.orchestrator import SimulationOrchestrator
    from crossarb.telemetry.logger import setup_logging
    from crossarb.telemetry.reporter import CLIReporter

    try:
        settings = get_settings()
        overrides = {
            "num_exchanges": args.exchanges,
            "num_time_points": args.points,
            "seed": args.seed,
        }
        updates = {k: v for k, v in overrides.items() if v is not None}
        if updates:
            settings = settings.model_validate({**settings.model_dump(), **updates})
    except ValueError as e:
        print(f"Configuration error: {e}")
        return 1

    async_logger = setup_logging(settings.log_level, settings.log_file)
    orchestrator = SimulationOrchestrator(settings)

    try:
        ticks = None
        skipped = 0
        if args.input:
            parsed = read_csv_file(args.input)
            ticks, skipped = parsed.ticks, parsed.skipped_rows
            print(f"Loaded {len(ticks)} ticks from {args.input} ({skipped} rows skipped)")

        state = asyncio.run(orchestrator.run(ticks, skipped_rows=skipped))

        if args.export:
            write_csv_file(args.export, state.ticks)
            print(f"Exported {len(state.ticks)} ticks to {args.export}")
        if args.snapshot:
            snapshot.save(args.snapshot, state)

        CLIReporter(orchestrator.metrics).display(state)
        return 0

    except (CrossArbError, OSError) as e:
        print(f"\nError: {e}")
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130

    finally:
        async_logger.stop()


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from crossarb import __version__

    args = build_parser().parse_args(argv)

    print(f"Cross-exchange arbitrage simulator v{__version__} (uvloop: {'on' if UVLOOP_ENABLED else 'off'})")

    if args.command == "serve":
        from crossarb.dashboard.server import main as serve

        serve()
        return 0

    if args.command is None:
        args = build_parser().parse_args(["run"])

    return run_command(args)


if __name__ == "__main__":
    sys.exit(main())
