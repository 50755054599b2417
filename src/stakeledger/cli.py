"""Command-line entry point: replay a scenario or run Monte Carlo checks."""

import argparse
import logging
import sys
from typing import List, Optional

from .config.loader import load_config
from .simulation.monte_carlo import MonteCarloRunner, summarize
from .simulation.runner import ScenarioRunner
from .units import format_units
from .validation.sanity_checks import validate_simulation_results

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="staking-ledger",
        description="Replay staking scenarios against the reward-accrual ledger.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Replay the configured scenario")
    run.add_argument("--config", default=None, help="YAML config (defaults to packaged defaults)")
    run.add_argument("--csv", default=None, help="Write snapshots to this CSV file")
    run.add_argument("--json", default=None, help="Write the full result to this JSON file")

    mc = sub.add_parser("montecarlo", help="Run random scenarios and check invariants")
    mc.add_argument("--config", default=None, help="YAML config (defaults to packaged defaults)")
    mc.add_argument("--runs", type=int, default=None, help="Number of runs")
    mc.add_argument("--seed", type=int, default=None, help="Base random seed")
    return parser


def _cmd_run(args) -> int:
    config = load_config(args.config)
    result = ScenarioRunner(config).run()
    decimals = config.token.decimals

    print(f"config {config.compute_hash()}: {len(config.scenario)} steps")
    final = result.snapshots[-1]
    for address, staked in final.balances.items():
        print(f"  {address:>12}  staked {format_units(staked, decimals):>14}"
              f"  pending {format_units(final.pending[address], decimals)}")
    for key, value in result.final_metrics.items():
        print(f"  {key}: {value}")
    for msg in result.rejected:
        print(f"  rejected {msg}")

    if args.csv:
        from .reporting.export import export_csv
        export_csv(result, args.csv)
    if args.json:
        from .reporting.export import export_json
        export_json(result, args.json)

    errors = [w for w in validate_simulation_results(result) if w.severity == "error"]
    for w in errors:
        print(f"ERROR [{w.category}] {w.message}", file=sys.stderr)
    return 1 if errors else 0


def _cmd_montecarlo(args) -> int:
    config = load_config(args.config)
    results = MonteCarloRunner(config).run(num_runs=args.runs, random_seed=args.seed)

    failures = 0
    for idx, result in enumerate(results):
        errors = [w for w in validate_simulation_results(result) if w.severity == "error"]
        for w in errors:
            print(f"run {idx}: ERROR [{w.category}] {w.message}", file=sys.stderr)
        failures += bool(errors)

    for key, value in summarize(results).items():
        print(f"{key}: {value}")
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "run":
        return _cmd_run(args)
    return _cmd_montecarlo(args)


if __name__ == "__main__":
    sys.exit(main())
