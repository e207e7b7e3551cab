#!/usr/bin/env python3
"""
Plot or summarise a recorded robot run.

Runs are the ``run_*`` directories written by DataCollector. Fault events from
``faults.csv`` are counted per kind and source before the plots are drawn.

    python -m motion_control.plot_results                  # newest run
    python -m motion_control.plot_results --run run_...    # by name or path
    python -m motion_control.plot_results --save --no-show
    python -m motion_control.plot_results --faults         # counts only
    python -m motion_control.plot_results --list
"""

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .config import TERM_BLUE, TERM_ORANGE, TERM_RESET
from .plot_styles import load_csv_data
from .visualization import SUMMARY_FILES, plot_run_summary

RUN_PREFIX = "run_"


def run_directories(results_dir: Path) -> List[Path]:
    """Recorded runs under ``results_dir``, oldest first (names carry the start time)."""
    if not results_dir.is_dir():
        return []
    return sorted(d for d in results_dir.iterdir() if d.is_dir() and d.name.startswith(RUN_PREFIX))


def find_latest_run(results_dir: Path) -> Path:
    runs = run_directories(results_dir)
    if not runs:
        raise FileNotFoundError(f"No recorded runs in {results_dir}")
    return runs[-1]


def resolve_run(results_dir: Path, run: Optional[str]) -> Path:
    """Pick a run by path, by name under ``results_dir``, or the newest one."""
    if run is None:
        return find_latest_run(results_dir)
    for candidate in (Path(run), results_dir / run):
        if candidate.is_dir():
            return candidate
    raise FileNotFoundError(f"Run not found: {run}")


def count_faults(run_dir: Path) -> Dict[Tuple[str, str], int]:
    """Number of recorded fault events per (kind, source)."""
    path = run_dir / "faults.csv"
    if not path.exists():
        return {}
    headers, rows = load_csv_data(path)
    kind, source = headers.index("kind"), headers.index("source")
    return dict(Counter((row[kind], row[source]) for row in rows))


def log_fault_summary(run_dir: Path) -> None:
    counts = count_faults(run_dir)
    if not counts:
        logging.info(f"{run_dir.name}: no fault events")
        return
    logging.info(f"{TERM_ORANGE}{run_dir.name}: {sum(counts.values())} fault events{TERM_RESET}")
    for (kind, source), n in sorted(counts.items()):
        logging.info(f"  {kind:<22} {source:<28} x{n}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Plot a recorded motion_control run")
    parser.add_argument(
        "--run", default=None, help="Run name under --results-dir, or a path (default: newest)"
    )
    parser.add_argument("--results-dir", default="results", help="Directory holding run_* folders")
    parser.add_argument("--save", action="store_true", help="Save PNGs into the run directory")
    parser.add_argument("--no-show", action="store_true", help="Do not open plot windows")
    parser.add_argument("--faults", action="store_true", help="Only log fault counts, no plots")
    parser.add_argument("--list", action="store_true", help="List recorded runs and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = build_parser().parse_args(argv)
    results_dir = Path(args.results_dir)

    if args.list:
        runs = run_directories(results_dir)
        if not runs:
            logging.info(f"No recorded runs in {results_dir}")
        for run_dir in runs:
            logging.info(f"  {run_dir.name}")
        return

    try:
        run_dir = resolve_run(results_dir, args.run)
    except FileNotFoundError as e:
        logging.error(str(e))
        sys.exit(1)

    logging.info(f"{TERM_BLUE}Run {run_dir}{TERM_RESET}")
    log_fault_summary(run_dir)
    if args.faults:
        return

    try:
        plot_run_summary(run_dir, save_plots=args.save, show_plots=not args.no_show)
    except FileNotFoundError as e:
        logging.error(f"{e} (a run needs {', '.join(SUMMARY_FILES)})")
        sys.exit(1)
    if args.save:
        logging.info(f"{TERM_BLUE}Saved plots to {run_dir}{TERM_RESET}")


if __name__ == "__main__":
    main()
