"""Command-line entry point for the trees walkthrough."""

from __future__ import annotations

import argparse
import logging
import sys
import time

from .config import (
    DEFAULT_CONF_LEVEL,
    DEFAULT_N_CLASSES,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_SEED,
    WalkthroughConfig,
)
from .walkthrough import print_walkthrough, run_walkthrough

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="timber",
        description=(
            "Fit the chapter's linear models to the trees table and write "
            "tidy tables, diagnostics and figures."
        ),
    )
    parser.add_argument(
        "--outdir",
        default=str(DEFAULT_OUTPUT_DIR),
        help="Directory for tables, figures and the log (default: %(default)s).",
    )
    parser.add_argument(
        "--conf-level",
        type=float,
        default=DEFAULT_CONF_LEVEL,
        help="Confidence level for coefficient intervals (default: %(default)s).",
    )
    parser.add_argument(
        "--n-classes",
        type=int,
        default=DEFAULT_N_CLASSES,
        help="Number of quantile height classes (default: %(default)s).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help="Seed for the synthetic group column (default: %(default)s).",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip figure and caption generation.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=LOG_LEVELS,
        help="Logging verbosity (default: %(default)s).",
    )
    return parser


def _configure_logging(config: WalkthroughConfig, level: str) -> None:
    config.output_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(config.log_path, mode="w"),
        ],
        force=True,
    )


def main(argv=None) -> int:
    """Parse arguments, run the walkthrough and print its summaries."""
    args = _build_arg_parser().parse_args(argv)
    try:
        config = WalkthroughConfig(
            output_dir=args.outdir,
            conf_level=args.conf_level,
            n_classes=args.n_classes,
            seed=args.seed,
            make_plots=not args.no_plots,
        )
    except ValueError as exc:
        print(f"timber: error: {exc}", file=sys.stderr)
        return 2

    _configure_logging(config, args.log_level)
    start_time = time.time()
    logging.info("Initializing trees walkthrough")

    try:
        results = run_walkthrough(config)
    except ValueError as exc:
        logging.error("Walkthrough failed: %s", exc)
        print(f"timber: error: {exc}", file=sys.stderr)
        return 2
    print_walkthrough(results)

    logging.info("Total execution time: %.2f seconds", time.time() - start_time)
    logging.info("Generated output files:")
    for name, path in results["tables"].items():
        logging.info("  - Table %s: %s", name, path)
    for name, path in results["figures"].items():
        logging.info("  - Figure %s: %s", name, path)
    logging.info("  - Log: %s", config.log_path)
    return 0
