"""Command-line front end: ``bitbayes NETWORK.json --query B --evidence A=true``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from bitbayes.core.errors import BitBayesError
from bitbayes.core.types import Query
from bitbayes.inference.sampling import DEFAULT_NUM_SAMPLES, METHODS
from bitbayes.integration.serialization import load_network
from bitbayes.viz.distributions import format_weighted_set, plot_weighted_set

log = logging.getLogger(__name__)


def setup_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bitbayes",
        description="Approximate inference on a boolean Bayesian network",
    )
    parser.add_argument("network", help="Path to a JSON network file")
    parser.add_argument(
        "--query",
        required=True,
        help="Comma-separated query variables, e.g. 'B,C'",
    )
    parser.add_argument(
        "--evidence",
        default="",
        help="Comma-separated evidence, e.g. 'A=true,D=false'",
    )
    parser.add_argument(
        "--method",
        choices=sorted(METHODS) + ["all"],
        default="all",
        help="Sampling algorithm to run",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_NUM_SAMPLES,
        help="Number of samples per algorithm",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument(
        "--plot",
        default=None,
        metavar="PATH",
        help="Save a bar chart of the last result to PATH",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    methods = ["direct", "rejection", "likelihood"] if args.method == "all" else [args.method]
    try:
        network = load_network(args.network)
        query = Query.parse(args.query, args.evidence)
        result = None
        for method in methods:
            result = network.infer(query, method, args.samples, seed=args.seed)
            print(f"--- {method} ---")
            print(format_weighted_set(result))
    except (BitBayesError, ValueError, FileNotFoundError) as exc:
        log.debug("Inference failed", exc_info=True)
        print(f"bitbayes: error: {exc}", file=sys.stderr)
        return 2

    if args.plot and result is not None:
        plot_weighted_set(result, title=methods[-1], save_path=args.plot)
    return 0


if __name__ == "__main__":
    sys.exit(main())
