#!/usr/bin/env python3
"""
Estimate percentiles of a file of numbers with two merged quantile summaries.

The numbers are dealt alternately into two summaries with different error factors,
as two shards of a stream would be, and the merged summary is queried.

Usage:
    gk-quantiles <numbers_file> [--epsilon-a EPSILON] [--epsilon-b EPSILON] [--phi PHI ...]

Arguments:
    numbers_file: Path to a file of comma or whitespace separated numbers
    --epsilon-a: Error factor of the first summary (default: 0.01)
    --epsilon-b: Error factor of the second summary (default: 0.04)
    --phi: Quantile to report, may be repeated (default: 0.90 and 0.95)
"""

import argparse
import logging
import math
import re
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Union

from gk_quantiles.core.sketch import QuantileSummary
from gk_quantiles.exceptions import ConfigurationError, InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_PHIS = (0.90, 0.95)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Estimate percentiles of a file of numbers using merged GK summaries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("numbers_file", type=str, help="Path to the file of numbers")

    parser.add_argument(
        "--epsilon-a",
        type=float,
        default=0.01,
        help="Error factor of the first summary (default: 0.01)",
    )

    parser.add_argument(
        "--epsilon-b",
        type=float,
        default=0.04,
        help="Error factor of the second summary (default: 0.04)",
    )

    parser.add_argument(
        "--phi",
        type=float,
        action="append",
        default=None,
        help="Quantile to report, may be repeated (default: 0.90 and 0.95)",
    )

    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def parse_number(token: str) -> Union[int, float]:
    try:
        return int(token)
    except ValueError:
        number = float(token)
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {token}")
    return number


def read_numbers(path: Path) -> List[Union[int, float]]:
    """Read every comma or whitespace separated number of a text file."""
    text = path.read_text()
    return [parse_number(token) for token in re.split(r"[,\s]+", text.strip()) if token]


def percentile_label(phi: float) -> str:
    return f"P{phi * 100:g}"


def estimate(
    numbers: Sequence[Union[int, float]], epsilon_a: float, epsilon_b: float
) -> QuantileSummary:
    """Deal numbers alternately into two summaries and merge them."""
    summary_a = QuantileSummary(epsilon=epsilon_a)
    summary_b = QuantileSummary(epsilon=epsilon_b)

    for i, number in enumerate(numbers):
        if i % 2 == 0:
            summary_a.insert(number)
        else:
            summary_b.insert(number)

    logger.debug(f"Summary A: {summary_a}, summary B: {summary_b}")
    return summary_a.merge(summary_b)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main function."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    numbers_path = Path(args.numbers_file)
    if not numbers_path.exists():
        print(f"Error: Numbers file '{numbers_path}' does not exist.", file=sys.stderr)
        return 1

    try:
        numbers = read_numbers(numbers_path)
    except ValueError as e:
        print(f"Error: Could not parse numbers file: {e}", file=sys.stderr)
        return 1

    if not numbers:
        print("Error: Numbers file is empty.", file=sys.stderr)
        return 1

    phis = args.phi or list(DEFAULT_PHIS)

    try:
        summary = estimate(numbers, args.epsilon_a, args.epsilon_b)
        results = [(phi, summary.quantile(phi)) for phi in phis]
    except (ConfigurationError, InvalidArgumentError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for phi, value in results:
        print(f"{percentile_label(phi)} = {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
