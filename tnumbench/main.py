#!/usr/bin/env python3
"""tnumbench/main.py — CLI entry-point for the tnum comparison harness.

Usage examples
--------------
    # Time every algorithm on 1000 random pairs, 1000 calls each
    python -m tnumbench generate -n 1000 -i 1000 -o mul_test_results.json

    # Classify every result against the naive algorithm
    python -m tnumbench compare mul_test_results.json

    # ...or against results appended by another implementation
    python -m tnumbench compare mul_test_results.json \\
        --reference-file c_test_results.json --reference C_tnum_mul

    # Check soundness by sampling concrete operands
    python -m tnumbench audit -n 200 --samples 64

    # Multiply two tnums written as bit patterns or value:mask
    python -m tnumbench show 1xx 111

    # List the registered algorithms
    python -m tnumbench methods

Exit codes
----------
    0   Success.
    1   An audited algorithm produced an unsound result.
    2   Infrastructure failure (bad arguments, missing or malformed file).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from tnum_domain import (
    MulAlgorithm,
    Tnum,
    TnumError,
    tnum_from_pattern,
)
from tnum_domain import __version__

from tnumbench.compare import audit_cases, compare_cases, random_pairs
from tnumbench.config import DEFAULT_INCONSISTENCIES, DEFAULT_OUTPUT, BenchConfig
from tnumbench.records import load_cases, merge_reference, save_cases
from tnumbench.report import write_audit, write_methods, write_products, write_stats_table
from tnumbench.runner import generate_cases

_log = logging.getLogger("tnumbench")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_FINDINGS: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``tnumbench`` and ``tnum_domain`` loggers.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    for name in ("tnumbench", "tnum_domain"):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers[:] = [handler]


def parse_tnum(text: str) -> Tnum:
    """Accept ``value:mask`` (decimal or 0x-prefixed) or a bit pattern."""
    if ":" in text:
        value, _, mask = text.partition(":")
        try:
            return Tnum(int(value, 0), int(mask, 0))
        except ValueError as exc:
            raise argparse.ArgumentTypeError(f"bad value:mask pair {text!r}") from exc
    try:
        return tnum_from_pattern(text)
    except TnumError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _check_config(config: BenchConfig) -> bool:
    problems = config.validate()
    for problem in problems:
        _log.error("Invalid configuration: %s", problem)
    return not problems


# ===========================================================================
# Sub-commands
# ===========================================================================

def cmd_generate(args: argparse.Namespace) -> int:
    """Generate random cases, time each algorithm and write the records."""
    config = BenchConfig.from_namespace(args)
    if not _check_config(config):
        return EXIT_INFRA

    t0 = time.monotonic()
    cases = generate_cases(config)
    _log.info("Generated %d case(s) in %.3fs", len(cases), time.monotonic() - t0)

    path = save_cases(config.output, cases)
    print(f"Results saved to {path}")
    return EXIT_OK


def cmd_compare(args: argparse.Namespace) -> int:
    """Classify every stored result against a reference method."""
    cases = load_cases(args.results)
    if args.reference_file:
        cases = merge_reference(cases, load_cases(args.reference_file))

    report = compare_cases(cases, args.reference)
    print(f"Analysed {len(cases)} case(s)\n")
    write_stats_table(report)

    if report.inconsistencies:
        out = Path(args.inconsistencies)
        out.parent.mkdir(parents=True, exist_ok=True)
        payload = [item.to_dict() for item in report.inconsistencies]
        out.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        print(f"\n{len(payload)} differing result(s) saved to {out}")
    return EXIT_OK


def cmd_audit(args: argparse.Namespace) -> int:
    """Sample concrete operands and look for unsound products."""
    config = BenchConfig.from_namespace(args)
    if not _check_config(config):
        return EXIT_INFRA

    algorithms = config.algorithms()
    pairs = random_pairs(config.cases, config.seed)
    findings = audit_cases(algorithms, pairs, config.audit_samples, config.seed)
    write_audit(findings, len(pairs))

    unsound_expected = {alg.ident for alg in algorithms if not alg.sound}
    for method, violations in findings.items():
        if violations and method in unsound_expected:
            _log.info("%s is experimental; %d unsound case(s) expected", method, len(violations))
    if any(v for m, v in findings.items() if m not in unsound_expected):
        return EXIT_FINDINGS
    return EXIT_OK


def cmd_show(args: argparse.Namespace) -> int:
    """Multiply two tnums with every algorithm and print the outputs."""
    config = BenchConfig.from_namespace(args)
    if not _check_config(config):
        return EXIT_INFRA
    results = [(alg, alg(args.a, args.b)) for alg in config.algorithms()]
    write_products(args.a, args.b, results)
    return EXIT_OK


def cmd_methods(args: argparse.Namespace) -> int:
    """List the registered multiplication algorithms."""
    write_methods()
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _add_method_option(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-m", "--method", action="append", metavar="NAME",
        help="restrict to this algorithm (repeatable; default: all)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tnumbench",
        description="Compare tnum multiplication algorithms.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="increase log verbosity (-v info, -vv debug)",
    )
    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    p = sub.add_parser("generate", help="time algorithms on random cases")
    p.add_argument("-n", "--cases", type=int, default=1000)
    p.add_argument("-i", "--iterations", type=int, default=1000)
    p.add_argument("--seed", type=int)
    p.add_argument("-o", "--output", default=DEFAULT_OUTPUT)
    _add_method_option(p)
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("compare", help="classify results against a reference")
    p.add_argument("results", help="case records written by 'generate'")
    p.add_argument("--reference", default=MulAlgorithm.NAIVE.ident)
    p.add_argument("--reference-file", help="records from another implementation, same order")
    p.add_argument("--inconsistencies", default=DEFAULT_INCONSISTENCIES)
    p.set_defaults(func=cmd_compare)

    p = sub.add_parser("audit", help="check soundness by concrete sampling")
    p.add_argument("-n", "--cases", type=int, default=200)
    p.add_argument("--samples", dest="audit_samples", type=int, default=64)
    p.add_argument("--seed", type=int)
    _add_method_option(p)
    p.set_defaults(func=cmd_audit)

    p = sub.add_parser("show", help="multiply two tnums with every algorithm")
    p.add_argument("a", type=parse_tnum, help="bit pattern ('1x0') or value:mask")
    p.add_argument("b", type=parse_tnum)
    _add_method_option(p)
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("methods", help="list registered algorithms")
    p.set_defaults(func=cmd_methods)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return args.func(args)
    except TnumError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA
    except OSError as exc:
        _log.error("I/O error: %s", exc)
        return EXIT_INFRA


if __name__ == "__main__":
    sys.exit(main())
