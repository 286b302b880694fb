# tnumbench/runner.py
"""
Random case generation and timed execution of the multiplication
algorithms.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, List, Optional, Sequence, Tuple

from tnum_domain import MASK64, ContractViolation, MulAlgorithm, Tnum

from tnumbench.config import BenchConfig
from tnumbench.records import MethodResult, TestCase

_log = logging.getLogger(__name__)


def tnum_pair_from_raw(raw_a: int, raw_b: int) -> Tuple[Tnum, Tnum]:
    """
    Derive two operands from two random words.

    Bits set in both words are known ones in both operands; a bit set in
    only one word is a known one there and unknown in the other.
    """
    raw_a &= MASK64
    raw_b &= MASK64
    common = raw_a & raw_b
    a = Tnum(raw_a, common ^ raw_b)
    b = Tnum(raw_b, common ^ raw_a)
    return a, b


def random_pair(rng: random.Random) -> Tuple[int, int, Tnum, Tnum]:
    raw_a = rng.getrandbits(64)
    raw_b = rng.getrandbits(64)
    a, b = tnum_pair_from_raw(raw_a, raw_b)
    return raw_a, raw_b, a, b


def random_member(t: Tnum, rng: random.Random) -> int:
    """A uniformly chosen concrete value from γ(t)."""
    return t.value | (rng.getrandbits(64) & t.mask)


def time_method(
    alg: MulAlgorithm,
    a: Tnum,
    b: Tnum,
    iterations: int,
    clock: Callable[[], int] = time.perf_counter_ns,
    base: Optional[Tnum] = None,
) -> MethodResult:
    """
    Run *alg* ``iterations`` times and report the mean wall-clock cost.

    The result is marked correct when it equals *base*, the base
    method's output for the same inputs; without a base it is correct
    by definition.
    """
    if iterations < 1:
        raise ContractViolation(f"iterations must be at least 1, got {iterations}")
    start = clock()
    output = alg(a, b)
    total = clock() - start
    for _ in range(iterations - 1):
        start = clock()
        output = alg(a, b)
        total += clock() - start
    correct = base is None or output == base
    return MethodResult(alg.ident, output, total / iterations, correct)


def run_case(
    algorithms: Sequence[MulAlgorithm],
    a: Tnum,
    b: Tnum,
    iterations: int,
) -> List[MethodResult]:
    """Time every algorithm; the first one is the base the others are checked against."""
    results: List[MethodResult] = []
    base: Optional[Tnum] = None
    for alg in algorithms:
        result = time_method(alg, a, b, iterations, base=base)
        if base is None:
            base = result.output
        results.append(result)
    return results


def generate_cases(config: BenchConfig) -> List[TestCase]:
    """Generate ``config.cases`` random cases and time every selected method."""
    rng = random.Random(config.seed)
    algorithms = config.algorithms()
    _log.info(
        "Running %d case(s) x %d iteration(s) over %s",
        config.cases, config.iterations, ", ".join(a.ident for a in algorithms),
    )
    cases: List[TestCase] = []
    for idx in range(config.cases):
        raw_a, raw_b, a, b = random_pair(rng)
        results = run_case(algorithms, a, b, config.iterations)
        cases.append(TestCase(a, b, results, raw_a, raw_b))
        _log.debug("case %d/%d: %r * %r", idx + 1, config.cases, a, b)
    return cases
