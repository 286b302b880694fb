# tnumbench/compare.py
"""
Precision classification and soundness auditing.

Every result is classified against a reference output for the same
inputs, using the containment order of the domain:

    EQUAL          same (value, mask)
    LESS_PRECISE   output ⊋ reference  (the output contains the reference)
    MORE_PRECISE   output ⊊ reference
    INCOMPARABLE   neither contains the other

Precision says nothing about correctness.  ``audit_cases`` checks the
soundness law directly by sampling concrete operands and testing that
their product is a member of each algorithm's output.
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tnum_domain import MASK64, MulAlgorithm, RecordError, Tnum, UnknownAlgorithmError, tnum_in

from tnumbench.records import TestCase
from tnumbench.runner import random_member, random_pair

_log = logging.getLogger(__name__)


class Precision(enum.Enum):
    EQUAL = "equal"
    LESS_PRECISE = "less precise"
    MORE_PRECISE = "more precise"
    INCOMPARABLE = "incomparable"


def classify(output: Tnum, reference: Tnum) -> Precision:
    if output == reference:
        return Precision.EQUAL
    if tnum_in(output, reference):
        return Precision.LESS_PRECISE
    if tnum_in(reference, output):
        return Precision.MORE_PRECISE
    return Precision.INCOMPARABLE


@dataclass
class MethodStats:
    method: str
    counts: Dict[Precision, int] = field(default_factory=lambda: {p: 0 for p in Precision})
    total_time: float = 0.0
    total_count: int = 0

    def record(self, precision: Precision, avg_time_ns: float) -> None:
        self.counts[precision] += 1
        self.total_count += 1
        self.total_time += avg_time_ns

    @property
    def avg_time(self) -> float:
        if not self.total_count:
            return 0.0
        return self.total_time / self.total_count

    def percent(self, precision: Precision) -> float:
        if not self.total_count:
            return 0.0
        return 100.0 * self.counts[precision] / self.total_count


@dataclass(frozen=True)
class Inconsistency:
    case_number: int
    input_a: Tnum
    input_b: Tnum
    reference_output: Tnum
    output: Tnum
    method: str
    precision: Precision

    def to_dict(self) -> Dict[str, object]:
        return {
            "case_number": self.case_number,
            "input_a": self.input_a.to_dict(),
            "input_b": self.input_b.to_dict(),
            "reference_output": self.reference_output.to_dict(),
            "output": self.output.to_dict(),
            "method": self.method,
            "precision": self.precision.value,
        }


@dataclass
class ComparisonReport:
    reference: str
    stats: List[MethodStats]
    inconsistencies: List[Inconsistency]
    skipped: int = 0

    def stats_for(self, method: str) -> Optional[MethodStats]:
        for s in self.stats:
            if s.method == method:
                return s
        return None


def _method_order(cases: Sequence[TestCase], reference: str) -> List[str]:
    # reference first, then first-seen order
    order = [reference]
    for case in cases:
        for result in case.results:
            if result.method not in order:
                order.append(result.method)
    return order


def compare_cases(cases: Sequence[TestCase], reference: str) -> ComparisonReport:
    """
    Classify every result of every case against the *reference* method's
    output for that case.  Cases without a reference result are skipped;
    if no case has one, ``RecordError`` is raised.
    """
    try:
        if not MulAlgorithm.from_ident(reference).sound:
            _log.warning("Reference method %s is not sound; classifications are not meaningful.", reference)
    except UnknownAlgorithmError:
        # an external implementation's identifier
        _log.debug("Reference %s is not a registered algorithm", reference)

    order = _method_order(cases, reference)
    stats = {name: MethodStats(name) for name in order}
    inconsistencies: List[Inconsistency] = []
    skipped = 0

    for number, case in enumerate(cases, start=1):
        ref = case.result_for(reference)
        if ref is None:
            skipped += 1
            _log.debug("case %d has no %s result; skipped", number, reference)
            continue
        for result in case.results:
            precision = classify(result.output, ref.output)
            stats[result.method].record(precision, result.avg_time_ns)
            if precision is not Precision.EQUAL:
                inconsistencies.append(Inconsistency(
                    case_number=number,
                    input_a=case.input_a,
                    input_b=case.input_b,
                    reference_output=ref.output,
                    output=result.output,
                    method=result.method,
                    precision=precision,
                ))

    if skipped == len(cases):
        present = [name for name in order if name != reference]
        raise RecordError(
            f"no case has a result for reference method {reference!r}",
            hint=f"methods present: {', '.join(present)}" if present else "",
        )
    if skipped:
        _log.info("Skipped %d case(s) without a %s result", skipped, reference)
    return ComparisonReport(
        reference=reference,
        stats=[s for s in stats.values() if s.total_count],
        inconsistencies=inconsistencies,
        skipped=skipped,
    )


# ═══════════════════════════════════════════════════════════════════════════
#  SOUNDNESS AUDIT
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SoundnessViolation:
    method: str
    input_a: Tnum
    input_b: Tnum
    output: Tnum
    x: int
    y: int

    @property
    def product(self) -> int:
        return (self.x * self.y) & MASK64


def audit_pair(
    alg: MulAlgorithm,
    a: Tnum,
    b: Tnum,
    samples: int,
    rng: random.Random,
) -> Optional[SoundnessViolation]:
    """
    Check *samples* random concrete pairs against ``alg(a, b)``; the
    operands' minimum and maximum members are always included.
    """
    out = alg(a, b)
    pairs = [(a.umin(), b.umin()), (a.umax(), b.umax())]
    pairs += [(random_member(a, rng), random_member(b, rng)) for _ in range(samples)]
    for x, y in pairs:
        if not out.contains_value(x * y):
            return SoundnessViolation(alg.ident, a, b, out, x, y)
    return None


def audit_cases(
    algorithms: Iterable[MulAlgorithm],
    pairs: Iterable[Tuple[Tnum, Tnum]],
    samples: int,
    seed: Optional[int] = None,
) -> Dict[str, List[SoundnessViolation]]:
    rng = random.Random(seed)
    algorithms = list(algorithms)
    findings: Dict[str, List[SoundnessViolation]] = {alg.ident: [] for alg in algorithms}
    for a, b in pairs:
        for alg in algorithms:
            violation = audit_pair(alg, a, b, samples, rng)
            if violation is not None:
                findings[alg.ident].append(violation)
    return findings


def random_pairs(count: int, seed: Optional[int] = None) -> List[Tuple[Tnum, Tnum]]:
    rng = random.Random(seed)
    out: List[Tuple[Tnum, Tnum]] = []
    for _ in range(count):
        _raw_a, _raw_b, a, b = random_pair(rng)
        out.append((a, b))
    return out
