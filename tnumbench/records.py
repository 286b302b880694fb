# tnumbench/records.py
"""
Case records exchanged between the harness and peer implementations.

One JSON document holds a list of cases; each case carries its two input
operands and one result per algorithm:

    {
      "raw_input_a": 17, "raw_input_b": 42,          (optional)
      "input_a": {"value": 16, "mask": 1},
      "input_b": {"value": 42, "mask": 1},
      "results": [
        {"method": "tnum_mul", "output": {...}, "avg_time_ns": 812.5,
         "correct": true}                              (optional)
      ]
    }

``correct`` records whether a result equals the output of the case's
first (base) method.  Records without it load with ``correct=None``.

External tools (e.g. a C build of the kernel routine) append their own
results under their own method name; ``merge_reference`` folds such a
file into ours, matching cases by position.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from tnum_domain import RecordFormatError, RecordMismatchError, Tnum

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MethodResult:
    method: str
    output: Tnum
    avg_time_ns: float = 0.0
    correct: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "method": self.method,
            "output": self.output.to_dict(),
            "avg_time_ns": self.avg_time_ns,
        }
        if self.correct is not None:
            data["correct"] = self.correct
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MethodResult:
        try:
            method = data["method"]
            output = data["output"]
        except (KeyError, TypeError) as exc:
            raise RecordFormatError(f"result record needs 'method' and 'output': {data!r}") from exc
        if not isinstance(method, str):
            raise RecordFormatError(f"method must be a string: {method!r}")
        avg = data.get("avg_time_ns", 0.0)
        if not isinstance(avg, (int, float)) or isinstance(avg, bool):
            raise RecordFormatError(f"avg_time_ns must be a number: {avg!r}")
        correct = data.get("correct")
        if correct is not None and not isinstance(correct, bool):
            raise RecordFormatError(f"correct must be a boolean: {correct!r}")
        return cls(method, Tnum.from_dict(output), float(avg), correct)


@dataclass
class TestCase:
    input_a: Tnum
    input_b: Tnum
    results: List[MethodResult] = field(default_factory=list)
    raw_input_a: Optional[int] = None
    raw_input_b: Optional[int] = None

    # keep pytest from collecting this class
    __test__ = False

    def result_for(self, method: str) -> Optional[MethodResult]:
        for result in self.results:
            if result.method == method:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.raw_input_a is not None:
            data["raw_input_a"] = self.raw_input_a
        if self.raw_input_b is not None:
            data["raw_input_b"] = self.raw_input_b
        data["input_a"] = self.input_a.to_dict()
        data["input_b"] = self.input_b.to_dict()
        data["results"] = [r.to_dict() for r in self.results]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TestCase:
        if not isinstance(data, Mapping):
            raise RecordFormatError(f"case record must be an object, got {type(data).__name__}")
        try:
            input_a = Tnum.from_dict(data["input_a"])
            input_b = Tnum.from_dict(data["input_b"])
        except KeyError as exc:
            raise RecordFormatError(f"case record is missing {exc.args[0]!r}") from exc
        raw_results = data.get("results", [])
        if not isinstance(raw_results, list):
            raise RecordFormatError("'results' must be a list")
        return cls(
            input_a=input_a,
            input_b=input_b,
            results=[MethodResult.from_dict(r) for r in raw_results],
            raw_input_a=data.get("raw_input_a"),
            raw_input_b=data.get("raw_input_b"),
        )


# ═══════════════════════════════════════════════════════════════════════════
#  PERSISTENCE
# ═══════════════════════════════════════════════════════════════════════════

def save_cases(path: Union[str, Path], cases: Sequence[TestCase]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = [case.to_dict() for case in cases]
    p.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    _log.info("Wrote %d case(s) to %s", len(cases), p)
    return p


def load_cases(path: Union[str, Path]) -> List[TestCase]:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RecordFormatError(f"{p}: not valid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, list):
        raise RecordFormatError(f"{p}: top level must be a list of cases")
    cases = [TestCase.from_dict(entry) for entry in data]
    _log.info("Loaded %d case(s) from %s", len(cases), p)
    return cases


def merge_reference(
    cases: Sequence[TestCase],
    reference: Sequence[TestCase],
) -> List[TestCase]:
    """
    Append the results of *reference* to *cases*, position by position.

    The two lists must describe the same inputs in the same order;
    results whose method already exists in the target case are skipped.
    """
    if len(cases) != len(reference):
        raise RecordMismatchError(
            f"case count differs: {len(cases)} vs {len(reference)} in the reference file"
        )
    merged: List[TestCase] = []
    for idx, (ours, theirs) in enumerate(zip(cases, reference), start=1):
        if ours.input_a != theirs.input_a or ours.input_b != theirs.input_b:
            raise RecordMismatchError(
                f"case {idx}: inputs {ours.input_a!r}, {ours.input_b!r} do not match "
                f"reference inputs {theirs.input_a!r}, {theirs.input_b!r}"
            )
        results = list(ours.results)
        known = {r.method for r in results}
        for r in theirs.results:
            if r.method in known:
                _log.debug("case %d: keeping local result for %s", idx, r.method)
                continue
            results.append(r)
        merged.append(
            TestCase(ours.input_a, ours.input_b, results, ours.raw_input_a, ours.raw_input_b)
        )
    return merged
