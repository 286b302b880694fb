# tnumbench/config.py
"""
Run configuration for the comparison harness.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import List, Optional

from tnum_domain import MulAlgorithm, UnknownAlgorithmError


DEFAULT_OUTPUT = "mul_test_results.json"
DEFAULT_INCONSISTENCIES = "inconsistencies.json"


@dataclass
class BenchConfig:
    """Tuning knobs for generating, timing and auditing cases."""
    cases: int = 1000
    iterations: int = 1000
    seed: Optional[int] = None
    methods: List[str] = field(default_factory=MulAlgorithm.idents)
    reference: str = MulAlgorithm.NAIVE.ident
    output: str = DEFAULT_OUTPUT
    audit_samples: int = 64

    def validate(self) -> List[str]:
        """Return a list of validation problems (empty if valid)."""
        problems: List[str] = []
        if self.cases <= 0:
            problems.append("cases must be positive")
        if self.iterations <= 0:
            problems.append("iterations must be positive")
        if self.audit_samples <= 0:
            problems.append("audit_samples must be positive")
        if not self.methods:
            problems.append("at least one method must be selected")
        for name in self.methods:
            try:
                MulAlgorithm.from_ident(name)
            except UnknownAlgorithmError as exc:
                problems.append(str(exc))
        return problems

    def algorithms(self) -> List[MulAlgorithm]:
        """The selected methods, in registry order, without duplicates."""
        chosen = {MulAlgorithm.from_ident(name) for name in self.methods}
        return [alg for alg in MulAlgorithm if alg in chosen]

    @classmethod
    def from_namespace(cls, args: argparse.Namespace) -> BenchConfig:
        kwargs = {}
        for name in ("cases", "iterations", "seed", "reference", "output", "audit_samples"):
            value = getattr(args, name, None)
            if value is not None:
                kwargs[name] = value
        methods = getattr(args, "method", None)
        if methods:
            kwargs["methods"] = list(methods)
        return cls(**kwargs)
