# tnumbench/report.py
"""
Console tables for the harness.

Colour goes through termcolor, which already honours ``NO_COLOR`` and
``FORCE_COLOR``; on top of that colour is dropped when the stream is not
a terminal.
"""

from __future__ import annotations

import sys
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

from termcolor import colored

from tnum_domain import MulAlgorithm, Tnum, tnum_sbin

from tnumbench.compare import ComparisonReport, Precision, SoundnessViolation

_PRECISION_COLORS: Dict[Precision, str] = {
    Precision.EQUAL: "green",
    Precision.LESS_PRECISE: "yellow",
    Precision.MORE_PRECISE: "cyan",
    Precision.INCOMPARABLE: "red",
}


def _use_color(stream: TextIO) -> bool:
    try:
        return hasattr(stream, "isatty") and stream.isatty()
    except ValueError:
        # closed stream
        return False


class Painter:
    """``termcolor.colored`` gated on whether the stream is a terminal."""

    def __init__(self, stream: TextIO, enabled: Optional[bool] = None) -> None:
        self.enabled = _use_color(stream) if enabled is None else enabled

    def __call__(self, text: str, color: Optional[str] = None, bold: bool = False) -> str:
        if not self.enabled:
            return text
        return colored(text, color, attrs=["bold"] if bold else None)


def write_stats_table(report: ComparisonReport, out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout
    paint = Painter(out)
    header = f"{'method':<24} {'avg time(ns)':>14}"
    for p in Precision:
        header += f" {p.value:>14}"
    out.write(paint(header, bold=True) + "\n")
    out.write("-" * len(header) + "\n")
    for stat in report.stats:
        name = stat.method
        if stat.method == report.reference:
            name += " *"
        line = f"{name:<24} {stat.avg_time:>14.1f}"
        for p in Precision:
            cell = f" {stat.percent(p):>13.1f}%"
            if stat.counts[p] and p is not Precision.EQUAL:
                cell = paint(cell, _PRECISION_COLORS[p])
            line += cell
        out.write(line + "\n")
    out.write(f"\n* reference: {report.reference}\n")
    if report.skipped:
        out.write(paint(f"{report.skipped} case(s) had no reference result\n", "yellow"))
    if not report.inconsistencies:
        out.write(paint(f"All methods agree with {report.reference}.\n", "green"))


def write_products(
    a: Tnum,
    b: Tnum,
    results: Sequence[Tuple[MulAlgorithm, Tnum]],
    out: Optional[TextIO] = None,
) -> None:
    out = out or sys.stdout
    paint = Painter(out)
    out.write(f"{'a':<20} {tnum_sbin(65, a)}\n")
    out.write(f"{'b':<20} {tnum_sbin(65, b)}\n")
    for alg, product in results:
        label = alg.ident if alg.sound else f"{alg.ident} (unsound)"
        out.write(f"{label:<20} {tnum_sbin(65, product)}  {paint(repr(product), 'cyan')}\n")


def write_audit(
    findings: Dict[str, List[SoundnessViolation]],
    pair_count: int,
    out: Optional[TextIO] = None,
) -> None:
    out = out or sys.stdout
    paint = Painter(out)
    for method, violations in findings.items():
        if not violations:
            status = paint("sound on all samples", "green")
        else:
            status = paint(f"{len(violations)}/{pair_count} case(s) unsound", "red", bold=True)
        out.write(f"{method:<24} {status}\n")
        if violations:
            v = violations[0]
            out.write(
                f"    e.g. {v.x:#x} * {v.y:#x} = {v.product:#x} not in {v.output!r}\n"
            )


def write_methods(out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout
    paint = Painter(out)
    for alg in MulAlgorithm:
        flag = paint("sound", "green") if alg.sound else paint("experimental", "yellow")
        out.write(f"  {alg.ident:<22} {alg.name:<12} {flag}\n")
    out.write(f"\n{len(MulAlgorithm)} method(s) available.\n")
