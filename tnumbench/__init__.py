"""tnumbench — comparison harness for tnum multiplication algorithms.

Submodules
----------
config
    ``BenchConfig``: case counts, timing iterations, seed and method
    selection, with ``validate()``.

records
    JSON case records (``TestCase`` / ``MethodResult``), persistence and
    merging of results produced by other implementations.

runner
    Random operand generation and per-algorithm timing.

compare
    Precision classification against a reference method and the
    sampling soundness audit.

report
    termcolor console tables.

main
    CLI entry-point with subcommands: ``generate``, ``compare``,
    ``audit``, ``show``, ``methods``.
"""

from tnum_domain import __version__

__all__ = ["__version__"]
