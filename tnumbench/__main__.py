"""
tnumbench/__main__.py
=====================

Entry point for ``python -m tnumbench``; see :mod:`tnumbench.main`.
"""

import sys

from tnumbench.main import main

if __name__ == "__main__":
    sys.exit(main())
