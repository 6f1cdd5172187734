"""``duet check`` — startup validation command.

Resolves an import string to a duet App and validates its view units and
route trees, printing results to stdout.  Exits with code 1 on problems.
"""

import argparse

from duet.cli._resolve import app_from_args


def run_check(args: argparse.Namespace) -> None:
    """Validate a duet app.

    Delegates to ``App.check()``, which prints validation results and
    raises ``SystemExit(1)`` on failure.
    """
    app = app_from_args(args)
    app.check()
