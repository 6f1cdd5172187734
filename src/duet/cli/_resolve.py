"""Locate the duet App named on the command line."""

import argparse
import importlib
import sys

from duet.app import App
from duet.units.loaders import split_import_string


def resolve_app(import_string: str) -> App:
    """Import ``module[:attr]`` (``attr`` defaults to ``app``) and return the App.

    A callable that is not itself an App is treated as an app factory.
    Import failures propagate; anything that does not produce an App raises
    ``TypeError``.
    """
    module_path, attr_name = split_import_string(import_string, "app")
    target = getattr(importlib.import_module(module_path), attr_name)

    if not isinstance(target, App) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(target, App):
        return target
    msg = f"{import_string!r} resolved to {type(target).__name__}, not a duet.App instance"
    raise TypeError(msg)


def app_from_args(args: argparse.Namespace) -> App:
    """``resolve_app(args.app)`` for subcommands: errors print and exit 1."""
    try:
        return resolve_app(args.app)
    except (ImportError, AttributeError, TypeError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
