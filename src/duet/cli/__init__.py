"""Duet CLI — startup validation, one-off renders, and asset lookups.

Entry point registered as ``duet`` in ``pyproject.toml``::

    [project.scripts]
    duet = "duet.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``duet`` command."""
    parser = argparse.ArgumentParser(
        prog="duet",
        description="Duet — server rendering with code-split client hydration.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- duet check -------------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Validate view units and route trees")
    check_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:app)",
    )

    # -- duet render ------------------------------------------------------
    render_parser = subparsers.add_parser("render", help="Render one path and print the result")
    render_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    render_parser.add_argument("path", help="Request path to render (e.g. /users/42)")
    render_parser.add_argument(
        "--header",
        "-H",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Request header, repeatable",
    )
    render_parser.add_argument(
        "--markup-only",
        action="store_true",
        help="Print the view markup and split points instead of the full document",
    )

    # -- duet asset -------------------------------------------------------
    asset_parser = subparsers.add_parser("asset", help="Resolve a logical asset key")
    asset_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    asset_parser.add_argument("key", help="Logical asset key (e.g. main.js)")
    asset_parser.add_argument(
        "--domain",
        choices=("server", "client"),
        default="client",
        help="Manifest to consult (default: client)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "check":
        from duet.cli._check import run_check

        run_check(args)
    elif args.command == "render":
        from duet.cli._render import run_render

        run_render(args)
    elif args.command == "asset":
        from duet.cli._asset import run_asset

        run_asset(args)
