"""``duet render`` — render one path from the command line."""

import argparse
import sys

from duet.cli._resolve import app_from_args


def parse_headers(values: list[str]) -> list[tuple[str, str]]:
    """Parse ``NAME:VALUE`` strings. Raises ``ValueError`` on a missing colon."""
    headers: list[tuple[str, str]] = []
    for value in values:
        name, sep, header_value = value.partition(":")
        if not sep or not name.strip():
            msg = f"Invalid header {value!r}; expected NAME:VALUE"
            raise ValueError(msg)
        headers.append((name.strip(), header_value.strip()))
    return headers


def run_render(args: argparse.Namespace) -> None:
    """Print the rendered document, or the redirect target.

    Exits with code 3 on a redirect so scripts can tell the cases apart.
    """
    app = app_from_args(args)
    try:
        headers = parse_headers(args.header)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    if args.markup_only:
        result = app.render(args.path, headers)
        if result.redirect is not None:
            print(f"redirect -> {result.redirect}")
            raise SystemExit(3)
        print(result.markup)
        print(f"split points: {', '.join(result.split_points) or '(none)'}", file=sys.stderr)
        return

    page = app.respond(args.path, headers)
    if page.location is not None:
        print(f"{page.status} redirect -> {page.location}")
        raise SystemExit(3)
    print(page.body, end="")
