"""Kida environment setup.

Creates the kida Environment used for the document shell and for
``TemplateView`` instances built by the app. The environment is created
once during ``App._freeze()`` and is immutable afterwards.
"""

from collections.abc import Callable
from typing import Any

from kida import DictLoader, Environment

from duet.config import DuetConfig

DOCUMENT_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
{% if title %}<title>{{ title }}</title>
{% end %}<link rel="stylesheet" href="{{ stylesheet }}">
</head>
<body>
<div id="{{ root_id }}">{{ markup }}</div>
<script id="{{ state_id }}" type="application/json">{{ state }}</script>
{% for src in scripts %}<script src="{{ src }}" defer></script>
{% end %}</body>
</html>
"""


def create_environment(
    config: DuetConfig,
    templates: dict[str, str] | None = None,
    globals_: dict[str, Any] | None = None,
    filters: dict[str, Callable[..., Any]] | None = None,
) -> Environment:
    """Create a kida Environment from duet configuration.

    ``document.html`` is always available; *templates* may override it or
    add named templates for views.
    """
    sources = {"document.html": DOCUMENT_TEMPLATE, **(templates or {})}
    env = Environment(
        loader=DictLoader(sources),
        autoescape=config.autoescape,
    )

    if filters:
        env.update_filters(filters)

    for name, value in (globals_ or {}).items():
        env.add_global(name, value)

    return env
