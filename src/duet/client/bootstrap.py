"""Serialized server state carried from the document to the client.

The shell-builder embeds the split points and request headers as JSON in a
``<script type="application/json">`` element; the client reads them back
before hydrating. Both halves of the format live here.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from duet.errors import BootstrapError

# JSON is embedded in HTML: keep "</script>" and comment openers inert.
_SCRIPT_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026"}


@dataclass(frozen=True, slots=True)
class Bootstrap:
    """State a client needs to hydrate a server-rendered document."""

    split_points: tuple[str, ...] = ()
    headers: Mapping[str, str] = field(default_factory=dict)


def encode_state(split_points: Iterable[str], headers: Mapping[str, str]) -> str:
    """Serialize bootstrap state for a JSON script element."""
    payload = json.dumps(
        {"splitPoints": list(split_points), "headers": dict(headers)},
        separators=(",", ":"),
        ensure_ascii=True,
    )
    return "".join(_SCRIPT_ESCAPES.get(ch, ch) for ch in payload)


def decode_state(raw: str) -> Bootstrap:
    """Parse the JSON written by ``encode_state()``."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Embedded state is not valid JSON: {exc}"
        raise BootstrapError(msg) from exc

    if not isinstance(data, dict):
        raise BootstrapError("Embedded state must be a JSON object")
    split_points = data.get("splitPoints", [])
    headers = data.get("headers", {})
    if not isinstance(split_points, list) or not all(isinstance(s, str) for s in split_points):
        raise BootstrapError("'splitPoints' must be a list of unit names")
    if not isinstance(headers, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
    ):
        raise BootstrapError("'headers' must map strings to strings")
    return Bootstrap(tuple(split_points), MappingProxyType(dict(headers)))


def read_bootstrap(document: str, state_id: str = "duet-state") -> Bootstrap:
    """Find and parse the embedded state script in an HTML document.

    Raises ``BootstrapError`` if the script is missing or malformed.
    """
    pattern = re.compile(
        rf'<script\b[^>]*(?<![\w-])id="{re.escape(state_id)}"[^>]*>(.*?)</script>',
        re.DOTALL | re.IGNORECASE,
    )
    found = pattern.search(document)
    if found is None:
        msg = f"No <script id={state_id!r}> state element in document"
        raise BootstrapError(msg)
    return decode_state(found.group(1))
