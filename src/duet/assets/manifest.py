"""Asset manifests: logical asset names -> content-addressed file names.

A build step writes one manifest per asset domain (server and client) as a
flat JSON object::

    {"main.js": "main.3f9a1c.js", "main.css": "main.77b0e2.css"}

Manifests are loaded once and never mutated. Without a manifest (development,
or before the first build) lookups fall back to ``<static_url>/<key>``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType

from duet.errors import ConfigurationError, ManifestDomainError

logger = logging.getLogger("duet.assets")


class AssetDomain(Enum):
    SERVER = "server"
    CLIENT = "client"


@dataclass(frozen=True, slots=True)
class Manifest(Mapping[str, str]):
    """An immutable manifest for one asset domain."""

    domain: AssetDomain
    entries: Mapping[str, str] = field(default_factory=dict)
    source: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __getitem__(self, key: str) -> str:
        return self.entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        origin = f" from {self.source}" if self.source else ""
        return f"<Manifest {self.domain.value}{origin}: {len(self.entries)} entries>"


def fallback_path(logical_key: str, static_url: str = "/static") -> str:
    """Conventional path used when a manifest has no entry for *logical_key*."""
    return f"{static_url.rstrip('/')}/{logical_key.lstrip('/')}"


def resolve(
    logical_key: str,
    manifest: Mapping[str, str] | None,
    *,
    domain: AssetDomain | None = None,
    static_url: str = "/static",
) -> str:
    """Map a logical asset key to its physical path.

    Pure: returns the manifest entry when present, otherwise the conventional
    fallback. When *domain* is given and *manifest* is a ``Manifest`` of the
    other domain, raises ``ManifestDomainError``.

    Usage::

        resolve("main.js", {"main.js": "main.abc123.js"})  # "main.abc123.js"
        resolve("main.js", {})                             # "/static/main.js"
    """
    if domain is not None and isinstance(manifest, Manifest) and manifest.domain is not domain:
        msg = (
            f"Looked up {domain.value} asset {logical_key!r} "
            f"in the {manifest.domain.value} manifest"
        )
        raise ManifestDomainError(msg)
    if manifest is not None:
        physical = manifest.get(logical_key)
        if physical is not None:
            return physical
    return fallback_path(logical_key, static_url)


def load_manifest(path: str | Path, domain: AssetDomain) -> Manifest | None:
    """Read a manifest document written by the build step.

    Returns ``None`` when the file does not exist (development mode).
    Raises ``ConfigurationError`` when it exists but is not a flat JSON
    object of strings.
    """
    manifest_path = Path(path)
    if not manifest_path.is_file():
        logger.info("No %s manifest at %s; using fallback asset paths", domain.value, manifest_path)
        return None

    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Cannot read {domain.value} manifest {manifest_path}: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, dict):
        msg = f"{domain.value} manifest {manifest_path} must be a JSON object"
        raise ConfigurationError(msg)
    bad = sorted(k for k, v in data.items() if not isinstance(v, str))
    if bad:
        msg = f"{domain.value} manifest {manifest_path} has non-string entries: {', '.join(bad)}"
        raise ConfigurationError(msg)

    logger.debug("Loaded %s manifest %s (%d entries)", domain.value, manifest_path, len(data))
    return Manifest(domain, data, source=str(manifest_path))
