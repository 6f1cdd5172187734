"""Per-domain asset resolution for the document shell.

``AssetResolver`` keeps the server and client manifests apart: each lookup
method only ever consults its own domain's manifest, and a manifest built
for one domain cannot be attached to the other.
"""

from __future__ import annotations

import logging
from pathlib import Path

from duet.assets.manifest import AssetDomain, Manifest, load_manifest, resolve
from duet.config import DuetConfig
from duet.errors import ManifestDomainError

logger = logging.getLogger("duet.assets")


class AssetResolver:
    """Resolves logical asset keys for both domains.

    Usage::

        assets = AssetResolver.from_config(config)
        assets.server("main.css")  # "main.77b0e2.css" or "/static/main.css"
        assets.client("main.js")

    A miss outside debug mode means the manifest is stale or missing and is
    logged once per key as a warning.
    """

    __slots__ = ("_client", "_server", "_warned", "client_path", "debug", "server_path", "static_url")

    def __init__(
        self,
        *,
        server: Manifest | None = None,
        client: Manifest | None = None,
        static_url: str = "/static",
        debug: bool = False,
        server_path: str | Path | None = None,
        client_path: str | Path | None = None,
    ) -> None:
        self._server = self._checked(server, AssetDomain.SERVER)
        self._client = self._checked(client, AssetDomain.CLIENT)
        self.static_url = static_url
        self.debug = debug
        self.server_path = server_path
        self.client_path = client_path
        self._warned: set[tuple[AssetDomain, str]] = set()

    @classmethod
    def from_config(cls, config: DuetConfig) -> AssetResolver:
        """Load both manifests from the paths in *config*."""
        resolver = cls(
            static_url=config.static_url,
            debug=config.debug,
            server_path=config.server_manifest,
            client_path=config.client_manifest,
        )
        resolver.reload()
        return resolver

    @staticmethod
    def _checked(manifest: Manifest | None, domain: AssetDomain) -> Manifest | None:
        if manifest is not None and manifest.domain is not domain:
            msg = f"A {manifest.domain.value} manifest cannot serve the {domain.value} domain"
            raise ManifestDomainError(msg)
        return manifest

    @property
    def server_manifest(self) -> Manifest | None:
        return self._server

    @property
    def client_manifest(self) -> Manifest | None:
        return self._client

    def reload(self) -> None:
        """Re-read both manifests from their paths (once per rebuild)."""
        self._server = load_manifest(self.server_path, AssetDomain.SERVER) if self.server_path else None
        self._client = load_manifest(self.client_path, AssetDomain.CLIENT) if self.client_path else None
        self._warned.clear()

    def server(self, logical_key: str) -> str:
        return self._resolve(logical_key, self._server, AssetDomain.SERVER)

    def client(self, logical_key: str) -> str:
        return self._resolve(logical_key, self._client, AssetDomain.CLIENT)

    def resolve(self, logical_key: str, domain: AssetDomain) -> str:
        if domain is AssetDomain.SERVER:
            return self.server(logical_key)
        return self.client(logical_key)

    def _resolve(self, logical_key: str, manifest: Manifest | None, domain: AssetDomain) -> str:
        if not self.debug and (manifest is None or logical_key not in manifest):
            if (domain, logical_key) not in self._warned:
                self._warned.add((domain, logical_key))
                logger.warning(
                    "No %s manifest entry for %r; serving fallback path. Is the build stale?",
                    domain.value, logical_key,
                )
        return resolve(logical_key, manifest, domain=domain, static_url=self.static_url)
