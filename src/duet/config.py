"""Application configuration.

DuetConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DuetConfig:
    """Duet configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = DuetConfig(debug=True, client_manifest="build/client.json")
    """

    # Development mode: manifest misses are expected and not logged as warnings
    debug: bool = False

    # Routing
    redirect_root: str = "/"  # Default target of the catch-all route
    max_client_redirects: int = 5

    # Assets
    static_url: str = "/static"  # Fallback prefix when no manifest entry exists
    server_manifest: str | Path | None = None
    client_manifest: str | Path | None = None
    stylesheet: str = "main.css"  # Server-domain key
    scripts: tuple[str, ...] = ("main.js",)  # Client-domain keys

    # Lazy loading
    load_timeout: float | None = 10.0  # Seconds per attempt, None disables
    load_retries: int = 1
    load_retry_delay: float = 0.05
    placeholder: str = ""  # Markup for a lazy unit that is not ready yet

    # Document shell
    title: str = ""
    root_id: str = "root"
    state_id: str = "duet-state"
    autoescape: bool = True
