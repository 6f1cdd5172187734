"""Reference shell-builder: wrap server markup in a hydratable document.

The document carries three things the client needs:

- the server markup inside the root element,
- the split points and request headers as embedded JSON state,
- asset references resolved per domain: the stylesheet from the server
  manifest, scripts from the client manifest.
"""

from __future__ import annotations

from collections.abc import Mapping

from kida import Environment
from kida.template import Markup

from duet.assets.resolver import AssetResolver
from duet.client.bootstrap import encode_state
from duet.config import DuetConfig
from duet.errors import DuetError
from duet.render.orchestrator import RenderResult
from duet.templating import create_environment


def build_document(
    result: RenderResult,
    headers: Mapping[str, str],
    assets: AssetResolver,
    config: DuetConfig | None = None,
    *,
    env: Environment | None = None,
) -> str:
    """Render the full HTML document for a successful server render.

    Raises ``DuetError`` for redirect results: their markup must not be used.
    """
    if result.redirect is not None or result.markup is None:
        msg = f"Render result redirects to {result.redirect!r} and has no document"
        raise DuetError(msg)

    config = config or DuetConfig()
    env = env or create_environment(config)
    template = env.get_template("document.html")
    return template.render(
        {
            "title": config.title,
            "root_id": config.root_id,
            "state_id": config.state_id,
            "markup": Markup(result.markup),
            "state": Markup(encode_state(result.split_points, headers)),
            "stylesheet": assets.server(config.stylesheet),
            "scripts": [assets.client(key) for key in config.scripts],
        }
    )
