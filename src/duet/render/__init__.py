"""Server rendering — request-scoped recording and orchestration."""

from duet.render.context import RenderContext
from duet.render.orchestrator import RenderOrchestrator, RenderResult
from duet.render.tree import render_chain, render_match

__all__ = [
    "RenderContext",
    "RenderOrchestrator",
    "RenderResult",
    "render_chain",
    "render_match",
]
