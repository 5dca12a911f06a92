"""Adapter protocol.

An adapter turns a page (and its layouts) into markup for one rendering
engine.  No base class required; the orchestrator checks the shape::

    class MyAdapter:
        engine = "mine"

        async def render_ssr(self, options: RenderOptions) -> AdapterResult:
            ...

Adapters own layout composition: they receive the full ``RenderOptions``
(component, props, layouts, template) and return the rendered document.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from warble.config import RenderOptions
    from warble.types import AdapterResult


class Adapter(Protocol):
    """Protocol for rendering engines."""

    engine: str

    async def render_ssr(self, options: RenderOptions) -> AdapterResult: ...
