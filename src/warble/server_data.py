"""Server data: per-component ``load()`` functions and the data script.

Layouts and the page may each expose a ``load(ctx)`` function (sync or
async).  Layout results are shallow-merged outer to inner into
``layout_data``; the page result stays separate in ``page_data``.  Both
are serialized together into one ``window.__DATA__`` payload so the
client can reuse them.

A failing load function never aborts the render — the failure is logged
and that component simply contributes no data.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from warble._internal.invoke import invoke
from warble._internal.serialize import is_json_native, script_json
from warble.components import describe_component
from warble.errors import LoadError

if TYPE_CHECKING:
    from warble.context import RenderContext
    from warble.types import Metadata, ServerData

logger = logging.getLogger("warble.data")


def extract_load_function(component: Any) -> Callable[..., Any] | None:
    """Return the component's ``load`` function, or ``None``."""
    return describe_component(component).load


async def load_server_data(
    load_fn: Callable[..., Any] | None,
    context: RenderContext,
    *,
    component: Any = None,
) -> ServerData | None:
    """Call *load_fn* with the render context.

    Returns ``None`` when there is no function, when it returns nothing
    or a non-mapping, or when it raises.  Exceptions are logged, not
    propagated.
    """
    if load_fn is None:
        return None

    try:
        result = await invoke(load_fn, context)
    except Exception as exc:
        err = LoadError(component if component is not None else load_fn, exc)
        logger.error("%s", err, exc_info=exc)
        return None

    if not result:
        return None
    if not isinstance(result, Mapping):
        logger.warning(
            "Load function returned %s, expected a mapping; ignoring", type(result).__name__,
        )
        return None
    return dict(result)


def build_data_payload(
    *,
    metadata: Metadata,
    layout_data: ServerData,
    page_data: ServerData,
    context: RenderContext,
    layout_routes: list[str],
    page_route: str | None,
) -> dict[str, Any]:
    """Assemble the single client payload.

    Passthrough context values are included only when they are plain
    JSON data; request objects and the like stay on the server.
    """
    data: dict[str, Any] = {
        "metadata": metadata,
        "layoutData": layout_data,
        "pageData": page_data,
        "route": context.path,
        "url": context.url,
        "params": context.params,
        "layoutRoutes": layout_routes,
    }
    if page_route is not None:
        data["pageRoute"] = page_route

    for key, value in context.extra.items():
        if key not in data and is_json_native(value):
            data[key] = value
    return data


def generate_data_script(payload: Mapping[str, Any]) -> str:
    """Render the payload as an inline script assigning ``window.__DATA__``."""
    return f"<script>window.__DATA__ = {script_json(payload)};</script>"
