"""Render context and caller-supplied overrides.

``RenderContext`` is what ``load()`` and ``metadata()`` functions receive.
It is resolved once per render call and never mutated afterwards.

``ContextData`` overrides are applied after layouts and page have been
merged, so they always win::

    RenderOptions(
        engine="html",
        component=Page,
        context_data=ContextData(metadata={"title": "Preview"}),
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from warble.config import ContextData
    from warble.types import Metadata, ServerData


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Per-call context passed to load and metadata functions.

    Attributes:
        url: Request URL, including any query string.
        params: Route parameters.
        extra: Anything else the caller wants to pass through
            (a request object, a locale, ...).
    """

    url: str = "/"
    params: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        if key == "url":
            return self.url
        if key == "params":
            return self.params
        return self.extra[key]

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    @property
    def path(self) -> str:
        """The URL without its query string."""
        return self.url.split("?", 1)[0]


def resolve_context(value: RenderContext | Mapping[str, Any] | None) -> RenderContext:
    """Build the render context, defaulting to ``url="/"`` and no params.

    Mappings are split into ``url``, ``params`` and passthrough ``extra``.
    """
    if value is None:
        return RenderContext()
    if isinstance(value, RenderContext):
        return value
    extra = {k: v for k, v in value.items() if k not in ("url", "params")}
    return RenderContext(
        url=value.get("url") or "/",
        params=dict(value.get("params") or {}),
        extra=extra,
    )


def deep_merge(target: Mapping[str, Any], source: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge *source* into a copy of *target*.

    Nested mappings are merged; every other value (lists included) is
    replaced by the value from *source*.
    """
    result = dict(target)
    for key, value in source.items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


def merge_context_metadata(metadata: Metadata, context_data: ContextData | None) -> Metadata:
    """Apply ``ContextData.metadata`` on top of merged metadata."""
    if context_data is None or not context_data.metadata:
        return metadata
    return deep_merge(metadata, context_data.metadata)  # type: ignore[return-value]


def merge_context_server_data(data: ServerData, context_data: ContextData | None) -> ServerData:
    """Apply ``ContextData.server_data`` on top of layout or page data."""
    if context_data is None or not context_data.server_data:
        return data
    return deep_merge(data, context_data.server_data)
