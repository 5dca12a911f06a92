"""Page metadata: extraction, resolution, merging, and ``<meta>`` tags.

Metadata comes from layouts and the page, either as a static mapping or
as a (possibly async) function of the render context::

    Page.metadata = {"title": "Docs", "og": {"image": "/og.png"}}

    async def metadata(ctx):
        post = await posts.get(ctx.params["slug"])
        return {"title": post.title, "description": post.summary}

Merging is ordered: ``layout[0] < layout[1] < ... < page``.  Scalar
fields are last-writer-wins; ``og``, ``twitter`` and ``custom`` merge
key by key.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from kida.utils.html import html_escape

from warble._internal.invoke import invoke
from warble.components import describe_component
from warble.errors import MetadataError

if TYPE_CHECKING:
    from warble.context import RenderContext
    from warble.types import Metadata

_SCALAR_FIELDS = ("title", "description", "keywords", "author")
_OBJECT_FIELDS = ("og", "twitter", "custom")

_OG_FIELDS = ("title", "description", "image", "url", "type")
_TWITTER_FIELDS = ("card", "title", "description", "image")


def extract_metadata(component: Any) -> Mapping[str, Any] | Callable[..., Any] | None:
    """Return the component's ``metadata`` (mapping or function), or ``None``."""
    return describe_component(component).metadata


async def resolve_metadata(
    value: Mapping[str, Any] | Callable[..., Any] | None,
    context: RenderContext,
    *,
    component: Any = None,
) -> Metadata | None:
    """Resolve a metadata value against the render context.

    Functions are called with *context* and awaited when they return an
    awaitable.  Mappings are returned as-is.

    Raises:
        MetadataError: If a metadata function raises.  The original
            exception is chained as ``__cause__``.
    """
    if value is None:
        return None
    if callable(value):
        try:
            resolved = await invoke(value, context)
        except Exception as exc:
            raise MetadataError(component if component is not None else value, exc) from exc
    else:
        resolved = value
    if not isinstance(resolved, Mapping):
        return None
    return resolved  # type: ignore[return-value]


def _merge_two(target: Metadata, source: Mapping[str, Any]) -> Metadata:
    result: dict[str, Any] = dict(target)
    for name in _SCALAR_FIELDS:
        if source.get(name) is not None:
            result[name] = source[name]
    for name in _OBJECT_FIELDS:
        incoming = source.get(name)
        if incoming:
            result[name] = {**(target.get(name) or {}), **incoming}
        elif target.get(name):
            result[name] = dict(target[name])
    return result  # type: ignore[return-value]


def merge_metadata(
    layout_metadata: Iterable[Mapping[str, Any]],
    page_metadata: Mapping[str, Any] | None,
) -> Metadata:
    """Merge layout metadata (outer to inner), then the page's on top."""
    merged: Metadata = {}
    for layout_meta in layout_metadata:
        merged = _merge_two(merged, layout_meta)
    if page_metadata:
        merged = _merge_two(merged, page_metadata)
    return merged


def _meta(attr: str, key: str, value: Any) -> str:
    return f'<meta {attr}="{key}" content="{html_escape(value)}" />'


def generate_meta_tags(metadata: Mapping[str, Any]) -> str:
    """Render metadata as ``<title>`` and ``<meta>`` tags.

    When ``og``/``twitter`` lack their own title or description, the
    top-level value is reused for them.
    """
    tags: list[str] = []
    og = metadata.get("og") or {}
    twitter = metadata.get("twitter") or {}

    title = metadata.get("title")
    if title:
        tags.append(f"<title>{html_escape(title)}</title>")
        if not og.get("title"):
            tags.append(_meta("property", "og:title", title))
        if not twitter.get("title"):
            tags.append(_meta("name", "twitter:title", title))

    description = metadata.get("description")
    if description:
        tags.append(_meta("name", "description", description))
        if not og.get("description"):
            tags.append(_meta("property", "og:description", description))
        if not twitter.get("description"):
            tags.append(_meta("name", "twitter:description", description))

    if metadata.get("keywords"):
        tags.append(_meta("name", "keywords", metadata["keywords"]))
    if metadata.get("author"):
        tags.append(_meta("name", "author", metadata["author"]))

    for name in _OG_FIELDS:
        if og.get(name):
            tags.append(_meta("property", f"og:{name}", og[name]))
    for name in _TWITTER_FIELDS:
        if twitter.get(name):
            tags.append(_meta("name", f"twitter:{name}", twitter[name]))

    for key, value in (metadata.get("custom") or {}).items():
        tags.append(f'<meta name="{html_escape(key)}" content="{html_escape(value)}" />')

    return "\n  ".join(tags)
