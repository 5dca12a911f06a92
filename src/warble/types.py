"""Data model for render calls.

Frozen dataclasses for the values that flow through the pipeline, plus
``TypedDict`` shapes for the user-authored mappings (metadata and script
declarations) that components expose.  Everything here is built fresh
per render call.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypedDict

if TYPE_CHECKING:
    from warble.performance import PerformanceMetrics


class OpenGraph(TypedDict, total=False):
    title: str
    description: str
    image: str
    url: str
    type: str


class TwitterCard(TypedDict, total=False):
    card: str
    title: str
    description: str
    image: str


class Metadata(TypedDict, total=False):
    """Page metadata destined for the document head."""

    title: str
    description: str
    keywords: str
    author: str
    og: OpenGraph
    twitter: TwitterCard
    custom: dict[str, str]


# ``async`` is a keyword, so the functional form is required.
ScriptDefinition = TypedDict(
    "ScriptDefinition",
    {
        "src": str,
        "content": str,
        "async": bool,
        "defer": bool,
        "priority": int,
        "type": str,
    },
    total=False,
)

type ServerData = dict[str, Any]


@dataclass(frozen=True, slots=True)
class LayoutEntry:
    """A layout wrapping the page, ordered outer to inner.

    Attributes:
        component: The layout component.
        props: Props passed to the layout alongside ``children``.
        skip: When ``True`` the layout is dropped before composition.
    """

    component: Any
    props: dict[str, Any] = field(default_factory=dict)
    skip: bool = False

    @classmethod
    def coerce(cls, value: LayoutEntry | Mapping[str, Any]) -> LayoutEntry:
        """Accept either a ``LayoutEntry`` or a ``{component, props, skip}`` mapping."""
        if isinstance(value, LayoutEntry):
            return value
        return cls(
            component=value.get("component"),
            props=dict(value.get("props") or {}),
            skip=bool(value.get("skip", False)),
        )


@dataclass(frozen=True, slots=True)
class ComponentNode:
    """A ``{component, props}`` pair; nested layouts keep the inner node in ``props["children"]``."""

    component: Any
    props: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AdapterResult:
    """What an adapter returns from ``render_ssr``."""

    html: str
    styles: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    render_info: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RenderResult:
    """The unified result of one ``render_ssr`` call.

    ``compressed_size`` and ``original_size`` are set only when the data
    payload was compressed.
    """

    html: str
    metadata: Metadata
    layout_data: ServerData
    page_data: ServerData
    render_info: dict[str, Any] = field(default_factory=dict)
    styles: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    performance: PerformanceMetrics | None = None
    from_cache: bool = False
    compressed_size: int | None = None
    original_size: int | None = None
