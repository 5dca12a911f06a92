"""Render configuration.

Every option group is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.  Derive variations with
``dataclasses.replace``::

    options = RenderOptions(engine="html", component=Page)
    fallback = replace(options, component=ErrorPage)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from warble.types import LayoutEntry, Metadata, ScriptDefinition

if TYPE_CHECKING:
    from warble.adapters.protocol import Adapter
    from warble.cache import CacheStore
    from warble.context import RenderContext
    from warble.performance import PerformanceMetrics


@dataclass(frozen=True, slots=True)
class CacheOptions:
    """Metadata cache settings.

    Attributes:
        enabled: Turn caching on.
        get_cache_key: Custom key function of the render context.
        storage: Any ``{get, set, delete}`` store, sync or async.  ``None``
            uses the process-wide in-memory store.
        ttl: Seconds until an entry expires.  ``None`` never expires.
    """

    enabled: bool = False
    get_cache_key: Callable[[RenderContext], str] | None = None
    storage: CacheStore | None = None
    ttl: float | None = None


@dataclass(frozen=True, slots=True)
class CompressionOptions:
    """Data payload compression.

    Payloads smaller than *threshold* bytes are injected uncompressed.
    """

    enabled: bool = False
    threshold: int = 0


@dataclass(frozen=True, slots=True)
class ErrorHandler:
    """Render failure handling.

    Attributes:
        on_error: Called with ``(exc, info)`` when the adapter raises.
            May be async.  Its own exceptions are logged and ignored.
        fallback_component: Rendered once in place of the failing component.
        log_error: Log adapter failures.
        error_document: When the fallback fails too, return the static
            error document instead of raising ``FallbackRenderError``.
    """

    on_error: Callable[[Exception, Mapping[str, Any]], Awaitable[None] | None] | None = None
    fallback_component: Any = None
    log_error: bool = True
    error_document: bool = False


@dataclass(frozen=True, slots=True)
class PerformanceOptions:
    """Render timing.  *on_metrics* receives the finished metrics."""

    enabled: bool = False
    on_metrics: Callable[[PerformanceMetrics], None] | None = None


@dataclass(frozen=True, slots=True)
class ContextData:
    """Caller-supplied overrides that win over layout and page values."""

    metadata: Metadata | None = None
    server_data: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Options for a single ``render_ssr`` call.

    Only *engine* and *component* are required::

        RenderOptions(
            engine="html",
            component=Page,
            layouts=(LayoutEntry(RootLayout),),
            template="<html><head></head><body><!--ssr-outlet--></body></html>",
        )
    """

    engine: str
    component: Any
    props: dict[str, Any] = field(default_factory=dict)

    # Composition
    layouts: Sequence[LayoutEntry | Mapping[str, Any]] = ()
    skip_layouts: bool = False
    template: str | None = None

    # Context passed to load() and metadata()
    load_context: RenderContext | Mapping[str, Any] | None = None

    # Scripts
    client_scripts: Sequence[str] = ()  # Legacy: URLs or literal <script> tags
    scripts: Sequence[ScriptDefinition | str] = ()

    # Pipeline features
    error_handler: ErrorHandler | None = None
    performance: PerformanceOptions | None = None
    metadata_cache: CacheOptions | None = None
    compression: CompressionOptions | None = None
    context_data: ContextData | None = None
    lazy_data: bool = False
    lazy_threshold: int = 10_240
    skip_data_injection: bool = False

    # Adapter selection (overrides the engine registry when set)
    adapter: Adapter | None = None

    debug: bool = False

    # Engine-specific options (e.g. ``{"env": kida_env}`` for the kida adapter)
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SSGOptions:
    """Static generation settings.

    Attributes:
        engine: Adapter engine name.
        routes: Routes to render, e.g. ``("/", "/about")``.
        output_dir: Directory the HTML files are written to.
        load_route_component: Returns the page component for a route.
        load_route_layouts: Returns the layouts for a route, outer to inner.
        load_route_data: Returns extra props for a route.
        template: HTML template with an outlet marker.
        head_inject: Markup inserted before ``</head>``.
        pure_html: Strip every ``<script>`` from the output.
        enable_data_injection: Inject the ``window.__DATA__`` payload.
        generate_sitemap: Write ``sitemap.xml``.
        generate_robots: Write ``robots.txt``.
        base_url: Prefix for sitemap URLs.
        on_file_generated: Called with each written path.
        props: Extra props merged into every page.
    """

    engine: str
    routes: Sequence[str]
    output_dir: str | Path
    load_route_component: Callable[[str], Any]
    load_route_layouts: Callable[[str], Any] | None = None
    load_route_data: Callable[[str], Any] | None = None
    template: str | None = None
    head_inject: str | None = None
    pure_html: bool = False
    enable_data_injection: bool = False
    generate_sitemap: bool = False
    generate_robots: bool = False
    base_url: str = ""
    on_file_generated: Callable[[str], None] | None = None
    props: dict[str, Any] = field(default_factory=dict)
    adapter: Adapter | None = None
    options: dict[str, Any] = field(default_factory=dict)
