"""Server-side render orchestration.

``render_ssr`` is the single entry point: it gathers metadata, data and
scripts from the layouts and the page, renders through the engine's
adapter (with error recovery), and injects everything into the
resulting document::

    result = await render_ssr(RenderOptions(
        engine="html",
        component=Page,
        layouts=(LayoutEntry(RootLayout),),
        template=TEMPLATE,
        load_context={"url": "/posts/1", "params": {"id": "1"}},
    ))
    result.html        # full document
    result.page_data   # what Page.load returned

Per call the work is strictly sequential; the only suspension points are
user code (load and metadata functions, the adapter).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from kida.utils.html import html_escape

from warble.adapters import load_adapter
from warble.cache import cache_metadata, get_cached_metadata
from warble.components import describe_component
from warble.compression import compress_data, generate_compressed_data_script
from warble.context import merge_context_metadata, merge_context_server_data, resolve_context
from warble.errors import SerializationError
from warble.html_inject import Injection, inject_multiple
from warble.layout import filter_layouts
from warble.lazy_loading import generate_lazy_data_script, should_lazy_load
from warble.metadata import generate_meta_tags, merge_metadata, resolve_metadata
from warble.performance import create_performance_monitor, record_performance_metrics
from warble.recovery import ErrorRecoveryCoordinator
from warble.scripts import (
    generate_async_script_loader,
    generate_script_tags,
    is_loader_script,
    merge_scripts,
    normalize_scripts,
)
from warble.server_data import build_data_payload, generate_data_script, load_server_data
from warble.types import RenderResult

if TYPE_CHECKING:
    from collections.abc import Sequence

    from warble.config import RenderOptions
    from warble.context import RenderContext
    from warble.types import Metadata, ScriptDefinition, ServerData

logger = logging.getLogger("warble.render")


def _ensure_html_string(value: Any, engine: str) -> str:
    """Coerce adapter output to ``str``.

    Raises:
        SerializationError: If the value has no meaningful text form.
    """
    if isinstance(value, str):
        return value
    logger.error("[%s] Adapter returned %s instead of str", engine, type(value).__name__)
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as exc:
            msg = f"Adapter html is not valid UTF-8 ({engine})"
            raise SerializationError(msg) from exc
    html_method = getattr(value, "__html__", None)
    if html_method is not None:
        return str(html_method())
    if value is None or type(value).__str__ is object.__str__:
        msg = f"Cannot convert adapter html to str ({engine}): got {type(value).__name__}"
        raise SerializationError(msg)
    return str(value)


def _client_script_tags(client_scripts: Sequence[str]) -> str:
    """Legacy ``client_scripts``: literal ``<script>`` tags or bare URLs."""
    tags = [
        script if script.strip().startswith("<script") else f'<script src="{html_escape(script)}"></script>'
        for script in client_scripts
    ]
    return "\n  ".join(tags)


class _Collected:
    """Values gathered from the layouts and the page."""

    __slots__ = (
        "layout_data",
        "layout_metadata",
        "layout_routes",
        "page_data",
        "page_metadata",
        "page_route",
        "scripts",
    )

    def __init__(self) -> None:
        self.layout_metadata: list[Metadata] = []
        self.layout_data: ServerData = {}
        self.layout_routes: list[str] = []
        self.scripts: list[list[ScriptDefinition]] = []
        self.page_metadata: Metadata | None = None
        self.page_data: ServerData = {}
        self.page_route: str | None = None


async def _collect(
    options: RenderOptions,
    context: RenderContext,
    *,
    skip_metadata: bool,
) -> _Collected:
    collected = _Collected()

    # Outer to inner.  Layouts skipped at composition still contribute.
    for layout in filter_layouts(options.layouts):
        desc = describe_component(layout.component)
        if not skip_metadata:
            meta = await resolve_metadata(desc.metadata, context, component=layout.component)
            if meta:
                collected.layout_metadata.append(meta)
        data = await load_server_data(desc.load, context, component=layout.component)
        if data:
            collected.layout_data = {**collected.layout_data, **data}
        if desc.scripts:
            collected.scripts.append(list(desc.scripts))
        if desc.route is not None:
            collected.layout_routes.append(desc.route)

    page = describe_component(options.component)
    if not skip_metadata:
        collected.page_metadata = await resolve_metadata(
            page.metadata, context, component=options.component
        )
    collected.page_data = (
        await load_server_data(page.load, context, component=options.component) or {}
    )
    collected.scripts.append(list(page.scripts))
    collected.page_route = page.route
    return collected


def _data_script(
    payload: dict[str, Any],
    options: RenderOptions,
) -> tuple[str, int | None, int | None]:
    """Pick compressed, lazy, or plain injection for the payload."""
    compressed = compress_data(payload, options.compression)
    if compressed is not None:
        return (
            generate_compressed_data_script(compressed),
            compressed.compressed_size,
            compressed.original_size,
        )
    if options.lazy_data and should_lazy_load(payload, options.lazy_threshold):
        return generate_lazy_data_script(payload), None, None
    return generate_data_script(payload), None, None


async def render_ssr(options: RenderOptions) -> RenderResult:
    """Render a page with its layouts into a complete document.

    Raises:
        ConfigurationError: Unknown engine or a misconfigured adapter.
        MetadataError: A metadata function raised.
        AdapterRenderError: The adapter failed and no fallback is set.
        FallbackRenderError: The fallback component failed too.
        SerializationError: Adapter output or payload is not serializable.
    """
    engine = options.engine
    adapter = options.adapter if options.adapter is not None else load_adapter(engine)

    monitor = create_performance_monitor(options.performance)
    if monitor is not None:
        monitor.start(engine, "ssr")

    context = resolve_context(options.load_context)
    if options.debug:
        logger.debug("[%s] render %s", engine, context.url)

    cached = await get_cached_metadata(context, options.metadata_cache)
    collected = await _collect(options, context, skip_metadata=cached is not None)

    metadata: Metadata = (
        cached
        if cached is not None
        else merge_metadata(collected.layout_metadata, collected.page_metadata)
    )
    metadata = merge_context_metadata(metadata, options.context_data)
    layout_data = merge_context_server_data(collected.layout_data, options.context_data)
    page_data = merge_context_server_data(collected.page_data, options.context_data)

    if cached is None and options.metadata_cache is not None and options.metadata_cache.enabled:
        await cache_metadata(context, metadata, options.metadata_cache)

    coordinator = ErrorRecoveryCoordinator(
        adapter, options.error_handler, engine=engine, debug=options.debug
    )
    result = await coordinator.render(options)
    html = _ensure_html_string(result.html, engine)

    scripts = merge_scripts(*collected.scripts, normalize_scripts(options.scripts))
    # Loader entries are appended by the loader script only
    plain_scripts = [script for script in scripts if not is_loader_script(script)]

    data_script = ""
    compressed_size: int | None = None
    original_size: int | None = None
    if not options.skip_data_injection:
        payload = build_data_payload(
            metadata=metadata,
            layout_data=layout_data,
            page_data=page_data,
            context=context,
            layout_routes=collected.layout_routes,
            page_route=collected.page_route,
        )
        data_script, compressed_size, original_size = _data_script(payload, options)

    html = inject_multiple(html, [
        Injection(generate_meta_tags(metadata), type="meta", in_head=True),
        Injection(data_script, type="data-script", in_head=True),
        Injection(generate_script_tags(plain_scripts), type="script"),
        Injection(generate_async_script_loader(scripts), type="script"),
        Injection(_client_script_tags(options.client_scripts), type="script"),
    ])

    metrics = None
    if monitor is not None:
        monitor.add_metric("from_cache", cached is not None)
        metrics = monitor.end()
        record_performance_metrics(metrics, options.performance)

    if options.debug:
        logger.debug(
            "[%s] rendered %s (%d bytes, metadata %s)",
            engine,
            context.url,
            len(html),
            "cached" if cached is not None else "resolved",
        )

    return RenderResult(
        html=html,
        metadata=metadata,
        layout_data=layout_data,
        page_data=page_data,
        render_info=dict(result.render_info),
        styles=tuple(result.styles),
        scripts=tuple(result.scripts),
        performance=metrics,
        from_cache=cached is not None,
        compressed_size=compressed_size,
        original_size=original_size,
    )
