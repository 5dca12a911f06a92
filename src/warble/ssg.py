"""Static site generation.

Pre-renders a list of routes to HTML files through ``render_ssr``::

    files = await render_ssg(SSGOptions(
        engine="html",
        routes=["/", "/about", *expand_dynamic_route("/posts/[id]", ["1", "2"])],
        output_dir="dist",
        load_route_component=pages.for_route,
        template=TEMPLATE,
        generate_sitemap=True,
        base_url="https://example.com",
    ))

``/`` is written to ``index.html``, ``/about`` to ``about.html``.
Routes are rendered one after another; the first failure stops the run.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

import anyio
from kida.utils.html import html_escape

from warble._internal.invoke import invoke
from warble.config import RenderOptions
from warble.errors import StaticGenerationError
from warble.ssr import render_ssr

if TYPE_CHECKING:
    from warble.config import SSGOptions

logger = logging.getLogger("warble.ssg")

_DYNAMIC_SEGMENT = re.compile(r"\[([^\]]+)\]")
_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_HEAD_CLOSE = re.compile(r"</head>", re.IGNORECASE)


def expand_dynamic_route(route: str, params: Iterable[str]) -> list[str]:
    """Expand ``[param]`` segments, one route per value.

    Static routes are returned unchanged as a one-element list.
    """
    if not _DYNAMIC_SEGMENT.search(route):
        return [route]
    return [_DYNAMIC_SEGMENT.sub(lambda _m, v=value: v, route) for value in params]


def route_to_file_path(route: str) -> str:
    """``/`` → ``index.html``, ``/docs/intro`` → ``docs/intro.html``."""
    if route in ("", "/"):
        return "index.html"
    return f"{route.strip('/')}.html"


def file_path_to_route(file_path: str) -> str:
    """Inverse of ``route_to_file_path``; ``index.html`` files map to their directory."""
    path = file_path.replace("\\", "/").strip("/")
    path = path.removesuffix(".html")
    if path == "index":
        return "/"
    path = path.removesuffix("/index")
    return f"/{path}"


def generate_sitemap(routes: Sequence[str], base_url: str = "") -> str:
    """Render ``sitemap.xml`` for *routes*, prefixed with *base_url*."""
    base = base_url.rstrip("/")
    entries = "\n".join(
        f"  <url>\n    <loc>{html_escape(base + ('' if route == '/' else route) or '/')}</loc>\n  </url>"
        for route in routes
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        f"{entries}\n"
        "</urlset>"
    )


def generate_robots(allow_all: bool = True, disallow: Sequence[str] = ()) -> str:
    """Render ``robots.txt``; *disallow* paths take precedence over *allow_all*."""
    if allow_all and not disallow:
        return "User-agent: *\nAllow: /"
    rules = "\n".join(f"Disallow: {path}" for path in disallow) or "Disallow: /"
    return f"User-agent: *\n{rules}"


def _finalize(html: str, options: SSGOptions) -> str:
    if options.head_inject and _HEAD_CLOSE.search(html):
        html = _HEAD_CLOSE.sub(lambda _m: f"{options.head_inject}\n</head>", html, count=1)
    if options.pure_html:
        html = _SCRIPT_BLOCK.sub("", html)
    return html


async def _render_route(route: str, options: SSGOptions) -> str:
    component = await invoke(options.load_route_component, route)
    layouts: Any = ()
    if options.load_route_layouts is not None:
        layouts = await invoke(options.load_route_layouts, route) or ()
    data: dict[str, Any] = {}
    if options.load_route_data is not None:
        data = dict(await invoke(options.load_route_data, route) or {})

    result = await render_ssr(RenderOptions(
        engine=options.engine,
        component=component,
        props={"route": route, **data, **options.props},
        layouts=tuple(layouts),
        template=options.template,
        load_context={"url": route, "params": {}},
        skip_data_injection=not options.enable_data_injection,
        adapter=options.adapter,
        options=options.options,
    ))
    return _finalize(result.html, options)


async def render_ssg(options: SSGOptions) -> list[str]:
    """Render every route to a file and return the written paths.

    Raises:
        StaticGenerationError: For the first route that fails to render
            or write.  The original exception is chained.
    """
    output_dir = anyio.Path(options.output_dir)
    await output_dir.mkdir(parents=True, exist_ok=True)
    generated: list[str] = []

    for route in options.routes:
        target = output_dir / route_to_file_path(route)
        try:
            html = await _render_route(route, options)
            await target.parent.mkdir(parents=True, exist_ok=True)
            await target.write_text(html, encoding="utf-8")
        except Exception as exc:
            raise StaticGenerationError(route, exc) from exc

        logger.info("Generated %s -> %s", route, target)
        generated.append(str(target))
        if options.on_file_generated is not None:
            options.on_file_generated(str(target))

    if options.generate_sitemap:
        sitemap = output_dir / "sitemap.xml"
        await sitemap.write_text(generate_sitemap(options.routes, options.base_url), encoding="utf-8")
        generated.append(str(sitemap))

    if options.generate_robots:
        robots = output_dir / "robots.txt"
        await robots.write_text(generate_robots(), encoding="utf-8")
        generated.append(str(robots))

    return generated
