"""Warble — server-side rendering orchestration for Python.

Renders a page wrapped in nested layouts, resolves its metadata and
data, and injects meta tags, a ``window.__DATA__`` payload and scripts
into the final document.

Basic usage::

    from warble import LayoutEntry, RenderOptions, render_ssr

    def Layout(children):
        return f'<div class="layout">{children}</div>'

    def Page(name):
        return f"<h1>Hello, {name}</h1>"

    Page.metadata = {"title": "Home"}

    result = await render_ssr(RenderOptions(
        engine="html",
        component=Page,
        props={"name": "World"},
        layouts=(LayoutEntry(Layout),),
        template="<html><head></head><body><!--ssr-outlet--></body></html>",
    ))

Static generation::

    from warble import SSGOptions, render_ssg

    files = await render_ssg(SSGOptions(engine="html", routes=["/"], ...))
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "AdapterRenderError",
    "AdapterResult",
    "CacheOptions",
    "ComponentNode",
    "CompressionOptions",
    "ConfigurationError",
    "ContextData",
    "ErrorHandler",
    "FallbackRenderError",
    "InvalidComponent",
    "LayoutEntry",
    "LoadError",
    "MemoryCache",
    "MetadataError",
    "PerformanceOptions",
    "RenderContext",
    "RenderError",
    "RenderOptions",
    "RenderResult",
    "SSGOptions",
    "SerializationError",
    "StaticGenerationError",
    "WarbleError",
    "h",
    "load_adapter",
    "register_adapter",
    "render_ssg",
    "render_ssr",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import warble`` fast while providing a clean top-level API.
    """
    if name == "render_ssr":
        from warble.ssr import render_ssr

        return render_ssr

    if name == "render_ssg":
        from warble.ssg import render_ssg

        return render_ssg

    if name in (
        "CacheOptions",
        "CompressionOptions",
        "ContextData",
        "ErrorHandler",
        "PerformanceOptions",
        "RenderOptions",
        "SSGOptions",
    ):
        from warble import config as _config

        return getattr(_config, name)

    if name in ("AdapterResult", "ComponentNode", "LayoutEntry", "RenderResult"):
        from warble import types as _types

        return getattr(_types, name)

    if name == "RenderContext":
        from warble.context import RenderContext

        return RenderContext

    if name == "MemoryCache":
        from warble.cache import MemoryCache

        return MemoryCache

    if name in ("load_adapter", "register_adapter"):
        from warble import adapters as _adapters

        return getattr(_adapters, name)

    if name == "h":
        from warble.adapters.elements import h

        return h

    if name in (
        "AdapterRenderError",
        "ConfigurationError",
        "FallbackRenderError",
        "InvalidComponent",
        "LoadError",
        "MetadataError",
        "RenderError",
        "SerializationError",
        "StaticGenerationError",
        "WarbleError",
    ):
        from warble import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
