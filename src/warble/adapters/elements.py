"""Pure-Python element renderer (engine ``"html"``).

Components are plain functions that receive their props as keyword
arguments and return markup.  A string return value is trusted markup;
an ``Element`` (or a list of them) is rendered recursively::

    def Layout(children, title="Site"):
        return f'<div class="layout"><h1>{title}</h1>{children}</div>'

    def Page(name):
        return h("p", {"class": "greeting"}, f"Hello, {name}")

Tag-name components (``"div"``) render as HTML elements.  Text children
are escaped; ``children`` arrives at components as ``Markup``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from kida import Markup
from kida.utils.html import html_escape

from warble._internal.invoke import invoke
from warble.components import ComponentHandle, NamedElement, classify_component
from warble.errors import InvalidComponent
from warble.html_inject import inject_component_html
from warble.layout import compose_layouts, create_component_tree, filter_layouts, should_skip_layouts
from warble.types import AdapterResult

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from warble.components import ComponentRef
    from warble.config import RenderOptions

logger = logging.getLogger("warble.render")

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})

# Renders a tag-name component; receives (name, props, children markup).
type NamedRenderer = Callable[[str, dict[str, Any], Markup], Awaitable[str] | str]


@dataclass(frozen=True, slots=True)
class Element:
    """A component invocation waiting to be rendered."""

    type: ComponentRef
    props: dict[str, Any] = field(default_factory=dict)
    children: tuple[Any, ...] = ()


def h(component: Any, props: Mapping[str, Any] | None = None, *children: Any) -> Element:
    """Element factory, usable directly or with ``create_component_tree``."""
    return Element(classify_component(component), dict(props or {}), children)


def _attr_name(key: str) -> str:
    return key.rstrip("_").replace("_", "-")


def render_attrs(props: Mapping[str, Any]) -> str:
    """Render props as HTML attributes.

    ``True`` renders a bare attribute, ``False``/``None`` are omitted, and
    a trailing underscore is dropped (``class_`` → ``class``).
    """
    parts: list[str] = []
    for key, value in props.items():
        if value is None or value is False:
            continue
        name = _attr_name(key)
        if value is True:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{html_escape(value)}"')
    return "".join(parts)


def _resolve_callable(target: Any) -> Callable[..., Any]:
    if callable(target):
        return target
    default = target.get("default") if isinstance(target, Mapping) else getattr(target, "default", None)
    if callable(default):
        return default
    raise InvalidComponent(target)


async def render_to_string(node: Any, *, render_named: NamedRenderer | None = None) -> str:
    """Render an element tree to an HTML string.

    *render_named* overrides how tag-name components render; the default
    emits them as HTML elements.
    """
    if node is None or node is True or node is False:
        return ""
    if isinstance(node, (list, tuple)):
        parts = [await render_to_string(child, render_named=render_named) for child in node]
        return "".join(parts)
    if isinstance(node, Element):
        return await _render_element(node, render_named)
    return html_escape(node)


async def _render_element(element: Element, render_named: NamedRenderer | None) -> str:
    inner = Markup(await render_to_string(element.children, render_named=render_named))

    match element.type:
        case NamedElement(name=name) if render_named is not None:
            return str(await invoke(render_named, name, element.props, inner))
        case NamedElement(name=name):
            attrs = render_attrs(element.props)
            if name in VOID_ELEMENTS:
                return f"<{name}{attrs}>"
            return f"<{name}{attrs}>{inner}</{name}>"
        case ComponentHandle(target=target):
            func = _resolve_callable(target)
            kwargs = dict(element.props)
            if element.children:
                kwargs["children"] = inner
            result = await invoke(func, **kwargs)
            if isinstance(result, str):
                # Component output is trusted markup
                return str(result)
            return await render_to_string(result, render_named=render_named)
        case _:
            raise InvalidComponent(element.type)


async def render_page(
    options: RenderOptions,
    *,
    engine: str,
    render_named: NamedRenderer | None = None,
) -> AdapterResult:
    """Compose layouts, render the tree, and place it into the template."""
    skip_all = options.skip_layouts or should_skip_layouts(options.component)
    node = compose_layouts(options.component, options.props, options.layouts, skip_all)
    tree = create_component_tree(h, node)
    markup = await render_to_string(tree, render_named=render_named)
    layouts = 0 if skip_all else len(filter_layouts(options.layouts))
    if options.debug:
        logger.debug("[%s] rendered %d bytes with %d layout(s)", engine, len(markup), layouts)
    return AdapterResult(
        html=inject_component_html(options.template, markup),
        render_info={"engine": engine, "layouts": layouts},
    )


class HTMLAdapter:
    """Renders function components and tag names to HTML."""

    __slots__ = ()

    engine = "html"

    async def render_ssr(self, options: RenderOptions) -> AdapterResult:
        return await render_page(options, engine=self.engine)
