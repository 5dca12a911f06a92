"""Layout composition.

Layouts wrap the page outer to inner.  Composition folds them
inside-out into a single ``ComponentNode`` tree whose root is the
outermost layout and whose deepest leaf is the page::

    compose_layouts(Page, {"id": 1}, [LayoutEntry(Root), LayoutEntry(Docs)])
    # ComponentNode(Root, {"children": ComponentNode(Docs, {"children":
    #     ComponentNode(Page, {"id": 1})})})

``create_component_tree`` then walks that description and builds
framework elements through an adapter-supplied factory.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from warble.components import ComponentRef, classify_component, describe_component
from warble.types import ComponentNode, LayoutEntry

type ElementFactory = Callable[..., Any]


def should_skip_layouts(component: Any) -> bool:
    """True when the component (or its ``default``) sets ``inherit_layout = False``."""
    return describe_component(component).skips_layouts


def filter_layouts(
    layouts: Iterable[LayoutEntry | Mapping[str, Any]] | None,
) -> list[LayoutEntry]:
    """Drop layouts marked ``skip``, keeping the others in order."""
    if not layouts:
        return []
    entries = (LayoutEntry.coerce(layout) for layout in layouts)
    return [entry for entry in entries if not entry.skip]


def compose_layouts(
    component: Any,
    props: Mapping[str, Any] | None = None,
    layouts: Iterable[LayoutEntry | Mapping[str, Any]] | None = None,
    skip_all: bool = False,
) -> ComponentNode:
    """Nest the page inside its layouts.

    Returns the page node unchanged when *skip_all* is set or no
    layout survives filtering.
    """
    node = ComponentNode(component, dict(props or {}))
    if skip_all:
        return node

    # Innermost layout first (last in the list), then outward
    for layout in reversed(filter_layouts(layouts)):
        node = ComponentNode(layout.component, {**layout.props, "children": node})
    return node


def _as_node(value: Any, *, require_props: bool) -> ComponentNode | None:
    if isinstance(value, ComponentNode):
        return value
    if isinstance(value, Mapping) and "component" in value:
        if require_props and "props" not in value:
            return None
        return ComponentNode(value["component"], dict(value.get("props") or {}))
    return None


def create_component_tree(
    element_factory: ElementFactory,
    config: ComponentNode | Mapping[str, Any],
) -> Any:
    """Recursively build an element tree from a composed node.

    *element_factory* is called as ``factory(ref, props, *children)``
    where *ref* is the classified component (``NamedElement`` or
    ``ComponentHandle``) and *props* excludes ``children``.

    - A nested node in ``children`` is built first and passed as the
      only child; a nested node with a falsy component becomes ``None``.
    - A list of children is mapped entry by entry: nested nodes are
      built (``None`` for falsy components), anything else — literal
      text, pre-built elements — passes through untouched.
    - Any other children value is passed through as a single child.

    Raises:
        InvalidComponent: If a component is not a callable, object or
            tag name.  Raised before the factory is called for that node.
    """
    node = _as_node(config, require_props=False)
    if node is None:
        node = ComponentNode(None)
    ref: ComponentRef = classify_component(node.component)

    props = dict(node.props)
    children = props.pop("children", None)

    child_node = _as_node(children, require_props=True)
    if child_node is not None:
        if child_node.component:
            return element_factory(ref, props, create_component_tree(element_factory, child_node))
        return element_factory(ref, props, None)

    if isinstance(children, (list, tuple)):
        built: list[Any] = []
        for child in children:
            nested = _as_node(child, require_props=False)
            if nested is None:
                built.append(child)
            elif nested.component:
                built.append(create_component_tree(element_factory, nested))
            else:
                built.append(None)
        return element_factory(ref, props, *built)

    if children is not None:
        return element_factory(ref, props, children)
    return element_factory(ref, props)
