"""Component capability lookup and identity.

A component is whatever the adapter knows how to render: a function, a
class, a module, a mapping, or a plain tag name like ``"div"``.  It may
carry render capabilities directly or on a ``default`` member::

    def Page(**props):
        return "<h1>Hello</h1>"

    Page.metadata = {"title": "Home"}
    Page.load = load_page

    # or, module style
    page = SimpleNamespace(default=Page, scripts=["/page.js"])

``describe_component`` probes both levels once and returns a
``ComponentDescriptor`` so the rest of the pipeline never repeats the
lookup.  ``classify_component`` turns a component reference into the
closed ``NamedElement | ComponentHandle`` variant the tree builder and
adapters match on.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from warble.errors import InvalidComponent
from warble.types import ScriptDefinition

_MISSING = object()

# Values that never carry capabilities.
_PRIMITIVES = (str, bytes, bytearray, int, float, complex, bool)


@dataclass(frozen=True, slots=True)
class NamedElement:
    """A component given by tag name, e.g. ``"div"`` or ``"layout.html"``."""

    name: str


@dataclass(frozen=True, slots=True)
class ComponentHandle:
    """Any other component: a callable, class, module or capability object."""

    target: Any


type ComponentRef = NamedElement | ComponentHandle


@dataclass(frozen=True, slots=True)
class ComponentDescriptor:
    """The capabilities a component exposes.

    Attributes:
        component: The raw component.
        metadata: A metadata mapping or a function of the render context.
        load: A data loader taking the render context.
        scripts: Script declarations from the component and its ``default``.
        inherit_layout: ``False`` when the component opts out of layouts.
        route: The route the component declares, if any.
    """

    component: Any
    metadata: Mapping[str, Any] | Callable[..., Any] | None = None
    load: Callable[..., Any] | None = None
    scripts: tuple[ScriptDefinition, ...] = ()
    inherit_layout: bool | None = None
    route: str | None = None

    @property
    def skips_layouts(self) -> bool:
        return self.inherit_layout is False


def _probe(obj: Any, name: str) -> Any:
    """Look up *name* on *obj* by key (mappings) or attribute."""
    if obj is None or isinstance(obj, _PRIMITIVES):
        return _MISSING
    if isinstance(obj, Mapping):
        return obj.get(name, _MISSING)
    return getattr(obj, name, _MISSING)


def _default_of(obj: Any) -> Any:
    default = _probe(obj, "default")
    if default is _MISSING or default is None or isinstance(default, _PRIMITIVES):
        return None
    return default


def _first(levels: tuple[Any, ...], name: str, accept: Callable[[Any], bool]) -> Any:
    for level in levels:
        value = _probe(level, name)
        if value is not _MISSING and accept(value):
            return value
    return None


def _is_metadata(value: Any) -> bool:
    return isinstance(value, Mapping) or callable(value)


def _normalize_scripts(value: Any) -> list[ScriptDefinition]:
    if not isinstance(value, (list, tuple)):
        return []
    scripts: list[ScriptDefinition] = []
    for script in value:
        if isinstance(script, str):
            scripts.append({"src": script})
        elif isinstance(script, Mapping):
            scripts.append(dict(script))  # type: ignore[arg-type]
    return scripts


def describe_component(component: Any) -> ComponentDescriptor:
    """Probe *component* and its ``default`` member for render capabilities.

    The component itself is checked first; ``default`` is only consulted
    for capabilities the component does not provide.  Scripts are the
    exception: both levels contribute, component first.  Lookup never
    goes deeper than one ``default`` level.
    """
    default = _default_of(component)
    levels = (component, default) if default is not None else (component,)

    inherit = _first(levels, "inherit_layout", lambda v: v is False)
    scripts: list[ScriptDefinition] = []
    for level in levels:
        scripts.extend(_normalize_scripts(_probe(level, "scripts")))

    return ComponentDescriptor(
        component=component,
        metadata=_first(levels, "metadata", _is_metadata),
        load=_first(levels, "load", callable),
        scripts=tuple(scripts),
        inherit_layout=False if inherit is False else None,
        route=_first(levels, "route", lambda v: isinstance(v, str)),
    )


def is_valid_component(component: Any) -> bool:
    """True for callables, objects and non-empty tag names."""
    if component is None or isinstance(component, (bool, int, float, complex, bytes, bytearray)):
        return False
    if isinstance(component, str):
        return bool(component)
    return True


def classify_component(component: Any) -> ComponentRef:
    """Map a component reference onto the ``NamedElement | ComponentHandle`` variant.

    Raises:
        InvalidComponent: For ``None``, booleans, numbers, bytes and ``""``.
    """
    if isinstance(component, (NamedElement, ComponentHandle)):
        return component
    if not is_valid_component(component):
        raise InvalidComponent(component)
    if isinstance(component, str):
        return NamedElement(component)
    return ComponentHandle(component)
