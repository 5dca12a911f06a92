"""Adapter registry.

Adapters are looked up by engine name.  Built-in engines are imported
on first use, so ``import warble`` never pulls in a renderer it does not
need::

    from warble.adapters import load_adapter, register_adapter

    register_adapter(MyAdapter())        # engine taken from .engine
    adapter = load_adapter("html")
"""

import threading
from importlib import import_module
from typing import TYPE_CHECKING

from warble.errors import ConfigurationError

if TYPE_CHECKING:
    from warble.adapters.protocol import Adapter

# engine -> (module, class)
_BUILTINS: dict[str, tuple[str, str]] = {
    "html": ("warble.adapters.elements", "HTMLAdapter"),
    "kida": ("warble.adapters.templates", "KidaAdapter"),
}

_lock = threading.Lock()
_registry: dict[str, "Adapter"] = {}


def register_adapter(adapter: "Adapter", engine: str | None = None) -> None:
    """Register *adapter* under *engine* (default: ``adapter.engine``).

    Registering an engine again replaces the previous adapter.
    """
    name = engine or getattr(adapter, "engine", None)
    if not name:
        msg = f"Adapter {type(adapter).__name__} has no engine name"
        raise ConfigurationError(msg)
    with _lock:
        _registry[name] = adapter


def unregister_adapter(engine: str) -> None:
    with _lock:
        _registry.pop(engine, None)


def load_adapter(engine: str) -> "Adapter":
    """Return the adapter for *engine*, importing built-ins lazily.

    Raises:
        ConfigurationError: If no adapter is registered for *engine*.
    """
    with _lock:
        adapter = _registry.get(engine)
        if adapter is not None:
            return adapter

        builtin = _BUILTINS.get(engine)
        if builtin is None:
            available = ", ".join(sorted({*_registry, *_BUILTINS}))
            msg = f"Unsupported engine: {engine!r} (available: {available})"
            raise ConfigurationError(msg)

        module_name, class_name = builtin
        adapter = getattr(import_module(module_name), class_name)()
        _registry[engine] = adapter
        return adapter


def available_engines() -> list[str]:
    with _lock:
        return sorted({*_registry, *_BUILTINS})
