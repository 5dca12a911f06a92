"""Warble exception hierarchy.

Shared across the orchestrator, adapters, and helpers so every module
raises and catches the same types.
"""

from typing import Any


class WarbleError(Exception):
    """Base for all warble-specific errors."""


class ConfigurationError(WarbleError):
    """Raised when render options are invalid.

    Typically an unknown engine name or an adapter that needs a template
    environment it was never given.
    """


class InvalidComponent(WarbleError, TypeError):  # noqa: N818
    """A component reference that is not a callable, object, or tag name.

    Raised by ``create_component_tree`` before the element factory is
    called, so a malformed layout never reaches the adapter.
    """

    def __init__(self, component: Any) -> None:
        self.component = component
        actual = "None" if component is None else type(component).__name__
        super().__init__(
            f"Invalid component (expected a callable, object or tag name, got {actual})"
        )


class LoadError(WarbleError):
    """A component's ``load`` function raised.

    Never propagated: the loader logs it and the render continues
    without that component's data.
    """

    def __init__(self, component: Any, cause: BaseException) -> None:
        self.component = component
        self.cause = cause
        super().__init__(f"Load function failed for {_component_name(component)}: {cause}")


class MetadataError(WarbleError):
    """A component's ``metadata`` callable raised.

    Propagates to the caller; the original exception is chained.
    """

    def __init__(self, component: Any, cause: BaseException) -> None:
        self.component = component
        self.cause = cause
        super().__init__(
            f"Metadata resolution failed for {_component_name(component)}: {cause}"
        )


class RenderError(WarbleError):
    """Base for failures raised while the adapter produces markup."""

    def __init__(self, engine: str, message: str) -> None:
        self.engine = engine
        super().__init__(f"SSR render failed ({engine}): {message}")


class AdapterRenderError(RenderError):
    """The adapter raised and no fallback component was configured."""


class FallbackRenderError(RenderError):
    """The fallback component failed too.

    Carries the static error document so callers can still serve it.
    """

    def __init__(self, engine: str, message: str, document: str) -> None:
        super().__init__(engine, message)
        self.document = document


class SerializationError(WarbleError):
    """A value expected to be text (or JSON) could not be converted."""


class StaticGenerationError(WarbleError):
    """Rendering or writing one route failed during static generation."""

    def __init__(self, route: str, cause: BaseException) -> None:
        self.route = route
        self.cause = cause
        super().__init__(f"Static generation failed (route: {route}): {cause}")


def _component_name(component: Any) -> str:
    name = getattr(component, "__qualname__", None) or getattr(component, "__name__", None)
    if name:
        return str(name)
    return type(component).__name__
