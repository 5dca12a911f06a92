"""Adapter failure recovery.

The coordinator wraps one adapter call.  When the adapter raises, the
error handler's ``on_error`` callback is notified, the failure is logged,
and, if a fallback component is configured, the render is retried once
with only the component swapped::

    RENDERING ──ok──▶ SUCCEEDED
        │
        ▼
      FAILED ──fallback?──▶ RECOVERING ──ok──▶ SUCCEEDED
        │                       │
        ▼                       ▼
    FATALLY_FAILED ◀────────────┘

There is never more than one recovery attempt.
"""

from __future__ import annotations

import html
import logging
import traceback
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from warble._internal.invoke import invoke
from warble.errors import AdapterRenderError, ConfigurationError, FallbackRenderError
from warble.types import AdapterResult

if TYPE_CHECKING:
    from warble.adapters.protocol import Adapter
    from warble.config import ErrorHandler, RenderOptions

logger = logging.getLogger("warble.recovery")


class RenderState(Enum):
    RENDERING = "rendering"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    RECOVERING = "recovering"
    FATALLY_FAILED = "fatally_failed"


async def handle_render_error(
    exc: Exception,
    info: dict[str, Any],
    error_handler: ErrorHandler | None,
) -> bool:
    """Log *exc* and notify ``on_error``.

    The callback's own exceptions are logged and never propagated.
    Returns ``True`` when a fallback component is available.
    """
    if error_handler is None or error_handler.log_error:
        logger.error(
            "[%s] %s render failed for %s",
            info.get("engine"),
            str(info.get("phase", "ssr")).upper(),
            _describe(info.get("component")),
            exc_info=exc,
        )

    if error_handler is not None and error_handler.on_error is not None:
        try:
            await invoke(error_handler.on_error, exc, info)
        except Exception:
            logger.exception("Error handler callback failed")

    return error_handler is not None and error_handler.fallback_component is not None


def generate_error_html(exc: BaseException, debug: bool = False) -> str:
    """Static error document, built without any template engine.

    The message is always escaped; the traceback is included only when
    *debug* is set.
    """
    message = html.escape(str(exc) or type(exc).__name__)
    parts = [
        '<div class="warble-error" style="padding: 20px; font-family: sans-serif;">',
        "  <h1>Render error</h1>",
        f"  <p>{message}</p>",
    ]
    if debug:
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        parts.append(
            '  <pre style="background: #f5f5f5; padding: 10px; overflow: auto;">'
            f"{html.escape(tb)}</pre>"
        )
    parts.append("</div>")
    return "\n".join(parts)


def _describe(component: Any) -> str:
    name = getattr(component, "__qualname__", None) or getattr(component, "__name__", None)
    return str(name) if name else repr(component)


class ErrorRecoveryCoordinator:
    """Runs one adapter render with at most one fallback attempt.

    ``history`` records every state the coordinator passed through.
    """

    __slots__ = ("_adapter", "_debug", "_engine", "_error_handler", "history")

    def __init__(
        self,
        adapter: Adapter,
        error_handler: ErrorHandler | None = None,
        *,
        engine: str | None = None,
        debug: bool = False,
    ) -> None:
        self._adapter = adapter
        self._error_handler = error_handler
        self._engine = engine or getattr(adapter, "engine", "unknown")
        self._debug = debug
        self.history: list[RenderState] = []

    @property
    def state(self) -> RenderState | None:
        return self.history[-1] if self.history else None

    def _enter(self, state: RenderState) -> None:
        if self._debug:
            logger.debug("[%s] %s", self._engine, state.value)
        self.history.append(state)

    async def render(self, options: RenderOptions) -> AdapterResult:
        """Render through the adapter, recovering once via the fallback.

        Raises:
            AdapterRenderError: The adapter failed and no fallback is set.
            FallbackRenderError: The fallback failed too, unless
                ``ErrorHandler.error_document`` asks for the static
                error document instead.
        """
        self._enter(RenderState.RENDERING)
        try:
            result = await self._adapter.render_ssr(options)
        except ConfigurationError:
            raise
        except Exception as exc:
            self._enter(RenderState.FAILED)
            info = {"engine": self._engine, "component": options.component, "phase": "ssr"}
            if not await handle_render_error(exc, info, self._error_handler):
                self._enter(RenderState.FATALLY_FAILED)
                raise AdapterRenderError(self._engine, str(exc)) from exc
            return await self._recover(options, exc)

        self._enter(RenderState.SUCCEEDED)
        return result

    async def _recover(self, options: RenderOptions, original: Exception) -> AdapterResult:
        handler = self._error_handler
        assert handler is not None
        self._enter(RenderState.RECOVERING)
        try:
            result = await self._adapter.render_ssr(
                replace(options, component=handler.fallback_component)
            )
        except Exception as exc:
            self._enter(RenderState.FATALLY_FAILED)
            logger.error("[%s] Fallback component failed", self._engine, exc_info=exc)
            document = generate_error_html(original, self._debug)
            if handler.error_document:
                return AdapterResult(
                    html=document,
                    render_info={"engine": self._engine, "error": True},
                )
            raise FallbackRenderError(self._engine, str(exc), document) from exc

        self._enter(RenderState.SUCCEEDED)
        return result
