"""Kida template renderer (engine ``"kida"``).

String components are template names.  Each template receives its props
as context plus ``children``, the already-rendered inner markup::

    {# layout.html #}
    <div class="layout">{{ children }}</div>

    {# page.html #}
    <h1>{{ title }}</h1>

Function components work exactly as with the ``"html"`` engine, so a
template layout can wrap a function page and vice versa.

The environment comes from the adapter constructor or from
``RenderOptions.options["env"]``.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from kida import ChoiceLoader, Environment, FileSystemLoader, Markup

from warble.adapters.elements import render_page
from warble.errors import ConfigurationError

if TYPE_CHECKING:
    from warble.config import RenderOptions
    from warble.types import AdapterResult


def create_environment(
    template_dir: str | Path,
    *extra_dirs: str | Path,
    autoescape: bool = True,
    debug: bool = False,
) -> Environment:
    """Create a kida Environment over one or more template directories.

    Directories are searched in order, so *template_dir* wins over
    *extra_dirs* (shared partials, component libraries).
    """
    loaders = [FileSystemLoader(str(template_dir))]
    loaders.extend(FileSystemLoader(str(d)) for d in extra_dirs)
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=autoescape,
        auto_reload=debug,
    )


class KidaAdapter:
    """Renders template-name components through a kida Environment."""

    __slots__ = ("_env",)

    engine = "kida"

    def __init__(self, env: Environment | None = None) -> None:
        self._env = env

    def _environment(self, options: RenderOptions) -> Environment:
        env = options.options.get("env") or self._env
        if env is None:
            msg = (
                "The kida engine needs a template environment. "
                "Pass KidaAdapter(env=...) or RenderOptions(options={'env': env})."
            )
            raise ConfigurationError(msg)
        return env

    async def render_ssr(self, options: RenderOptions) -> AdapterResult:
        env = self._environment(options)

        def render_template(name: str, props: dict[str, Any], children: Markup) -> str:
            template = env.get_template(name)
            return template.render({**props, "children": children})

        return await render_page(options, engine=self.engine, render_named=render_template)
