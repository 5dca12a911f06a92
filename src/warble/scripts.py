"""Script declarations: extraction, de-duplication, ordering, and tags.

Components declare scripts as URLs or definitions::

    Page.scripts = [
        "/static/page.js",
        {"src": "/static/chart.js", "async": True, "priority": 10},
        {"content": "console.log('ready')", "priority": 200},
    ]

Scripts from every layout, the page, and the render options are merged:
the first declaration of a given ``src`` (or inline ``content``) wins,
and the result is ordered by ``priority`` (lower first, default 100).
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

from kida.utils.html import html_escape

from warble.components import describe_component
from warble.types import ScriptDefinition

DEFAULT_PRIORITY = 100

# Keys rendered explicitly; everything else is passed through as an attribute.
_RESERVED = frozenset({"src", "content", "type", "async", "defer", "priority"})


def extract_scripts(component: Any) -> list[ScriptDefinition]:
    """Return the component's script declarations, normalized to mappings."""
    return list(describe_component(component).scripts)


def normalize_scripts(scripts: Iterable[ScriptDefinition | str]) -> list[ScriptDefinition]:
    """Turn bare URLs into ``{"src": url}`` definitions."""
    normalized: list[ScriptDefinition] = []
    for script in scripts:
        if isinstance(script, str):
            normalized.append({"src": script})
        elif isinstance(script, Mapping):
            normalized.append(dict(script))  # type: ignore[arg-type]
    return normalized


def script_key(script: Mapping[str, Any]) -> str:
    """Identity used for de-duplication: ``src``, then ``content``, then the whole entry."""
    return (
        script.get("src")
        or script.get("content")
        or json.dumps(script, sort_keys=True, default=str)
    )


def _priority(script: Mapping[str, Any]) -> int | float:
    priority = script.get("priority")
    return DEFAULT_PRIORITY if priority is None else priority


def merge_scripts(*script_lists: Iterable[ScriptDefinition]) -> list[ScriptDefinition]:
    """Merge script lists: first occurrence wins, then a stable sort by priority."""
    by_key: dict[str, ScriptDefinition] = {}
    for scripts in script_lists:
        for script in scripts:
            by_key.setdefault(script_key(script), script)
    return sorted(by_key.values(), key=_priority)


def _script_attrs(script: Mapping[str, Any]) -> list[str]:
    attrs: list[str] = []
    if script.get("src"):
        attrs.append(f'src="{html_escape(script["src"])}"')
    if script.get("type"):
        attrs.append(f'type="{html_escape(script["type"])}"')
    elif script.get("content"):
        attrs.append('type="text/javascript"')
    if script.get("async"):
        attrs.append("async")
    if script.get("defer"):
        attrs.append("defer")

    for key, value in script.items():
        if key in _RESERVED:
            continue
        if value is True:
            attrs.append(key)
        elif isinstance(value, str):
            attrs.append(f'{key}="{html_escape(value)}"')
    return attrs


def generate_script_tags(scripts: Iterable[ScriptDefinition]) -> str:
    """Render one ``<script>`` tag per definition."""
    tags: list[str] = []
    for script in scripts:
        attrs = "".join(f" {attr}" for attr in _script_attrs(script))
        body = script.get("content") or ""
        tags.append(f"<script{attrs}>{body}</script>")
    return "\n  ".join(tags)


def _loader_for(script: Mapping[str, Any]) -> str:
    if script.get("content"):
        return f"(function() {{ {script['content']} }})();"
    if not script.get("src"):
        return ""
    lines = [
        "(function() {",
        "      var script = document.createElement('script');",
        f"      script.src = {json.dumps(script['src'])};",
    ]
    if script.get("async"):
        lines.append("      script.async = true;")
    if script.get("defer"):
        lines.append("      script.defer = true;")
    if script.get("type"):
        lines.append(f"      script.type = {json.dumps(script['type'])};")
    lines.append("      document.head.appendChild(script);")
    lines.append("    })();")
    return "\n".join(lines)


def is_loader_script(script: Mapping[str, Any]) -> bool:
    """True for entries the async loader handles: ``async`` or explicitly prioritized."""
    return bool(script.get("async")) or script.get("priority") is not None


def generate_async_script_loader(scripts: Iterable[ScriptDefinition]) -> str:
    """Build one script that loads ``async`` or explicitly prioritized entries.

    Inline content runs immediately; external scripts are created and
    appended to ``<head>`` with their ``async``/``defer``/``type`` kept.
    Returns ``""`` when no entry qualifies.
    """
    loaders = [
        loader
        for script in scripts
        if is_loader_script(script)
        if (loader := _loader_for(script))
    ]
    if not loaders:
        return ""
    body = "\n    ".join(loaders)
    return f"<script>\n  (function() {{\n    {body}\n  }})();\n</script>"
