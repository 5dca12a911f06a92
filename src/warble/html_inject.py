"""HTML injection.

Places generated fragments (meta tags, data scripts, script tags) into a
rendered document without requiring insertion markers in the template.

Each injection looks for the *last* tag of its kind in the target region
and inserts right after it, so repeated injections of the same type
cluster together::

    html = inject_multiple(html, [
        Injection(meta_tags, type="meta", in_head=True),
        Injection(data_script, type="data-script", in_head=True),
        Injection(script_tags, type="script"),
    ])

Component markup goes through ``inject_component_html``, which prefers an
explicit ``<!--ssr-outlet-->`` marker.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

OUTLET_MARKER = "<!--ssr-outlet-->"

type InjectType = Literal["meta", "script", "data-script", "component"]

_HEAD_OPEN = re.compile(r"<head\b[^>]*>", re.IGNORECASE)
_BODY_OPEN = re.compile(r"<body\b[^>]*>", re.IGNORECASE)
_META_TAG = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_SCRIPT_OPEN = re.compile(r"<script\b[^>]*>", re.IGNORECASE)
_SCRIPT_CLOSE = re.compile(r"</script\s*>", re.IGNORECASE)
_LEADING_NEWLINE = re.compile(r"\s*\n")


@dataclass(frozen=True, slots=True)
class Injection:
    """One fragment to inject, with its placement options."""

    content: str
    type: InjectType | None = None
    in_head: bool = False
    custom_position: str | None = None


def _find(html: str, tag: str) -> int:
    return html.lower().find(tag)


def _head_region(html: str) -> tuple[int, int]:
    end = _find(html, "</head>")
    return 0, end if end != -1 else len(html)


def _body_region(html: str) -> tuple[int, int]:
    end = _find(html, "</body>")
    if end == -1:
        end = len(html)
    match = _BODY_OPEN.search(html, 0, end)
    if match:
        return match.end(), end
    head_end = _find(html, "</head>")
    if head_end != -1 and head_end < end:
        return head_end + len("</head>"), end
    return 0, end


def _last_meta_end(html: str, region: tuple[int, int]) -> int:
    end = -1
    for match in _META_TAG.finditer(html, *region):
        end = match.end()
    return end


def _last_script_end(html: str, region: tuple[int, int]) -> int:
    """End of the last complete ``<script>...</script>`` pair opened in *region*."""
    last_open = None
    for match in _SCRIPT_OPEN.finditer(html, *region):
        last_open = match
    if last_open is None:
        return -1
    close = _SCRIPT_CLOSE.search(html, last_open.end())
    return close.end() if close else -1


def _insert_after(html: str, pos: int, content: str) -> str:
    before, after = html[:pos], html[pos:]
    newline = _LEADING_NEWLINE.match(after)
    separator = newline.group(0) if newline else "\n  "
    return f"{before}{separator}{content}{after}"


def _inject_in_head(html: str, content: str) -> str:
    """Before ``</head>``, else after ``<head>``, else at the very start."""
    end = _find(html, "</head>")
    if end != -1:
        return f"{html[:end]}\n  {content}\n{html[end:]}"
    match = _HEAD_OPEN.search(html)
    if match:
        return f"{html[: match.end()]}\n  {content}\n{html[match.end() :]}"
    return f"{content}\n{html}"


def _inject_in_body(html: str, content: str) -> str:
    """Before ``</body>``, else at the very end."""
    end = _find(html, "</body>")
    if end != -1:
        return f"{html[:end]}\n  {content}\n{html[end:]}"
    return f"{html}\n{content}"


def inject_html(
    html: str,
    content: str,
    *,
    type: InjectType | None = None,  # noqa: A002
    in_head: bool = False,
    custom_position: str | None = None,
) -> str:
    """Inject *content* into *html* at a position chosen by its type.

    Resolution order:

    1. *custom_position* literal found → replace its first occurrence.
    2. ``type="meta"`` in head → after the last ``<meta>`` of the head.
    3. ``type="data-script"`` in head → after the last head ``<script>`` pair.
    4. ``type="script"`` in body → after the last body ``<script>`` pair.
    5. Otherwise → before ``</head>``/``</body>`` of the target region.

    Steps 2-4 fall back to step 5's placement when no anchor tag exists.
    """
    if not content:
        return html

    if custom_position and custom_position in html:
        return html.replace(custom_position, content, 1)

    if type == "meta" and in_head:
        pos = _last_meta_end(html, _head_region(html))
        if pos != -1:
            return _insert_after(html, pos, content)
        return _inject_in_head(html, content)

    if type == "data-script" and in_head:
        pos = _last_script_end(html, _head_region(html))
        if pos != -1:
            return _insert_after(html, pos, content)
        return _inject_in_head(html, content)

    if type == "script" and not in_head:
        pos = _last_script_end(html, _body_region(html))
        if pos != -1:
            return _insert_after(html, pos, content)
        return _inject_in_body(html, content)

    if in_head:
        return _inject_in_head(html, content)
    return _inject_in_body(html, content)


def inject_component_html(
    template: str | None,
    markup: str,
    marker: str = OUTLET_MARKER,
) -> str:
    """Place rendered component markup into a document template.

    - No template: the markup is returned verbatim.
    - Outlet marker present: the marker is replaced.
    - ``<body>`` and ``</body>`` present: the markup becomes the body.
    - Only ``</body>`` present: the markup goes right before it.
    - Neither: the markup replaces the template.
    """
    if not template:
        return markup

    if marker in template:
        return template.replace(marker, markup, 1)

    body_end = _find(template, "</body>")
    body_open = _BODY_OPEN.search(template)
    if body_open and body_end != -1 and body_open.end() <= body_end:
        return f"{template[: body_open.end()]}\n  {markup}\n{template[body_end:]}"
    if body_end != -1:
        return f"{template[:body_end]}\n  {markup}\n{template[body_end:]}"
    return markup


def inject_multiple(html: str, injections: Iterable[Injection]) -> str:
    """Apply injections in order; empty fragments are skipped."""
    result = html
    for injection in injections:
        if injection.content:
            result = inject_html(
                result,
                injection.content,
                type=injection.type,
                in_head=injection.in_head,
                custom_position=injection.custom_position,
            )
    return result
