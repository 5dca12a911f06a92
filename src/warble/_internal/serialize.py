"""JSON helpers for payloads embedded in ``<script>`` tags."""

import json
from typing import Any

from warble.errors import SerializationError

# Characters that must not appear raw inside an inline <script> body.
_SCRIPT_UNSAFE = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)

_JSON_SCALARS = (str, int, float, bool, type(None))


def to_json(value: Any) -> str:
    """Serialize *value* to compact JSON.

    Raises:
        SerializationError: If *value* holds something JSON cannot encode.
    """
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        msg = f"Cannot serialize {type(value).__name__} to JSON: {exc}"
        raise SerializationError(msg) from exc


def script_json(value: Any) -> str:
    """Serialize *value* as JSON that is safe inside an inline script."""
    return to_json(value).translate(_SCRIPT_UNSAFE)


def is_json_native(value: Any) -> bool:
    """True when *value* is built only from JSON scalars, lists and str-keyed dicts."""
    if isinstance(value, _JSON_SCALARS):
        return True
    if isinstance(value, (list, tuple)):
        return all(is_json_native(item) for item in value)
    if isinstance(value, dict):
        return all(isinstance(k, str) and is_json_native(v) for k, v in value.items())
    return False
