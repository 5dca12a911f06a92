"""Deferred data injection for large payloads.

When the data payload is over ``lazy_threshold`` bytes the render
injects a script that fills ``window.__DATA__`` after the document has
loaded (or fetches it from an endpoint) and then dispatches a
``__DATA_LOADED__`` event.
"""

import json
from collections.abc import Mapping
from typing import Any

from warble._internal.serialize import script_json, to_json

DEFAULT_THRESHOLD = 10_240


def should_lazy_load(data: Mapping[str, Any], threshold: int = DEFAULT_THRESHOLD) -> bool:
    """True when the serialized payload is larger than *threshold* bytes."""
    return len(to_json(data).encode("utf-8")) > threshold


def generate_lazy_data_script(data: Mapping[str, Any], endpoint: str | None = None) -> str:
    """Render the deferred-data script.

    With *endpoint* the data is fetched as JSON from that URL; otherwise
    *data* is inlined and assigned once the DOM is ready.
    """
    if endpoint:
        return f"""<script>
  (function() {{
    if (!window.__DATA__) {{
      window.__DATA__ = {{}};
    }}
    fetch({json.dumps(endpoint)})
      .then(function(response) {{ return response.json(); }})
      .then(function(data) {{
        Object.assign(window.__DATA__, data);
        window.dispatchEvent(new CustomEvent('__DATA_LOADED__', {{ detail: data }}));
      }})
      .catch(function(error) {{
        console.error('Lazy data load failed:', error);
      }});
  }})();
</script>"""

    payload = script_json(data)
    return f"""<script>
  (function() {{
    if (!window.__DATA__) {{
      window.__DATA__ = {{}};
    }}
    var data = {payload};
    function apply() {{
      Object.assign(window.__DATA__, data);
      window.dispatchEvent(new CustomEvent('__DATA_LOADED__', {{ detail: data }}));
    }}
    if (document.readyState === 'loading') {{
      document.addEventListener('DOMContentLoaded', apply);
    }} else {{
      setTimeout(apply, 0);
    }}
  }})();
</script>"""
