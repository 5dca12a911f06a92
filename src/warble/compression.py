"""Data payload compression.

Large ``window.__DATA__`` payloads with long runs of repeated characters
(padding, separators, repeated fill values) shrink noticeably when those
runs are collapsed.  The payload is serialized as compact JSON, each run
of more than ``RUN_THRESHOLD`` identical characters becomes a marker
``"\\x01{char}{count}\\x01"``, and the result is base64-encoded for safe
embedding.

Compact JSON never contains a raw ``\\x01`` (control characters inside
strings are always escaped), so the markers are unambiguous and
``decompress_data`` restores the exact original.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from warble._internal.serialize import to_json

if TYPE_CHECKING:
    from warble.config import CompressionOptions

logger = logging.getLogger("warble.compression")

RUN_THRESHOLD = 10
_MARK = "\x01"

_RUN = re.compile(r"(.)\1{%d,}" % RUN_THRESHOLD, re.DOTALL)
_MARKER = re.compile(r"\x01(.)(\d+)\x01", re.DOTALL)


@dataclass(frozen=True, slots=True)
class CompressedPayload:
    """A compressed payload and its sizes in UTF-8 bytes."""

    compressed: str
    original_size: int
    compressed_size: int

    @property
    def ratio(self) -> float:
        """Compressed size as a percentage of the original."""
        return self.compressed_size / self.original_size * 100


def _collapse_runs(text: str) -> str:
    return _RUN.sub(lambda m: f"{_MARK}{m.group(1)}{len(m.group(0))}{_MARK}", text)


def _expand_runs(text: str) -> str:
    return _MARKER.sub(lambda m: m.group(1) * int(m.group(2)), text)


def compress_data(data: Any, options: CompressionOptions | None) -> CompressedPayload | None:
    """Compress *data* for injection.

    Returns ``None`` when compression is disabled, the payload is under
    ``options.threshold`` bytes, or collapsing runs does not make it
    smaller.

    Raises:
        SerializationError: If *data* is not JSON-serializable.
    """
    if options is None or not options.enabled:
        return None

    text = to_json(data)
    original_size = len(text.encode("utf-8"))
    if options.threshold and original_size < options.threshold:
        return None

    collapsed = _collapse_runs(text)
    encoded = collapsed.encode("utf-8")
    compressed_size = len(encoded)
    if compressed_size >= original_size:
        return None

    return CompressedPayload(
        compressed=base64.b64encode(encoded).decode("ascii"),
        original_size=original_size,
        compressed_size=compressed_size,
    )


def decompress_data(compressed: str) -> Any:
    """Reverse ``compress_data``.  Returns ``None`` for malformed input."""
    try:
        text = base64.b64decode(compressed, validate=True).decode("utf-8")
        return json.loads(_expand_runs(text))
    except (binascii.Error, ValueError):
        logger.exception("Failed to decompress data payload")
        return None


def generate_compressed_data_script(payload: CompressedPayload) -> str:
    """Render a script that decodes the payload into ``window.__DATA__``.

    Also exposes ``window.__DATA_COMPRESSION__`` with the sizes and the
    compression ratio (percent, two decimals).
    """
    return f"""<script>
  (function() {{
    function decompressData(compressed) {{
      try {{
        var bytes = Uint8Array.from(atob(compressed), function(c) {{ return c.charCodeAt(0); }});
        var text = new TextDecoder().decode(bytes);
        text = text.replace(/\\x01([\\s\\S])(\\d+)\\x01/g, function(_, ch, n) {{
          return ch.repeat(parseInt(n, 10));
        }});
        return JSON.parse(text);
      }} catch (error) {{
        console.error('Decompress failed:', error);
        return null;
      }}
    }}
    var compressed = {json.dumps(payload.compressed)};
    window.__DATA__ = decompressData(compressed);
    window.__DATA_COMPRESSION__ = {{
      originalSize: {payload.original_size},
      compressedSize: {payload.compressed_size},
      ratio: {payload.ratio:.2f}
    }};
  }})();
</script>"""
