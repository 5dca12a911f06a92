"""Tests for warble.compression — run collapsing, base64 payloads, and the client script."""

import base64
import logging

import pytest

from warble.compression import (
    CompressedPayload,
    compress_data,
    decompress_data,
    generate_compressed_data_script,
)
from warble.config import CompressionOptions


class TestCompressData:
    def test_disabled(self) -> None:
        assert compress_data({"a": "x" * 100}, None) is None
        assert compress_data({"a": "x" * 100}, CompressionOptions(enabled=False)) is None

    def test_below_threshold(self) -> None:
        options = CompressionOptions(enabled=True, threshold=10_240)
        assert compress_data({"a": 1}, options) is None

    def test_long_run_compresses(self) -> None:
        options = CompressionOptions(enabled=True, threshold=10_240)
        payload = compress_data("a" * 20_000, options)
        assert payload is not None
        assert payload.compressed_size < payload.original_size
        assert payload.original_size == 20_002

    def test_incompressible_returns_none(self) -> None:
        assert compress_data({"k": "abcdefghij"}, CompressionOptions(enabled=True)) is None

    def test_payload_is_base64(self) -> None:
        payload = compress_data({"pad": "-" * 50}, CompressionOptions(enabled=True))
        assert payload is not None
        decoded = base64.b64decode(payload.compressed).decode("utf-8")
        assert decoded == '{"pad":"\x01-50\x01"}'


class TestDecompressData:
    @pytest.mark.parametrize(
        "data",
        [
            "a" * 20_000,
            {"pad": "-" * 50, "digits": "1" * 30, "mix": "xx" + "y" * 12 + "zz"},
            {"nested": [{"s": " " * 40}, "é" * 25], "n": 11111111111111},
        ],
    )
    def test_round_trip_is_lossless(self, data: object) -> None:
        payload = compress_data(data, CompressionOptions(enabled=True))
        assert payload is not None
        assert decompress_data(payload.compressed) == data

    def test_malformed_input(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="warble.compression"):
            assert decompress_data("not base64!!") is None
        assert "Failed to decompress" in caplog.text

    def test_invalid_json(self) -> None:
        assert decompress_data(base64.b64encode(b"{oops").decode()) is None


class TestCompressedDataScript:
    def test_script_contents(self) -> None:
        payload = CompressedPayload(compressed="e30=", original_size=200, compressed_size=50)
        script = generate_compressed_data_script(payload)
        assert script.startswith("<script>")
        assert script.endswith("</script>")
        assert 'var compressed = "e30=";' in script
        assert "window.__DATA__ = decompressData(compressed);" in script
        assert "originalSize: 200," in script
        assert "compressedSize: 50," in script
        assert "ratio: 25.00" in script
        assert "TextDecoder" in script

    def test_ratio_property(self) -> None:
        assert CompressedPayload("", 400, 100).ratio == 25.0
