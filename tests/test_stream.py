"""Tests for tezos_rpc.wire.stream -- framing of back-to-back JSON values.

Covers:

1. **Framing** -- values split across chunks at any byte, several values
   in one chunk, whitespace between values.
2. **Incomplete input** -- numbers, literals, strings and escapes that
   may still grow.
3. **Failures** -- malformed input, partial values at end of input,
   oversized values, invalid UTF-8.
"""
from __future__ import annotations

import json
from unittest import mock

import pytest

from tezos_rpc.core.errors import DecodeError
from tezos_rpc.wire.stream import JSONStreamDecoder

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

HEAD = {
    "hash": "BKiqiXgqAPHX4bRzk2p1jEKHijaxLPdcQi6hqVfGhBazmVUbFbv",
    "level": 219133,
    "fitness": ["00", "00000000005a125f"],
    "protocol_data": "été ✓",
}


def feed_all(decoder: JSONStreamDecoder, chunks: list[bytes]) -> list[object]:
    values: list[object] = []
    for chunk in chunks:
        values.extend(decoder.feed(chunk))
    values.extend(decoder.finish())
    return values


# =========================================================================
# Framing
# =========================================================================


class TestFraming:
    """Splitting the byte stream into values."""

    def test_single_value(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b'{"block": "BLgz6z8"}') == [{"block": "BLgz6z8"}]
        assert decoder.pending == ""
        assert decoder.finish() == []

    def test_back_to_back_values(self) -> None:
        decoder = JSONStreamDecoder()
        values = decoder.feed(b'{"n": 1}{"n": 2}\n{"n": 3}\r\n')
        assert values == [{"n": 1}, {"n": 2}, {"n": 3}]

    def test_split_at_every_byte(self) -> None:
        data = json.dumps(HEAD, ensure_ascii=False).encode("utf-8") + b"\n"
        for cut in range(1, len(data)):
            decoder = JSONStreamDecoder()
            first = decoder.feed(data[:cut])
            second = decoder.feed(data[cut:])
            assert first + second == [HEAD], f"cut at byte {cut}"

    def test_one_byte_chunks(self) -> None:
        data = json.dumps(HEAD, ensure_ascii=False).encode("utf-8") * 2
        values = feed_all(JSONStreamDecoder(), [bytes([b]) for b in data])
        assert values == [HEAD, HEAD]

    def test_multibyte_character_split(self) -> None:
        decoder = JSONStreamDecoder()
        encoded = '"✓"'.encode()
        assert decoder.feed(encoded[:2]) == []
        assert decoder.feed(encoded[2:]) == ["✓"]

    def test_escape_split(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b'["\\u00') == []
        assert decoder.feed(b'e9"]') == [["é"]]

    def test_whitespace_only_finish(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b"  \n\t") == []
        assert decoder.finish() == []

    def test_large_value_parsed_once(self) -> None:
        # A mempool-sized batch arriving in 16 KiB chunks.
        batch = [{"hash": f"oo{i:08d}", "branch": "BL" + "x" * 48, "data": "ab" * 48} for i in range(20_000)]
        data = json.dumps(batch).encode() * 2
        assert len(data) > 4_000_000
        chunks = [data[i : i + 16_384] for i in range(0, len(data), 16_384)]

        decoder = JSONStreamDecoder()
        with mock.patch.object(
            decoder._decoder, "raw_decode", wraps=decoder._decoder.raw_decode
        ) as raw_decode:
            values = feed_all(decoder, chunks)

        assert values == [batch, batch]
        assert raw_decode.call_count == 2

    def test_back_to_back_literals(self) -> None:
        assert feed_all(JSONStreamDecoder(), [b"true", b"false null 1"]) == [True, False, None, 1]


# =========================================================================
# Incomplete input
# =========================================================================


class TestIncompleteInput:
    """Text that may still be the start of a value is kept."""

    def test_number_waits_for_more_digits(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b"12") == []
        assert decoder.feed(b"3 ") == [123]

    def test_trailing_number_completed_by_finish(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b"42") == []
        assert decoder.finish() == [42]

    def test_number_then_object(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b'7{"a": 1}') == [7, {"a": 1}]

    def test_partial_literal(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b"[tr") == []
        assert decoder.feed(b"ue]") == [[True]]

    def test_unterminated_string_waits(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b'{"block": "BLgz') == []
        assert decoder.pending == '{"block": "BLgz'
        assert decoder.feed(b'6z8"}') == [{"block": "BLgz6z8"}]


# =========================================================================
# Failures
# =========================================================================


class TestFailures:
    """Input that can never become a value."""

    def test_malformed_input(self) -> None:
        with pytest.raises(DecodeError, match="invalid JSON in stream"):
            JSONStreamDecoder().feed(b"{]")

    def test_malformed_text_reported_when_container_closes(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b"[1, x") == []
        with pytest.raises(DecodeError, match="invalid JSON in stream"):
            decoder.feed(b"]")

    @pytest.mark.parametrize("data", [b'{"a": NaN}', b"[Infinity]", b"-Infinity ", b"NaN"])
    def test_non_json_constants(self, data: bytes) -> None:
        with pytest.raises(DecodeError, match="invalid JSON constant"):
            feed_all(JSONStreamDecoder(), [data])

    def test_malformed_chunk_after_value(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b'{"n": 1}') == [{"n": 1}]
        with pytest.raises(DecodeError):
            decoder.feed(b"}")

    def test_partial_value_at_finish(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed(b'{"n": 1}{"n": ') == [{"n": 1}]
        with pytest.raises(DecodeError, match="unexpected end of JSON stream"):
            decoder.finish()

    def test_feed_after_finish(self) -> None:
        decoder = JSONStreamDecoder()
        decoder.finish()
        with pytest.raises(DecodeError, match="already finished"):
            decoder.feed(b"{}")

    def test_buffer_limit(self) -> None:
        decoder = JSONStreamDecoder(max_buffer_size=16)
        with pytest.raises(DecodeError, match="exceeds 16 characters") as exc_info:
            decoder.feed(b'{"data": "' + b"x" * 32)
        assert exc_info.value.details["buffered"] > 16

    def test_buffer_limit_only_counts_pending_text(self) -> None:
        decoder = JSONStreamDecoder(max_buffer_size=16)
        values = decoder.feed(b'{"data": "' + b"x" * 32 + b'"}')
        assert values == [{"data": "x" * 32}]

    def test_invalid_utf8(self) -> None:
        with pytest.raises(DecodeError, match="invalid UTF-8"):
            JSONStreamDecoder().feed(b'"\xff"')

    def test_truncated_utf8_at_finish(self) -> None:
        decoder = JSONStreamDecoder()
        assert decoder.feed('"✓'.encode()[:2]) == []
        with pytest.raises(DecodeError, match="truncated UTF-8"):
            decoder.finish()
