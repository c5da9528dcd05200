"""Incremental decoding of back-to-back JSON values.

Monitor endpoints of the node answer with a chunked body holding a
sequence of JSON values with no wrapper and no mandatory separator::

    {"block": "BLx...", "timestamp": "..."}{"block": "BLy...", ...}

Chunk boundaries are arbitrary: a value may span several chunks and a
chunk may hold several values, or split a multi-byte UTF-8 character.
:class:`JSONStreamDecoder` buffers input and yields every value as soon
as it is complete.

Usage
-----
::

    decoder = JSONStreamDecoder()
    async for chunk in response.aiter_bytes():
        for value in decoder.feed(chunk):
            handle(value)
    for value in decoder.finish():
        handle(value)
"""
from __future__ import annotations

import codecs
import json
import re
from typing import Any

from tezos_rpc.codec.discriminator import reject_constant
from tezos_rpc.core.errors import DecodeError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_MAX_BUFFER_SIZE: int = 16 * 1_048_576  # 16 MiB

_WHITESPACE = re.compile(r"[ \t\n\r]*")

# Runs of text the scanner can skip in each state.
_CONTAINER_BODY = re.compile(r'[^"\[\]{}]*')
_STRING_BODY = re.compile(r'[^"\\]*')
_SCALAR_BODY = re.compile(r'[^ \t\n\r"\[\]{},:]*')

# First characters of a top-level number or literal.
_SCALAR_START = frozenset("-0123456789tfn")

# Scanner states.
_IDLE = 0
_CONTAINER = 1
_STRING = 2
_SCALAR = 3


# ---------------------------------------------------------------------------
# JSONStreamDecoder
# ---------------------------------------------------------------------------


class JSONStreamDecoder:
    """Splits a byte stream into complete JSON values.

    Only newly fed text is scanned, tracking string, escape and bracket
    state, so a value spanning many chunks is parsed once, when its
    closing bracket or quote arrives.  A bare number or literal at the
    top level ends at the next delimiter or at :meth:`finish`.

    Malformed text inside an open object or array is reported when the
    value closes, when it outgrows *max_buffer_size*, or at
    :meth:`finish`.

    Parameters
    ----------
    max_buffer_size:
        Maximum number of characters held while waiting for a value to
        complete.  Exceeding it is a :class:`DecodeError`.
    """

    def __init__(self, *, max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE) -> None:
        self._decoder = json.JSONDecoder(parse_constant=reject_constant)
        self._text = codecs.getincrementaldecoder("utf-8")()
        self._parts: list[str] = []
        self._size = 0
        self._state = _IDLE
        self._depth = 0
        self._escape = False
        self._max_buffer_size = max_buffer_size
        self._finished = False

    @property
    def pending(self) -> str:
        """Buffered text not yet decoded into a value."""
        return "".join(self._parts)

    def feed(self, chunk: bytes) -> list[Any]:
        """Scan *chunk* and return the values it completed.

        Raises
        ------
        DecodeError
            If the buffered text cannot be the start of a valid value,
            is not UTF-8, or grows past *max_buffer_size*.
        """
        if self._finished:
            raise DecodeError("tezos: JSON stream already finished")
        try:
            text = self._text.decode(chunk)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"tezos: invalid UTF-8 in JSON stream: {exc}") from exc

        values = self._scan(text)
        if self._size > self._max_buffer_size:
            raise DecodeError(
                f"tezos: JSON value exceeds {self._max_buffer_size} characters",
                details={"buffered": self._size},
            )
        return values

    def finish(self) -> list[Any]:
        """Signal the end of input and return the last buffered values.

        Raises
        ------
        DecodeError
            If a partial value is left in the buffer.
        """
        self._finished = True
        try:
            text = self._text.decode(b"", final=True)
        except UnicodeDecodeError as exc:
            raise DecodeError(f"tezos: truncated UTF-8 in JSON stream: {exc}") from exc

        values = self._scan(text)
        if self._state == _SCALAR:
            values.extend(self._decode(self._take("", 0, 0), final=True))
        elif self._state != _IDLE:
            raise DecodeError(
                "tezos: unexpected end of JSON stream",
                details={"pending": self._size},
            )
        return values

    # -- internals ----------------------------------------------------------

    def _scan(self, text: str) -> list[Any]:
        values: list[Any] = []
        end = len(text)
        pos = 0
        start = 0  # where the current value begins in *text*
        while pos < end:
            state = self._state
            if state == _IDLE:
                pos = _WHITESPACE.match(text, pos).end()  # type: ignore[union-attr]
                if pos == end:
                    break
                start = pos
                char = text[pos]
                if char in "{[":
                    self._state = _CONTAINER
                    self._depth = 1
                    pos += 1
                elif char == '"':
                    self._state = _STRING
                    self._depth = 0
                    pos += 1
                elif char in _SCALAR_START:
                    self._state = _SCALAR
                else:
                    # Cannot start a value: let the parser report it.
                    values.extend(self._decode(self._take(text, pos, end), final=False))
                    pos = end
            elif state == _STRING:
                if self._escape:
                    self._escape = False
                    pos += 1
                    continue
                pos = _STRING_BODY.match(text, pos).end()  # type: ignore[union-attr]
                if pos == end:
                    break
                if text[pos] == "\\":
                    self._escape = True
                    pos += 1
                    continue
                pos += 1
                if self._depth:
                    self._state = _CONTAINER
                else:
                    values.extend(self._decode(self._take(text, start, pos), final=False))
            elif state == _CONTAINER:
                pos = _CONTAINER_BODY.match(text, pos).end()  # type: ignore[union-attr]
                if pos == end:
                    break
                char = text[pos]
                pos += 1
                if char == '"':
                    self._state = _STRING
                elif char in "{[":
                    self._depth += 1
                else:
                    self._depth -= 1
                    if not self._depth:
                        values.extend(self._decode(self._take(text, start, pos), final=False))
            else:
                pos = _SCALAR_BODY.match(text, pos).end()  # type: ignore[union-attr]
                if pos == end:
                    break
                # The delimiter belongs to whatever follows.
                values.extend(self._decode(self._take(text, start, pos), final=False))

        if self._state != _IDLE and start < end:
            self._parts.append(text[start:])
            self._size += end - start
        return values

    def _take(self, text: str, start: int, stop: int) -> str:
        """Return the complete text of the current value and reset the scanner."""
        tail = text[start:stop]
        if self._parts:
            tail = "".join(self._parts) + tail
            self._parts.clear()
            self._size = 0
        self._state = _IDLE
        return tail

    def _decode(self, text: str, *, final: bool) -> list[Any]:
        # Bare scalars may sit back to back, as in ``truefalse``.
        values: list[Any] = []
        pos = 0
        try:
            while pos < len(text):
                value, pos = self._decoder.raw_decode(text, pos)
                values.append(value)
        except json.JSONDecodeError as exc:
            if final:
                raise DecodeError(
                    f"tezos: unexpected end of JSON stream: {exc.msg}",
                    details={"pending": len(text)},
                ) from exc
            raise DecodeError(
                f"tezos: invalid JSON in stream: {exc.msg}",
                details={"position": exc.pos},
            ) from exc
        return values
