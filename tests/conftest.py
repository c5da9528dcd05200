"""Shared fixtures: JSON fixture files and a mock node behind httpx.MockTransport."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Iterable
from pathlib import Path

import httpx
import pytest

from tezos_rpc.core.config import ClientConfig
from tezos_rpc.wire.http import RPCClient

FIXTURES = Path(__file__).parent / "fixtures"


class ChunkedBody(httpx.AsyncByteStream):
    """Response body delivered in the given chunks.

    Parameters
    ----------
    chunks:
        Body chunks, in order.
    truncated:
        End the body the way a server that omits the terminating empty
        chunk does, with :class:`httpx.RemoteProtocolError`.
    hang:
        After the last chunk, wait forever instead of ending the body.
    error:
        Raised after the last chunk, e.g. a :class:`httpx.ReadError`.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        *,
        truncated: bool = False,
        hang: bool = False,
        error: Exception | None = None,
    ) -> None:
        self._chunks = list(chunks)
        self._truncated = truncated
        self._hang = hang
        self._error = error
        self.sent = 0
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self._chunks:
            self.sent += 1
            yield chunk
        if self._error is not None:
            raise self._error
        if self._truncated:
            raise httpx.RemoteProtocolError(
                "peer closed connection without sending complete message body"
            )
        if self._hang:
            await asyncio.Event().wait()

    async def aclose(self) -> None:
        self.closed = True


def split_lines(data: bytes) -> list[bytes]:
    """Split a ``.chunked`` fixture into one chunk per line."""
    return [line + b"\n" for line in data.splitlines() if line.strip()]


@pytest.fixture
def load_fixture() -> Callable[[str], bytes]:
    """Return a reader for files under ``tests/fixtures``."""

    def read(name: str) -> bytes:
        return (FIXTURES / name).read_bytes()

    return read


@pytest.fixture
def chunked_body() -> type[ChunkedBody]:
    return ChunkedBody


@pytest.fixture
def chunks_of() -> Callable[[bytes], list[bytes]]:
    return split_lines


@pytest.fixture
async def make_client() -> AsyncIterator[Callable[..., RPCClient]]:
    """Factory building clients bound to a request handler.

    The handler receives each :class:`httpx.Request` and returns the
    :class:`httpx.Response` the node would send.
    """
    clients: list[RPCClient] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response], **config: object) -> RPCClient:
        client = RPCClient(
            ClientConfig(base_url="http://node.test:8732", **config),  # type: ignore[arg-type]
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.aclose()
