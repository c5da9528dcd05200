"""HTTP transport to a Tezos node's RPC server.

This module provides:

* **RPCClient** -- builds requests, sends them over a pooled
  :class:`httpx.AsyncClient` and dispatches responses.  Callers pick the
  response handling explicitly:

  - :meth:`RPCClient.request` decodes the whole body as one value;
  - :meth:`RPCClient.stream` yields the values of a chunked monitor body
    one at a time;
  - :meth:`RPCClient.stream_into` pumps those values into a
    :class:`~tezos_rpc.core.interfaces.Sink` until the body ends or the
    caller cancels.

  A ``204 No Content`` response never has its body decoded and never
  reaches a destination or sink.

* **classify_error** -- maps a non-2xx response to the matching
  :class:`~tezos_rpc.core.errors.HTTPError` subclass.
"""
from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from tezos_rpc.codec.discriminator import first_error, reject_constant
from tezos_rpc.codec.values import decode_as, type_adapter
from tezos_rpc.core.config import ClientConfig
from tezos_rpc.core.errors import (
    DecodeError,
    EmptyErrorResponse,
    ErrorDecodeFailure,
    HTTPError,
    RequestFailed,
    RPCError,
    StreamCancelled,
)
from tezos_rpc.models.common import RPCErrorRecord
from tezos_rpc.wire.stream import JSONStreamDecoder

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

    from tezos_rpc.core.interfaces import Sink

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

JSON_MEDIA_TYPE: str = "application/json"


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------


def _parse_error_records(body: bytes) -> list[RPCErrorRecord]:
    """Parse an error body holding one error object or a list of them."""
    raw = json.loads(body, parse_constant=reject_constant)
    if raw is None:
        return []
    if isinstance(raw, dict):
        raw = [raw]
    return type_adapter(list[RPCErrorRecord]).validate_python(raw)


def classify_error(
    status_code: int,
    content_type: str,
    body: bytes,
    *,
    status: str = "",
) -> HTTPError:
    """Build the exception describing a non-2xx response.

    Parameters
    ----------
    status_code:
        The HTTP status code.
    content_type:
        The ``Content-Type`` header of the response (may be empty).
    body:
        The complete raw response body.
    status:
        The reason phrase, if any.

    Returns
    -------
    HTTPError
        * :class:`HTTPError` for anything but a 5xx JSON response; the
          body is kept raw and never parsed.
        * :class:`ErrorDecodeFailure` when a 5xx JSON body does not parse
          as error records.
        * :class:`EmptyErrorResponse` when it parses to zero records.
        * :class:`RPCError` carrying every record otherwise.
    """
    if status_code // 100 != 5 or JSON_MEDIA_TYPE not in content_type:
        return HTTPError(status_code, body, status=status)

    try:
        records = _parse_error_records(body)
    except (json.JSONDecodeError, DecodeError) as exc:
        return ErrorDecodeFailure(status_code, body, str(exc), status=status)
    except ValidationError as exc:
        return ErrorDecodeFailure(status_code, body, first_error(exc), status=status)

    if not records:
        return EmptyErrorResponse(status_code, body, status=status)
    return RPCError(status_code, body, records, status=status)


# ---------------------------------------------------------------------------
# RPCClient
# ---------------------------------------------------------------------------


class RPCClient:
    """Async client for a Tezos node's RPC server.

    Parameters
    ----------
    config:
        Client configuration.  Defaults to a node on ``localhost:8732``.
    transport:
        Optional httpx transport, e.g. :class:`httpx.MockTransport` in
        tests.

    The underlying connection pool is released by :meth:`aclose`, or by
    using the client as an async context manager::

        async with RPCClient(ClientConfig(base_url=url)) as client:
            stats = await client.request("GET", "/network/stat", result_type=NetworkStats)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RPCClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -- Request construction ------------------------------------------------

    def _build_headers(self, has_body: bool) -> dict[str, str]:
        """Build the headers sent with every request."""
        headers: dict[str, str] = {
            "Accept": JSON_MEDIA_TYPE,
            "User-Agent": self._config.user_agent,
        }
        if has_body:
            headers["Content-Type"] = JSON_MEDIA_TYPE
        return headers

    def build_request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        streaming: bool = False,
    ) -> httpx.Request:
        """Build a request for *path*, relative to the configured base URL.

        *body*, when not ``None``, is serialised as compact JSON.
        Streaming requests use ``stream_read_timeout`` between chunks.
        """
        content = None
        if body is not None:
            content = json.dumps(body, separators=(",", ":")).encode("utf-8")

        timeout: httpx.Timeout | float = self._config.timeout
        if streaming:
            timeout = httpx.Timeout(self._config.timeout, read=self._config.stream_read_timeout)

        return self._client.build_request(
            method,
            path,
            params=params,
            content=content,
            headers=self._build_headers(content is not None),
            timeout=timeout,
        )

    async def _send(self, request: httpx.Request, *, stream: bool) -> httpx.Response:
        logger.debug("%s %s", request.method, request.url)
        try:
            response = await self._client.send(request, stream=stream)
        except httpx.TransportError as exc:
            raise RequestFailed(
                f"tezos: {request.method} {request.url}: {exc}",
                details={"method": request.method, "url": str(request.url)},
            ) from exc
        logger.debug(
            "%s %s -> %d %s",
            request.method,
            request.url,
            response.status_code,
            response.reason_phrase,
        )
        return response

    @staticmethod
    def _error_for(response: httpx.Response) -> HTTPError:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("error body: %r", response.content)
        return classify_error(
            response.status_code,
            response.headers.get("Content-Type", ""),
            response.content,
            status=response.reason_phrase,
        )

    # -- Single value --------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        result_type: Any = None,
    ) -> Any:
        """Send a request and decode its body as a single value.

        Parameters
        ----------
        method:
            HTTP method (``GET``, ``PUT``, ...).
        path:
            Path relative to the base URL, optionally with a query string.
        params:
            Extra query parameters.
        body:
            JSON-serialisable request body, or ``None`` for no body.
        result_type:
            Type to decode the body into.  ``None`` discards the body.

        Returns
        -------
        Any
            The decoded value, or ``None`` for a ``204`` response or when
            *result_type* is ``None``.

        Raises
        ------
        RequestFailed
            If the request could not be completed.
        HTTPError
            For a non-2xx response (see :func:`classify_error`).
        DecodeError
            If the body does not decode into *result_type*.
        """
        request = self.build_request(method, path, params=params, body=body)
        response = await self._send(request, stream=False)

        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        if not response.is_success:
            raise self._error_for(response)
        if result_type is None:
            return None

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("response body: %r", response.content)
        return decode_as(response.content, result_type)

    # -- Streaming -----------------------------------------------------------

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        path: str,
        element_type: Any,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> AsyncIterator[AsyncIterator[Any]]:
        """Open a streaming request and yield an iterator over its values.

        Each JSON value of the body is decoded into *element_type* and
        produced in arrival order.  The response is closed when the
        context exits, whether or not the body was exhausted.

        A body that ends right after a complete value without the
        terminating empty chunk ends the iteration normally; a partial
        value left at that point is a :class:`DecodeError`.

        Raises
        ------
        RequestFailed
            If the request could not be completed or the connection
            failed mid-body.
        HTTPError
            For a non-2xx response, raised when entering the context.
        DecodeError
            From the iterator, for a malformed or mismatched value.
        """
        request = self.build_request(method, path, params=params, body=body, streaming=True)
        response = await self._send(request, stream=True)
        try:
            if response.status_code == httpx.codes.NO_CONTENT:
                yield _no_values()
            elif not response.is_success:
                try:
                    await response.aread()
                except httpx.TransportError as exc:
                    raise RequestFailed(
                        f"tezos: reading error body: {exc}",
                        details={"status_code": response.status_code},
                    ) from exc
                raise self._error_for(response)
            else:
                values = _iter_values(response, element_type)
                try:
                    yield values
                finally:
                    await values.aclose()
        finally:
            await response.aclose()
            logger.debug("%s %s: stream closed", method, request.url)

    async def stream_into(
        self,
        method: str,
        path: str,
        element_type: Any,
        sink: Sink[Any],
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        cancel: asyncio.Event | None = None,
    ) -> int:
        """Deliver every value of a streaming response to *sink*.

        Parameters
        ----------
        method, path, element_type, params, body:
            As for :meth:`stream`.
        sink:
            Receives the decoded values in arrival order.
        cancel:
            Optional event; setting it stops the stream.  A pending
            ``sink.put`` is abandoned and no further value is delivered.

        Returns
        -------
        int
            The number of values delivered, once the body is exhausted.

        Raises
        ------
        StreamCancelled
            If *cancel* was set before the body ended.  The response is
            closed before this is raised.
        RequestFailed, HTTPError, DecodeError
            As for :meth:`stream`.
        """
        delivered = 0

        async def pump() -> int:
            nonlocal delivered
            async with self.stream(
                method, path, element_type, params=params, body=body
            ) as values:
                async for value in values:
                    if cancel is not None and cancel.is_set():
                        raise StreamCancelled(delivered=delivered)
                    await sink.put(value)
                    delivered += 1
            return delivered

        if cancel is None:
            return await pump()
        if cancel.is_set():
            raise StreamCancelled(delivered=0)

        pump_task = asyncio.ensure_future(pump())
        cancel_task = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({pump_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            pump_task.cancel()
            cancel_task.cancel()
            await asyncio.gather(pump_task, cancel_task, return_exceptions=True)
            raise
        cancel_task.cancel()

        if pump_task.done():
            return pump_task.result()

        # Cancelled while the pump was waiting on the body or the sink.
        pump_task.cancel()
        (outcome,) = await asyncio.gather(pump_task, return_exceptions=True)
        if not isinstance(outcome, (asyncio.CancelledError, StreamCancelled)):
            logger.debug("%s %s: stream ended during cancellation: %r", method, path, outcome)
        logger.debug("%s %s: stream cancelled after %d values", method, path, delivered)
        raise StreamCancelled(delivered=delivered)


# ---------------------------------------------------------------------------
# Body iteration
# ---------------------------------------------------------------------------


async def _no_values() -> AsyncIterator[Any]:
    return
    yield


async def _iter_values(response: httpx.Response, element_type: Any) -> AsyncIterator[Any]:
    """Decode the body of *response* into a sequence of *element_type*."""
    decoder = JSONStreamDecoder()
    adapter = type_adapter(element_type)
    index = 0

    def convert(value: Any) -> Any:
        nonlocal index
        try:
            decoded = adapter.validate_python(value)
        except ValidationError as exc:
            raise DecodeError(
                f"tezos: stream element {index}: {first_error(exc)}",
                details={"index": index},
            ) from exc
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("stream element %d: %r", index, decoded)
        index += 1
        return decoded

    try:
        async for chunk in response.aiter_bytes():
            for value in decoder.feed(chunk):
                yield convert(value)
    except httpx.RemoteProtocolError as exc:
        # Body cut short; whatever was complete so far stands.
        logger.debug("stream ended without terminating chunk: %s", exc)
    except httpx.TransportError as exc:
        raise RequestFailed(
            f"tezos: reading stream: {exc}",
            details={"delivered": index},
        ) from exc

    for value in decoder.finish():
        yield convert(value)
