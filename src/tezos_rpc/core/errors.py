"""Tezos RPC error hierarchy.

Every terminal failure of a request against the node is represented by
one concrete exception class.  Cancellation of a streaming request is
reported separately (:class:`StreamCancelled`), which sits
*outside* this hierarchy.

Hierarchy
---------
::

    TezosError
    +-- DecodeError              (malformed or schema-mismatched JSON)
    +-- RequestFailed            (connection-level failure)
    +-- HTTPError                (non-2xx response, raw body)
        +-- RPCError             (5xx + JSON with one or more error records)
        +-- PlainError           (5xx + JSON without usable records)
            +-- EmptyErrorResponse
            +-- ErrorDecodeFailure

    StreamCancelled              (consumer withdrew interest; not a fault)

Usage
-----
Catch by category::

    try:
        stats = await service.get_network_stats()
    except RPCError as exc:
        if exc.has_kind("temporary"):
            ...
    except HTTPError:
        # handles RPCError, EmptyErrorResponse, ErrorDecodeFailure, ...
        ...
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tezos_rpc.models.common import RPCErrorRecord

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class TezosError(Exception):
    """Base exception for all Tezos RPC errors.

    Attributes
    ----------
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    """

    message: str = "tezos: unknown error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error for structured logs."""
        payload: dict[str, Any] = {
            "type": type(self).__name__,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        return {"error": payload}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r})"


# ===================================================================
# Decoding
# ===================================================================


class DecodeError(TezosError, ValueError):
    """A JSON value could not be decoded into the requested shape.

    Also a :class:`ValueError`, so raising it from inside a pydantic
    validator surfaces as a regular validation failure with its location.
    """

    message = "tezos: error decoding JSON value"


# ===================================================================
# Transport
# ===================================================================


class RequestFailed(TezosError):
    """The HTTP request could not be completed (connect, read, write)."""

    message = "tezos: request failed"


class HTTPError(TezosError):
    """Non-2xx response with a body of unknown format.

    Parameters
    ----------
    status_code:
        The HTTP status code.
    body:
        The raw response body.
    status:
        The reason phrase, if any.
    """

    def __init__(
        self,
        status_code: int,
        body: bytes = b"",
        *,
        status: str = "",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.status = status
        self.body = body
        super().__init__(
            message or f"tezos: HTTP status {status_code}",
            details=details,
        )

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["error"]["status_code"] = self.status_code
        return payload

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(status_code={self.status_code!r}, "
            f"message={self.message!r})"
        )


class RPCError(HTTPError):
    """5xx response carrying one or more structured node error records."""

    def __init__(
        self,
        status_code: int,
        body: bytes,
        errors: Sequence[RPCErrorRecord],
        *,
        status: str = "",
    ) -> None:
        self.errors: list[RPCErrorRecord] = list(errors)
        message = "; ".join(
            f'tezos: kind = "{e.kind}", id = "{e.id}"' for e in self.errors
        )
        super().__init__(status_code, body, status=status, message=message)

    @property
    def kinds(self) -> list[str]:
        """Return the ``kind`` of every error record, in order."""
        return [e.kind for e in self.errors]

    def has_kind(self, kind: str) -> bool:
        """Return ``True`` if any error record has the given ``kind``."""
        return any(e.kind == kind for e in self.errors)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["error"]["errors"] = [e.model_dump() for e in self.errors]
        return payload


class PlainError(HTTPError):
    """5xx JSON error response that did not yield any usable error record."""


class EmptyErrorResponse(PlainError):
    """The error response parsed as JSON but held zero error records."""

    def __init__(self, status_code: int, body: bytes, *, status: str = "") -> None:
        super().__init__(
            status_code,
            body,
            status=status,
            message="tezos: empty error response",
        )


class ErrorDecodeFailure(PlainError):
    """The error response could not be parsed as error records."""

    def __init__(
        self,
        status_code: int,
        body: bytes,
        reason: str,
        *,
        status: str = "",
    ) -> None:
        self.reason = reason
        super().__init__(
            status_code,
            body,
            status=status,
            message=f"tezos: error decoding RPC error: {reason}",
        )


# ===================================================================
# Cancellation
# ===================================================================


class StreamCancelled(Exception):
    """A streaming request was stopped because the consumer cancelled it.

    Not a :class:`TezosError`: cancellation is a normal outcome and
    callers that log faults by catching :class:`TezosError` must not see it.
    """

    def __init__(self, message: str = "tezos: stream cancelled", *, delivered: int = 0) -> None:
        self.delivered = delivered
        super().__init__(message)
