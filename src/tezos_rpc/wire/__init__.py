"""Wire subpackage -- HTTP transport and JSON stream framing.

* **HTTP transport** -- request construction, response dispatch and
  error classification (:mod:`~tezos_rpc.wire.http`).
* **Stream framing** -- incremental decoding of back-to-back JSON values
  (:mod:`~tezos_rpc.wire.stream`).
"""
from __future__ import annotations

from tezos_rpc.wire.http import JSON_MEDIA_TYPE, RPCClient, classify_error
from tezos_rpc.wire.stream import DEFAULT_MAX_BUFFER_SIZE, JSONStreamDecoder

__all__ = [
    "DEFAULT_MAX_BUFFER_SIZE",
    "JSON_MEDIA_TYPE",
    "JSONStreamDecoder",
    "RPCClient",
    "classify_error",
]
