"""Tezos node RPC client.

Typed, asyncio-based access to the JSON RPC interface of a Tezos node:
single-shot resources, long-lived monitor streams and structured node
errors.

Layers
------
1. Codec -- discriminated variants and leading-scalar arrays
   (:mod:`tezos_rpc.codec`)
2. Models -- typed node resources (:mod:`tezos_rpc.models`)
3. Wire -- HTTP transport and JSON stream framing (:mod:`tezos_rpc.wire`)
4. Service -- typed endpoints (:mod:`tezos_rpc.service`)
"""
from __future__ import annotations

from tezos_rpc._version import __version__

# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------
from tezos_rpc.codec import VariantRegistry, decode_as, unpack_array

# ---------------------------------------------------------------------------
# Core -- config, errors, interfaces
# ---------------------------------------------------------------------------
from tezos_rpc.core.config import ClientConfig
from tezos_rpc.core.errors import (
    DecodeError,
    EmptyErrorResponse,
    ErrorDecodeFailure,
    HTTPError,
    PlainError,
    RequestFailed,
    RPCError,
    StreamCancelled,
    TezosError,
)
from tezos_rpc.core.interfaces import CollectingSink, Sink

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
from tezos_rpc.models import (
    BALANCE_UPDATE_KINDS,
    OPERATION_KINDS,
    TEST_CHAIN_STATUSES,
    Block,
    BlockInfo,
    BootstrappedBlock,
    GenericBalanceUpdate,
    GenericOperationElem,
    GenericTestChainStatus,
    Operation,
    RPCErrorRecord,
)

# ---------------------------------------------------------------------------
# Service and transport
# ---------------------------------------------------------------------------
from tezos_rpc.service import Service
from tezos_rpc.wire import JSONStreamDecoder, RPCClient, classify_error

__all__ = [
    "__version__",
    # Codec
    "VariantRegistry",
    "decode_as",
    "unpack_array",
    # Core
    "ClientConfig",
    "CollectingSink",
    "DecodeError",
    "EmptyErrorResponse",
    "ErrorDecodeFailure",
    "HTTPError",
    "PlainError",
    "RPCError",
    "RequestFailed",
    "Sink",
    "StreamCancelled",
    "TezosError",
    # Models
    "BALANCE_UPDATE_KINDS",
    "Block",
    "BlockInfo",
    "BootstrappedBlock",
    "GenericBalanceUpdate",
    "GenericOperationElem",
    "GenericTestChainStatus",
    "OPERATION_KINDS",
    "Operation",
    "RPCErrorRecord",
    "TEST_CHAIN_STATUSES",
    # Service and transport
    "JSONStreamDecoder",
    "RPCClient",
    "Service",
    "classify_error",
]
