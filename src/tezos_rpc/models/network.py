"""Peer-to-peer network resources under ``/network``.

Peers and points are listed by the node as ``[id, {...}]`` arrays, and
several timestamps come as ``[address, time]`` or ``[peer_id, time]``
pairs.  The models below accept both the array forms and plain objects.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from tezos_rpc.codec.arrays import merge_leading_object, merge_leading_scalar, pair_fields
from tezos_rpc.models.common import TezosModel


class NetworkStats(TezosModel):
    """Global bandwidth totals (bytes) and current usage (bytes/s)."""

    total_sent: int = 0
    total_recv: int = 0
    current_inflow: int = 0
    current_outflow: int = 0


class NetworkAddress(TezosModel):
    addr: str = ""
    port: int = 0


class NetworkVersion(TezosModel):
    name: str = ""
    major: int = 0
    minor: int = 0


class NetworkMetadata(TezosModel):
    disable_mempool: bool = False
    private_node: bool = False


class NetworkConnection(TezosModel):
    """One open peer-to-peer connection."""

    incoming: bool = False
    peer_id: str = ""
    id_point: NetworkAddress = Field(default_factory=NetworkAddress)
    remote_socket_port: int = 0
    versions: list[NetworkVersion] = Field(default_factory=list)
    private: bool = False
    local_metadata: NetworkMetadata = Field(default_factory=NetworkMetadata)
    remote_metadata: NetworkMetadata = Field(default_factory=NetworkMetadata)


class NetworkConnectionTimestamp(NetworkAddress):
    """An address paired with the time of an event, ``[{addr, port}, time]``."""

    timestamp: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _unpack_pair(cls, data: Any) -> Any:
        return merge_leading_object(data, "timestamp")


class NetworkPeer(TezosModel):
    """What the node knows about a peer.

    ``peer_id`` is filled from the leading element of the ``[peer_id,
    {...}]`` form, or by the caller when the peer was fetched by ID.
    """

    peer_id: str = ""
    score: float = 0
    trusted: bool = False
    conn_metadata: NetworkMetadata | None = None
    state: str = ""
    reachable_at: NetworkAddress | None = None
    stat: NetworkStats = Field(default_factory=NetworkStats)
    last_established_connection: NetworkConnectionTimestamp | None = None
    last_seen: NetworkConnectionTimestamp | None = None
    last_failed_connection: NetworkConnectionTimestamp | None = None
    last_rejected_connection: NetworkConnectionTimestamp | None = None
    last_disconnection: NetworkConnectionTimestamp | None = None
    last_miss: NetworkConnectionTimestamp | None = None

    @model_validator(mode="before")
    @classmethod
    def _unpack_id(cls, data: Any) -> Any:
        return merge_leading_scalar(data, "peer_id")


class NetworkPeerLogEntry(NetworkAddress):
    kind: str = ""
    timestamp: datetime | None = None


class NetworkPointState(TezosModel):
    event_kind: str = ""
    p2p_peer_id: str = ""


class IDTimestamp(TezosModel):
    """A peer ID paired with the time of an event, ``[id, time]``."""

    id: str = ""
    timestamp: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _unpack_pair(cls, data: Any) -> Any:
        return pair_fields(data, "id", "timestamp")


class NetworkPoint(TezosModel):
    """What the node knows about an ``IP:port`` point.

    ``address`` is filled from the leading element of the ``[address,
    {...}]`` form, or by the caller when the point was fetched by address.
    """

    address: str = ""
    trusted: bool = False
    greylisted_until: datetime | None = None
    state: NetworkPointState = Field(default_factory=NetworkPointState)
    p2p_peer_id: str = ""
    last_failed_connection: datetime | None = None
    last_rejected_connection: IDTimestamp | None = None
    last_established_connection: IDTimestamp | None = None
    last_disconnection: IDTimestamp | None = None
    last_seen: IDTimestamp | None = None
    last_miss: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _unpack_address(cls, data: Any) -> Any:
        return merge_leading_scalar(data, "address")


class NetworkPointLogEntry(TezosModel):
    kind: NetworkPointState = Field(default_factory=NetworkPointState)
    timestamp: datetime | None = None
