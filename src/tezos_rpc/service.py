"""Typed endpoints of a Tezos node.

:class:`Service` wraps an :class:`~tezos_rpc.wire.http.RPCClient` and
exposes one coroutine per RPC resource, returning decoded models.
Monitor endpoints deliver their values into a
:class:`~tezos_rpc.core.interfaces.Sink` until the node closes the
stream or the caller sets the ``cancel`` event.

Usage
-----
::

    from tezos_rpc import ClientConfig, RPCClient, Service

    async with RPCClient(ClientConfig(base_url="http://node:8732")) as client:
        service = Service(client)
        stats = await service.get_network_stats()

        heads: asyncio.Queue[BlockInfo] = asyncio.Queue(maxsize=16)
        stop = asyncio.Event()
        monitor = asyncio.create_task(service.monitor_heads("main", heads, cancel=stop))
"""
from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from tezos_rpc.core.errors import StreamCancelled
from tezos_rpc.models.block import Block, BootstrappedBlock, BootstrappedStatus, InvalidBlock
from tezos_rpc.models.header import BlockInfo
from tezos_rpc.models.network import (
    NetworkConnection,
    NetworkPeer,
    NetworkPeerLogEntry,
    NetworkPoint,
    NetworkPointLogEntry,
    NetworkStats,
)
from tezos_rpc.models.operations import MempoolOperations, Operation
from tezos_rpc.models.votes import Ballot, BallotListing, Ballots, PeriodKind, Proposal

if TYPE_CHECKING:
    from tezos_rpc.core.interfaces import Sink
    from tezos_rpc.wire.http import RPCClient

logger = logging.getLogger(__name__)


def _segment(value: str) -> str:
    """Percent-quote one path segment, keeping ``:`` of ``host:port``."""
    return quote(value, safe=":")


class _FirstValue:
    """Sink keeping only the first value it receives, then cancelling."""

    def __init__(self, cancel: asyncio.Event) -> None:
        self.value: Any = None
        self._cancel = cancel

    async def put(self, item: Any) -> None:
        if not self._cancel.is_set():
            self.value = item
            self._cancel.set()


class Service:
    """Typed access to the RPC resources of one node.

    Parameters
    ----------
    client:
        The transport to issue requests with.  The service does not own
        it; closing the client is the caller's job.
    """

    def __init__(self, client: RPCClient) -> None:
        self._client = client

    @property
    def client(self) -> RPCClient:
        return self._client

    def _chain(self, chain_id: str | None) -> str:
        return _segment(chain_id or self._client.config.chain_id)

    def _block_path(self, chain_id: str | None, block_id: str) -> str:
        return f"/chains/{self._chain(chain_id)}/blocks/{_segment(block_id)}"

    # -- Network: global -----------------------------------------------------

    async def get_network_stats(self) -> NetworkStats:
        """Return global network bandwidth totals and usage."""
        return await self._client.request("GET", "/network/stat", result_type=NetworkStats)

    async def get_network_connections(self) -> list[NetworkConnection]:
        return await self._client.request(
            "GET", "/network/connections", result_type=list[NetworkConnection]
        )

    # -- Network: peers ------------------------------------------------------

    async def get_network_peers(self, filter: str = "") -> list[NetworkPeer]:  # noqa: A002
        """Return every peer the node ever met.

        Parameters
        ----------
        filter:
            Optional state filter (``"running"``, ``"accepted"``,
            ``"disconnected"``).
        """
        params = {"filter": filter} if filter else None
        return await self._client.request(
            "GET", "/network/peers", params=params, result_type=list[NetworkPeer]
        )

    async def get_network_peer(self, peer_id: str) -> NetworkPeer:
        peer: NetworkPeer = await self._client.request(
            "GET", f"/network/peers/{_segment(peer_id)}", result_type=NetworkPeer
        )
        return peer.model_copy(update={"peer_id": peer_id})

    async def ban_network_peer(self, peer_id: str) -> None:
        """Blacklist the given peer."""
        await self._client.request("GET", f"/network/peers/{_segment(peer_id)}/ban")

    async def trust_network_peer(self, peer_id: str) -> None:
        """Trust the given peer permanently; its host IP may still be banned."""
        await self._client.request("GET", f"/network/peers/{_segment(peer_id)}/trust")

    async def get_network_peer_banned(self, peer_id: str) -> bool:
        """Return ``True`` if the peer is blacklisted or greylisted."""
        return await self._client.request(
            "GET", f"/network/peers/{_segment(peer_id)}/banned", result_type=bool
        )

    async def get_network_peer_log(self, peer_id: str) -> list[NetworkPeerLogEntry]:
        return await self._client.request(
            "GET",
            f"/network/peers/{_segment(peer_id)}/log",
            result_type=list[NetworkPeerLogEntry],
        )

    async def monitor_network_peer_log(
        self,
        peer_id: str,
        sink: Sink[list[NetworkPeerLogEntry]],
        *,
        cancel: asyncio.Event | None = None,
    ) -> int:
        """Stream batches of log events of the given peer into *sink*."""
        return await self._client.stream_into(
            "GET",
            f"/network/peers/{_segment(peer_id)}/log?monitor",
            list[NetworkPeerLogEntry],
            sink,
            cancel=cancel,
        )

    # -- Network: points -----------------------------------------------------

    async def get_network_points(self, filter: str = "") -> list[NetworkPoint]:  # noqa: A002
        """Return the known ``IP:port`` points used for P2P connections."""
        params = {"filter": filter} if filter else None
        return await self._client.request(
            "GET", "/network/points", params=params, result_type=list[NetworkPoint]
        )

    async def get_network_point(self, address: str) -> NetworkPoint:
        point: NetworkPoint = await self._client.request(
            "GET", f"/network/points/{_segment(address)}", result_type=NetworkPoint
        )
        return point.model_copy(update={"address": address})

    async def connect_to_network_point(
        self, address: str, timeout: float | None = None
    ) -> None:
        """Ask the node to connect to *address*.

        Parameters
        ----------
        address:
            The ``IP:port`` point.
        timeout:
            Seconds the node waits for the connection, if given.
        """
        params = {"timeout": f"{timeout:f}"} if timeout else None
        await self._client.request(
            "PUT", f"/network/points/{_segment(address)}", params=params, body={}
        )

    async def ban_network_point(self, address: str) -> None:
        await self._client.request("GET", f"/network/points/{_segment(address)}/ban")

    async def trust_network_point(self, address: str) -> None:
        await self._client.request("GET", f"/network/points/{_segment(address)}/trust")

    async def get_network_point_banned(self, address: str) -> bool:
        return await self._client.request(
            "GET", f"/network/points/{_segment(address)}/banned", result_type=bool
        )

    async def get_network_point_log(self, address: str) -> list[NetworkPointLogEntry]:
        return await self._client.request(
            "GET",
            f"/network/points/{_segment(address)}/log",
            result_type=list[NetworkPointLogEntry],
        )

    async def monitor_network_point_log(
        self,
        address: str,
        sink: Sink[list[NetworkPointLogEntry]],
        *,
        cancel: asyncio.Event | None = None,
    ) -> int:
        return await self._client.stream_into(
            "GET",
            f"/network/points/{_segment(address)}/log?monitor",
            list[NetworkPointLogEntry],
            sink,
            cancel=cancel,
        )

    # -- Balances ------------------------------------------------------------

    async def get_delegate_balance(self, chain_id: str, block_id: str, pkh: str) -> int:
        """Return the full balance of a delegate, in mutez."""
        path = f"{self._block_path(chain_id, block_id)}/context/delegates/{_segment(pkh)}/balance"
        return await self._client.request("GET", path, result_type=int)

    async def get_contract_balance(self, chain_id: str, block_id: str, contract_id: str) -> int:
        """Return the balance of a contract, in mutez."""
        path = (
            f"{self._block_path(chain_id, block_id)}/context/contracts/"
            f"{_segment(contract_id)}/balance"
        )
        return await self._client.request("GET", path, result_type=int)

    # -- Chain state and monitors --------------------------------------------

    async def monitor_bootstrapped(
        self,
        sink: Sink[BootstrappedBlock],
        *,
        cancel: asyncio.Event | None = None,
    ) -> int:
        """Stream the blocks the node considers bootstrapped into *sink*."""
        return await self._client.stream_into(
            "GET", "/monitor/bootstrapped", BootstrappedBlock, sink, cancel=cancel
        )

    async def wait_bootstrapped(self, timeout: float) -> BootstrappedBlock | None:
        """Return the first message of the bootstrapped stream.

        Returns ``None`` if no message arrived within *timeout* seconds,
        or if the node closed the stream without sending one.
        """
        cancel = asyncio.Event()
        first = _FirstValue(cancel)
        try:
            async with asyncio.timeout(timeout):
                await self.monitor_bootstrapped(first, cancel=cancel)
        except TimeoutError:
            logger.debug("no bootstrapped message within %.1fs", timeout)
            return None
        except StreamCancelled:
            logger.debug("bootstrapped stream closed after first message")
        return first.value

    async def get_bootstrapped_status(self, chain_id: str | None = None) -> BootstrappedStatus:
        return await self._client.request(
            "GET",
            f"/chains/{self._chain(chain_id)}/is_bootstrapped",
            result_type=BootstrappedStatus,
        )

    async def monitor_heads(
        self,
        chain_id: str | None,
        sink: Sink[BlockInfo],
        *,
        cancel: asyncio.Event | None = None,
    ) -> int:
        """Stream the new heads of *chain_id* into *sink*."""
        return await self._client.stream_into(
            "GET", f"/monitor/heads/{self._chain(chain_id)}", BlockInfo, sink, cancel=cancel
        )

    async def monitor_mempool_operations(
        self,
        chain_id: str | None,
        pool: str,
        sink: Sink[list[Operation]],
        *,
        cancel: asyncio.Event | None = None,
    ) -> int:
        """Stream batches of mempool operations into *sink*.

        Parameters
        ----------
        pool:
            ``"applied"``, ``"refused"``, ``"branch_refused"`` or
            ``"branch_delayed"`` to restrict the stream to that pool;
            empty for the node default.
        """
        params = {pool: "true"} if pool else None
        return await self._client.stream_into(
            "GET",
            f"/chains/{self._chain(chain_id)}/mempool/monitor_operations",
            list[Operation],
            sink,
            params=params,
            cancel=cancel,
        )

    async def get_mempool_pending_operations(
        self, chain_id: str | None = None
    ) -> MempoolOperations:
        return await self._client.request(
            "GET",
            f"/chains/{self._chain(chain_id)}/mempool/pending_operations",
            result_type=MempoolOperations,
        )

    async def get_block(self, chain_id: str | None, block_id: str) -> Block:
        return await self._client.request(
            "GET", self._block_path(chain_id, block_id), result_type=Block
        )

    async def get_invalid_blocks(self, chain_id: str | None = None) -> list[InvalidBlock]:
        """Return blocks that were rejected by the node, with the reasons."""
        return await self._client.request(
            "GET",
            f"/chains/{self._chain(chain_id)}/invalid_blocks",
            result_type=list[InvalidBlock],
        )

    # -- Voting --------------------------------------------------------------

    async def get_ballot_list(self, chain_id: str | None, block_id: str) -> list[Ballot]:
        return await self._client.request(
            "GET",
            f"{self._block_path(chain_id, block_id)}/votes/ballot_list",
            result_type=list[Ballot],
        )

    async def get_ballots(self, chain_id: str | None, block_id: str) -> Ballots:
        return await self._client.request(
            "GET", f"{self._block_path(chain_id, block_id)}/votes/ballots", result_type=Ballots
        )

    async def get_ballot_listings(
        self, chain_id: str | None, block_id: str
    ) -> list[BallotListing]:
        return await self._client.request(
            "GET",
            f"{self._block_path(chain_id, block_id)}/votes/listings",
            result_type=list[BallotListing],
        )

    async def get_proposals(self, chain_id: str | None, block_id: str) -> list[Proposal]:
        return await self._client.request(
            "GET",
            f"{self._block_path(chain_id, block_id)}/votes/proposals",
            result_type=list[Proposal],
        )

    async def get_current_proposal(self, chain_id: str | None, block_id: str) -> str | None:
        """Return the proposal under evaluation, ``None`` outside a vote."""
        return await self._client.request(
            "GET",
            f"{self._block_path(chain_id, block_id)}/votes/current_proposal",
            result_type=str | None,
        )

    async def get_current_quorum(self, chain_id: str | None, block_id: str) -> int:
        return await self._client.request(
            "GET",
            f"{self._block_path(chain_id, block_id)}/votes/current_quorum",
            result_type=int,
        )

    async def get_current_period_kind(self, chain_id: str | None, block_id: str) -> PeriodKind:
        kind = await self._client.request(
            "GET",
            f"{self._block_path(chain_id, block_id)}/votes/current_period_kind",
            result_type=str,
        )
        return PeriodKind(kind)
