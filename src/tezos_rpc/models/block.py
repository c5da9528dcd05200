"""Blocks, block metadata and chain status.

The test chain status embedded in block metadata is an open sum type
keyed by its ``status`` field (``not_running``, ``forking``,
``running``), decoded through :data:`TEST_CHAIN_STATUSES`.
"""
from __future__ import annotations

import enum
from datetime import datetime

from pydantic import Field

from tezos_rpc.codec.discriminator import VariantRegistry
from tezos_rpc.models.common import RPCErrorRecord, TezosModel
from tezos_rpc.models.header import RawBlockHeader
from tezos_rpc.models.operations import BalanceUpdates, Operation

# ---------------------------------------------------------------------------
# Test chain status
# ---------------------------------------------------------------------------


class GenericTestChainStatus(TezosModel):
    """Fields common to every test chain status variant."""

    status: str


TEST_CHAIN_STATUSES: VariantRegistry[GenericTestChainStatus] = VariantRegistry(
    "status", GenericTestChainStatus, name="test chain status"
)

TestChainStatus = TEST_CHAIN_STATUSES.annotated()


@TEST_CHAIN_STATUSES.register("not_running")
class NotRunningTestChainStatus(GenericTestChainStatus):
    pass


@TEST_CHAIN_STATUSES.register("forking")
class ForkingTestChainStatus(GenericTestChainStatus):
    protocol: str = ""
    expiration: str = ""


@TEST_CHAIN_STATUSES.register("running")
class RunningTestChainStatus(GenericTestChainStatus):
    chain_id: str = ""
    genesis: str = ""
    protocol: str = ""
    expiration: str = ""


# ---------------------------------------------------------------------------
# Block
# ---------------------------------------------------------------------------


class MaxOperationListLength(TezosModel):
    max_size: int = 0
    max_op: int = 0


class BlockHeaderMetadataLevel(TezosModel):
    level: int = 0
    level_position: int = 0
    cycle: int = 0
    cycle_position: int = 0
    voting_period: int = 0
    voting_period_position: int = 0
    expected_commitment: bool = False


class BlockHeaderMetadata(TezosModel):
    protocol: str = ""
    next_protocol: str = ""
    test_chain_status: TestChainStatus | None = None
    max_operations_ttl: int = 0
    max_operation_data_length: int = 0
    max_block_header_length: int = 0
    max_operation_list_length: list[MaxOperationListLength] = Field(default_factory=list)
    baker: str = ""
    level: BlockHeaderMetadataLevel = Field(default_factory=BlockHeaderMetadataLevel)
    voting_period_kind: str = ""
    nonce_hash: str | None = None
    consumed_gas: int | None = None
    deactivated: list[str] = Field(default_factory=list)
    balance_updates: BalanceUpdates = Field(default_factory=list)


class Block(TezosModel):
    """A full block as returned by ``/chains/<chain>/blocks/<block>``."""

    protocol: str = ""
    chain_id: str = ""
    hash: str = ""
    header: RawBlockHeader = Field(default_factory=RawBlockHeader)
    metadata: BlockHeaderMetadata = Field(default_factory=BlockHeaderMetadata)
    operations: list[list[Operation]] = Field(default_factory=list)


class InvalidBlock(TezosModel):
    """A block the node rejected, with the reasons."""

    block: str = ""
    level: int = 0
    errors: list[RPCErrorRecord] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Bootstrap status
# ---------------------------------------------------------------------------


class BootstrappedBlock(TezosModel):
    """A message of the ``/monitor/bootstrapped`` stream."""

    block: str = ""
    timestamp: datetime | None = None


class SyncState(enum.StrEnum):
    """Chain synchronisation state reported by ``is_bootstrapped``."""

    SYNCED = "synced"
    UNSYNCED = "unsynced"
    STUCK = "stuck"


class BootstrappedStatus(TezosModel):
    """Content of ``/chains/<chain>/is_bootstrapped``."""

    bootstrapped: bool = False
    sync_state: str = SyncState.UNSYNCED.value

    @property
    def healthy(self) -> bool:
        """``True`` when bootstrapped and synced."""
        return self.bootstrapped and self.sync_state == SyncState.SYNCED

