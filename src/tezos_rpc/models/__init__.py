"""Typed models of node resources."""
from __future__ import annotations

from tezos_rpc.models.block import (
    TEST_CHAIN_STATUSES,
    Block,
    BlockHeaderMetadata,
    BlockHeaderMetadataLevel,
    BootstrappedBlock,
    BootstrappedStatus,
    ForkingTestChainStatus,
    GenericTestChainStatus,
    InvalidBlock,
    MaxOperationListLength,
    NotRunningTestChainStatus,
    RunningTestChainStatus,
    SyncState,
)
from tezos_rpc.models.common import HexBytes, RPCErrorRecord, TezosModel
from tezos_rpc.models.header import BlockInfo, RawBlockHeader
from tezos_rpc.models.network import (
    IDTimestamp,
    NetworkAddress,
    NetworkConnection,
    NetworkConnectionTimestamp,
    NetworkMetadata,
    NetworkPeer,
    NetworkPeerLogEntry,
    NetworkPoint,
    NetworkPointLogEntry,
    NetworkPointState,
    NetworkStats,
    NetworkVersion,
)
from tezos_rpc.models.operations import (
    BALANCE_UPDATE_KINDS,
    OPERATION_KINDS,
    ActivateAccountOperationElem,
    BallotOperationElem,
    ContractBalanceUpdate,
    DelegationOperationElem,
    DoubleBakingEvidenceOperationElem,
    DoubleEndorsementEvidenceOperationElem,
    EndorsementOperationElem,
    FreezerBalanceUpdate,
    GenericBalanceUpdate,
    GenericOperationElem,
    ManagerOperationElem,
    MempoolOperations,
    Operation,
    OperationWithError,
    OriginationOperationElem,
    ProposalOperationElem,
    RevealOperationElem,
    SeedNonceRevelationOperationElem,
    TransactionOperationElem,
)
from tezos_rpc.models.votes import Ballot, BallotListing, Ballots, PeriodKind, Proposal

__all__ = [
    # registries
    "BALANCE_UPDATE_KINDS",
    "OPERATION_KINDS",
    "TEST_CHAIN_STATUSES",
    # common
    "HexBytes",
    "RPCErrorRecord",
    "TezosModel",
    # blocks
    "Block",
    "BlockHeaderMetadata",
    "BlockHeaderMetadataLevel",
    "BlockInfo",
    "BootstrappedBlock",
    "BootstrappedStatus",
    "ForkingTestChainStatus",
    "GenericTestChainStatus",
    "InvalidBlock",
    "MaxOperationListLength",
    "NotRunningTestChainStatus",
    "RawBlockHeader",
    "RunningTestChainStatus",
    "SyncState",
    # operations
    "ActivateAccountOperationElem",
    "BallotOperationElem",
    "ContractBalanceUpdate",
    "DelegationOperationElem",
    "DoubleBakingEvidenceOperationElem",
    "DoubleEndorsementEvidenceOperationElem",
    "EndorsementOperationElem",
    "FreezerBalanceUpdate",
    "GenericBalanceUpdate",
    "GenericOperationElem",
    "ManagerOperationElem",
    "MempoolOperations",
    "Operation",
    "OperationWithError",
    "OriginationOperationElem",
    "ProposalOperationElem",
    "RevealOperationElem",
    "SeedNonceRevelationOperationElem",
    "TransactionOperationElem",
    # network
    "IDTimestamp",
    "NetworkAddress",
    "NetworkConnection",
    "NetworkConnectionTimestamp",
    "NetworkMetadata",
    "NetworkPeer",
    "NetworkPeerLogEntry",
    "NetworkPoint",
    "NetworkPointLogEntry",
    "NetworkPointState",
    "NetworkStats",
    "NetworkVersion",
    # votes
    "Ballot",
    "BallotListing",
    "Ballots",
    "PeriodKind",
    "Proposal",
]
