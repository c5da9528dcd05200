"""Operations, operation contents and balance updates.

Both operation contents and balance updates are open sum types keyed by
their ``kind`` field and decoded through a :class:`VariantRegistry`:

* :data:`OPERATION_KINDS` -- ``endorsement``, ``transaction``,
  ``ballot``, ``proposals``, ``seed_nonce_revelation``,
  ``double_endorsement_evidence``, ``double_baking_evidence``,
  ``activate_account``, ``reveal``, ``origination``, ``delegation``;
  anything else decodes to :class:`GenericOperationElem`.
* :data:`BALANCE_UPDATE_KINDS` -- ``contract`` and ``freezer``; anything
  else decodes to :class:`GenericBalanceUpdate`.

An :class:`Operation` is accepted either as an object or in the
``[hash, {...}]`` array form used by the mempool.
"""
from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from tezos_rpc.codec.arrays import merge_leading_scalar
from tezos_rpc.codec.discriminator import VariantRegistry
from tezos_rpc.models.common import RPCErrorRecord, TezosModel
from tezos_rpc.models.header import RawBlockHeader

# ---------------------------------------------------------------------------
# Balance updates
# ---------------------------------------------------------------------------


class GenericBalanceUpdate(TezosModel):
    """Fields common to every balance update variant."""

    kind: str
    change: int = 0


BALANCE_UPDATE_KINDS: VariantRegistry[GenericBalanceUpdate] = VariantRegistry(
    "kind", GenericBalanceUpdate, name="balance update"
)

BalanceUpdates = BALANCE_UPDATE_KINDS.annotated_list()


@BALANCE_UPDATE_KINDS.register("contract")
class ContractBalanceUpdate(GenericBalanceUpdate):
    """Balance update applied to a contract."""

    contract: str = ""


@BALANCE_UPDATE_KINDS.register("freezer")
class FreezerBalanceUpdate(GenericBalanceUpdate):
    """Balance update applied to a delegate's frozen deposits, fees or rewards."""

    category: str = ""
    delegate: str = ""
    level: int = 0


# ---------------------------------------------------------------------------
# Metadata and results
# ---------------------------------------------------------------------------


class BalanceUpdatesOperationMetadata(TezosModel):
    balance_updates: BalanceUpdates = Field(default_factory=list)


class EndorsementOperationMetadata(BalanceUpdatesOperationMetadata):
    delegate: str = ""
    slots: list[int] = Field(default_factory=list)


class TransactionOperationResult(TezosModel):
    status: str = ""
    storage: Any = None
    balance_updates: BalanceUpdates = Field(default_factory=list)
    originated_contracts: list[str] = Field(default_factory=list)
    consumed_gas: int | None = None
    storage_size: int | None = None
    paid_storage_size_diff: int | None = None
    errors: list[RPCErrorRecord] = Field(default_factory=list)


class TransactionOperationMetadata(BalanceUpdatesOperationMetadata):
    operation_result: TransactionOperationResult = Field(
        default_factory=TransactionOperationResult
    )


class OriginationOperationResult(TezosModel):
    status: str = ""
    balance_updates: BalanceUpdates = Field(default_factory=list)
    originated_contracts: list[str] = Field(default_factory=list)
    consumed_gas: int | None = None
    storage_size: int | None = None
    paid_storage_size_diff: int | None = None
    errors: list[RPCErrorRecord] = Field(default_factory=list)


class OriginationOperationMetadata(BalanceUpdatesOperationMetadata):
    operation_result: OriginationOperationResult = Field(
        default_factory=OriginationOperationResult
    )


class DelegationOperationResult(TezosModel):
    status: str = ""
    errors: list[RPCErrorRecord] = Field(default_factory=list)


class DelegationOperationMetadata(BalanceUpdatesOperationMetadata):
    operation_result: DelegationOperationResult = Field(
        default_factory=DelegationOperationResult
    )


# Reveal results carry the same fields as delegation results.
RevealOperationMetadata = DelegationOperationMetadata


class InlinedEndorsementContents(TezosModel):
    kind: str = ""
    level: int = 0


class InlinedEndorsement(TezosModel):
    branch: str = ""
    operations: InlinedEndorsementContents = Field(
        default_factory=InlinedEndorsementContents
    )
    signature: str = ""


class ScriptedContracts(TezosModel):
    code: Any = None
    storage: Any = None


# ---------------------------------------------------------------------------
# Operation contents
# ---------------------------------------------------------------------------


class GenericOperationElem(TezosModel):
    """Fields common to every operation content variant."""

    kind: str

    def balance_updates(self) -> list[GenericBalanceUpdate]:
        """Return the balance updates in this element's metadata, if any."""
        metadata = getattr(self, "metadata", None)
        return list(getattr(metadata, "balance_updates", None) or [])

    def operation_fee(self) -> int | None:
        """Return the fee paid by this element, ``None`` for fee-less kinds."""
        return None


OPERATION_KINDS: VariantRegistry[GenericOperationElem] = VariantRegistry(
    "kind", GenericOperationElem, name="operation"
)

OperationElements = OPERATION_KINDS.annotated_list()


class ManagerOperationElem(GenericOperationElem):
    """Base of manager operations, which pay fees and consume gas."""

    source: str = ""
    fee: int | None = None
    counter: int | None = None
    gas_limit: int | None = None
    storage_limit: int | None = None

    def operation_fee(self) -> int | None:
        return self.fee if self.fee is not None else 0


@OPERATION_KINDS.register("endorsement")
class EndorsementOperationElem(GenericOperationElem):
    level: int = 0
    metadata: EndorsementOperationMetadata = Field(
        default_factory=EndorsementOperationMetadata
    )


@OPERATION_KINDS.register("transaction")
class TransactionOperationElem(ManagerOperationElem):
    amount: int | None = None
    destination: str = ""
    parameters: dict[str, Any] | None = None
    metadata: TransactionOperationMetadata = Field(
        default_factory=TransactionOperationMetadata
    )


@OPERATION_KINDS.register("ballot")
class BallotOperationElem(GenericOperationElem):
    source: str = ""
    period: int = 0
    proposal: str = ""
    ballot: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


@OPERATION_KINDS.register("proposals")
class ProposalOperationElem(GenericOperationElem):
    source: str = ""
    period: int = 0
    proposals: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


@OPERATION_KINDS.register("seed_nonce_revelation")
class SeedNonceRevelationOperationElem(GenericOperationElem):
    level: int = 0
    nonce: str = ""
    metadata: BalanceUpdatesOperationMetadata = Field(
        default_factory=BalanceUpdatesOperationMetadata
    )


@OPERATION_KINDS.register("double_endorsement_evidence")
class DoubleEndorsementEvidenceOperationElem(GenericOperationElem):
    op1: InlinedEndorsement = Field(default_factory=InlinedEndorsement)
    op2: InlinedEndorsement = Field(default_factory=InlinedEndorsement)
    metadata: BalanceUpdatesOperationMetadata = Field(
        default_factory=BalanceUpdatesOperationMetadata
    )


@OPERATION_KINDS.register("double_baking_evidence")
class DoubleBakingEvidenceOperationElem(GenericOperationElem):
    bh1: RawBlockHeader = Field(default_factory=RawBlockHeader)
    bh2: RawBlockHeader = Field(default_factory=RawBlockHeader)
    metadata: BalanceUpdatesOperationMetadata = Field(
        default_factory=BalanceUpdatesOperationMetadata
    )


@OPERATION_KINDS.register("activate_account")
class ActivateAccountOperationElem(GenericOperationElem):
    pkh: str = ""
    secret: str = ""
    metadata: BalanceUpdatesOperationMetadata = Field(
        default_factory=BalanceUpdatesOperationMetadata
    )


@OPERATION_KINDS.register("reveal")
class RevealOperationElem(ManagerOperationElem):
    public_key: str = ""
    metadata: RevealOperationMetadata = Field(default_factory=RevealOperationMetadata)


@OPERATION_KINDS.register("origination")
class OriginationOperationElem(ManagerOperationElem):
    manager_pubkey: str = Field(default="", alias="managerPubkey")
    balance: int | None = None
    spendable: bool | None = None
    delegatable: bool | None = None
    delegate: str = ""
    script: ScriptedContracts | None = None
    metadata: OriginationOperationMetadata = Field(
        default_factory=OriginationOperationMetadata
    )


@OPERATION_KINDS.register("delegation")
class DelegationOperationElem(ManagerOperationElem):
    manager_pubkey: str = Field(default="", alias="managerPubkey")
    balance: int | None = None
    spendable: bool | None = None
    delegatable: bool | None = None
    delegate: str = ""
    script: ScriptedContracts | None = None
    metadata: DelegationOperationMetadata = Field(
        default_factory=DelegationOperationMetadata
    )


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


class Operation(TezosModel):
    """An operation included in a block or waiting in the mempool."""

    protocol: str = ""
    chain_id: str = ""
    hash: str = ""
    branch: str = ""
    contents: OperationElements = Field(default_factory=list)
    signature: str = ""

    @model_validator(mode="before")
    @classmethod
    def _unpack_hash(cls, data: Any) -> Any:
        return merge_leading_scalar(data, "hash")

    def kinds(self) -> list[str]:
        """Return the ``kind`` of every content element, in order."""
        return [elem.kind for elem in self.contents]


class OperationWithError(Operation):
    """An operation the mempool refused or delayed, with the reasons."""

    error: list[RPCErrorRecord] = Field(default_factory=list)


class MempoolOperations(TezosModel):
    """Content of ``/chains/<chain>/mempool/pending_operations``."""

    applied: list[Operation] = Field(default_factory=list)
    refused: list[OperationWithError] = Field(default_factory=list)
    branch_refused: list[OperationWithError] = Field(default_factory=list)
    branch_delayed: list[OperationWithError] = Field(default_factory=list)
    unprocessed: list[Operation] = Field(default_factory=list)
