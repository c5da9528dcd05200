"""Tests for the typed node resources.

Covers:

1. **Operations** -- array and object forms, polymorphic contents,
   balance updates, fee accessors.
2. **Blocks** -- header fields, hex bytes, test chain status variants,
   bootstrap status.
3. **Network** -- peers, points and their timestamp pairs.
4. **Votes** -- proposals, ballots and period kinds.
"""
from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from tezos_rpc.models import (
    Ballots,
    BlockHeaderMetadata,
    BootstrappedStatus,
    ContractBalanceUpdate,
    EndorsementOperationElem,
    ForkingTestChainStatus,
    FreezerBalanceUpdate,
    GenericBalanceUpdate,
    GenericTestChainStatus,
    IDTimestamp,
    MempoolOperations,
    NetworkConnectionTimestamp,
    NetworkPeer,
    NetworkPoint,
    NotRunningTestChainStatus,
    Operation,
    OriginationOperationElem,
    PeriodKind,
    Proposal,
    RawBlockHeader,
    RevealOperationElem,
    RPCErrorRecord,
    SyncState,
    TransactionOperationElem,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

OP_BODY = {
    "protocol": "PsYLVpVvgbLhAhoqAkMFUo6gudkJ9weNXhUYCiLDzcUpFpkk8Wt",
    "branch": "BMLvebSvhTyZ7GG2vykV8hpGEc8egzcwn9fc3JJKrtCk8FssT9M",
    "contents": [
        {
            "kind": "endorsement",
            "level": 208806,
            "metadata": {
                "delegate": "tz1SfH1vxAt2TTZV7mpsN79uGas5LHhV8epq",
                "slots": [18, 16],
                "balance_updates": [
                    {"kind": "contract", "contract": "tz1SfH1vxAt2TTZV7mpsN79uGas5LHhV8epq", "change": "-128000000"},
                    {"kind": "freezer", "category": "deposits", "delegate": "tz1SfH1vxAt2TTZV7mpsN79uGas5LHhV8epq", "level": 106, "change": "128000000"},
                ],
            },
        },
        {
            "kind": "transaction",
            "source": "tz1KqTpEZ7Yob7QbPE4Hy4Wo8fHG8LhKxZSx",
            "fee": "1420",
            "amount": "1000000",
            "destination": "tz1gjaF81ZRRvdzjobyfVNsAeSC6PScjfQwN",
        },
        {"kind": "failing_noop", "arbitrary": "ignored"},
    ],
    "signature": "sigtTW5Y3xQaTKo5vEiqr8zG4YnPv7GbVbUgo7XYw7UZduz9jvdxzFbKUmftKFsFGH1UEZBbxyhyH5DLUUMh5KrQ3MENzUwC",
}

OP_HASH = "opLHEC3xm8qPRP9g44oBpB45RzRVUoMX1NsX75sKKtNvA8pvSm2"


# =========================================================================
# Operations
# =========================================================================


class TestOperation:
    """Operation decoding."""

    def test_object_form(self) -> None:
        op = Operation.model_validate({**OP_BODY, "hash": OP_HASH})
        assert op.hash == OP_HASH
        assert op.kinds() == ["endorsement", "transaction", "failing_noop"]

    def test_array_form_carries_the_hash(self) -> None:
        op = Operation.model_validate([OP_HASH, OP_BODY])
        assert op.hash == OP_HASH
        assert op.branch == OP_BODY["branch"]

    def test_array_form_too_short(self) -> None:
        with pytest.raises(ValidationError, match="too short"):
            Operation.model_validate([OP_HASH])

    def test_contents_are_polymorphic(self) -> None:
        op = Operation.model_validate(OP_BODY)
        endorsement, transaction, unknown = op.contents
        assert isinstance(endorsement, EndorsementOperationElem)
        assert isinstance(transaction, TransactionOperationElem)
        assert type(unknown).__name__ == "GenericOperationElem"

    def test_bad_element_fails_the_operation(self) -> None:
        body = {**OP_BODY, "contents": [{"kind": "endorsement", "level": "x"}]}
        with pytest.raises(ValidationError, match="element 0"):
            Operation.model_validate(body)


class TestOperationElements:
    """Per-kind accessors."""

    def test_balance_updates_are_polymorphic(self) -> None:
        endorsement = Operation.model_validate(OP_BODY).contents[0]
        contract, freezer = endorsement.balance_updates()
        assert isinstance(contract, ContractBalanceUpdate)
        assert contract.change == -128_000_000
        assert isinstance(freezer, FreezerBalanceUpdate)
        assert freezer.category == "deposits"
        assert freezer.level == 106

    def test_unknown_balance_update_kind(self) -> None:
        op = Operation.model_validate(
            {
                "contents": [
                    {
                        "kind": "seed_nonce_revelation",
                        "metadata": {"balance_updates": [{"kind": "minted", "change": "5"}]},
                    }
                ]
            }
        )
        (update,) = op.contents[0].balance_updates()
        assert type(update) is GenericBalanceUpdate
        assert update.change == 5

    def test_operation_fee(self) -> None:
        endorsement, transaction, unknown = Operation.model_validate(OP_BODY).contents
        assert endorsement.operation_fee() is None
        assert transaction.operation_fee() == 1420
        assert unknown.operation_fee() is None

    def test_manager_operation_without_fee(self) -> None:
        reveal = RevealOperationElem(kind="reveal", public_key="edpk")
        assert reveal.operation_fee() == 0
        assert reveal.balance_updates() == []

    def test_origination_manager_pubkey_alias(self) -> None:
        elem = OriginationOperationElem.model_validate(
            {"kind": "origination", "managerPubkey": "tz1abc", "balance": "10"}
        )
        assert elem.manager_pubkey == "tz1abc"
        assert elem.balance == 10


class TestMempool:
    """Mempool pools."""

    def test_refused_operations_carry_errors(self) -> None:
        pools = MempoolOperations.model_validate(
            {
                "applied": [{**OP_BODY, "hash": OP_HASH}],
                "branch_delayed": [
                    [
                        "oo1Z19oCkTWibLp7mJwFKP3UFVxuf6eV1iNWwJS7gZs8uZbrduS",
                        {
                            "contents": [{"kind": "endorsement", "level": 208804}],
                            "error": [{"kind": "temporary", "id": "proto.wrong_endorsement_predecessor"}],
                        },
                    ]
                ],
            }
        )
        assert len(pools.applied) == 1
        assert pools.refused == []
        delayed = pools.branch_delayed[0]
        assert delayed.hash == "oo1Z19oCkTWibLp7mJwFKP3UFVxuf6eV1iNWwJS7gZs8uZbrduS"
        assert delayed.error[0].kind == "temporary"


# =========================================================================
# Blocks
# =========================================================================


class TestBlockHeader:
    """Header fields."""

    def test_hex_fields(self) -> None:
        header = RawBlockHeader.model_validate(
            {
                "level": 219133,
                "timestamp": "2018-11-27T17:49:57Z",
                "fitness": ["00", "00000000005a125f"],
                "proof_of_work_nonce": "7d949582fe024862",
            }
        )
        assert header.fitness == [b"\x00", b"\x00\x00\x00\x00\x00\x5a\x12\x5f"]
        assert header.proof_of_work_nonce == bytes.fromhex("7d949582fe024862")
        assert header.timestamp == datetime(2018, 11, 27, 17, 49, 57, tzinfo=UTC)

    def test_hex_serialises_back_to_hex(self) -> None:
        header = RawBlockHeader(fitness=[b"\x01"], proof_of_work_nonce=b"\xab")
        dumped = header.model_dump()
        assert dumped["fitness"] == ["01"]
        assert dumped["proof_of_work_nonce"] == "ab"

    def test_invalid_hex_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RawBlockHeader.model_validate({"fitness": ["0g"]})


class TestTestChainStatus:
    """Test chain status variants."""

    def test_not_running(self) -> None:
        meta = BlockHeaderMetadata.model_validate({"test_chain_status": {"status": "not_running"}})
        assert isinstance(meta.test_chain_status, NotRunningTestChainStatus)

    def test_forking(self) -> None:
        meta = BlockHeaderMetadata.model_validate(
            {
                "test_chain_status": {
                    "status": "forking",
                    "protocol": "PtAlphaProto",
                    "expiration": "2019-01-01T00:00:00Z",
                }
            }
        )
        assert isinstance(meta.test_chain_status, ForkingTestChainStatus)
        assert meta.test_chain_status.protocol == "PtAlphaProto"

    def test_unknown_status_falls_back(self) -> None:
        meta = BlockHeaderMetadata.model_validate({"test_chain_status": {"status": "paused"}})
        assert type(meta.test_chain_status) is GenericTestChainStatus
        assert meta.test_chain_status.status == "paused"

    def test_absent_status(self) -> None:
        assert BlockHeaderMetadata().test_chain_status is None


class TestBootstrappedStatus:
    """Chain sync status."""

    def test_healthy(self) -> None:
        status = BootstrappedStatus.model_validate({"bootstrapped": True, "sync_state": "synced"})
        assert status.healthy
        assert status.sync_state == SyncState.SYNCED

    @pytest.mark.parametrize(
        ("bootstrapped", "sync_state"),
        [(True, "stuck"), (False, "synced"), (True, "unsynced")],
    )
    def test_not_healthy(self, bootstrapped: bool, sync_state: str) -> None:
        status = BootstrappedStatus(bootstrapped=bootstrapped, sync_state=sync_state)
        assert not status.healthy


# =========================================================================
# Network
# =========================================================================


class TestNetworkPairs:
    """Array-encoded network records."""

    def test_peer_array_form(self) -> None:
        peer = NetworkPeer.model_validate(
            [
                "idrnHcGMrFxiYsmxf5Cqd6NhUTUU8X",
                {
                    "state": "running",
                    "stat": {"total_sent": "4908012", "total_recv": "14560268"},
                    "last_seen": [{"addr": "::ffff:45.79.146.133", "port": 39732}, "2018-11-13T20:56:14Z"],
                },
            ]
        )
        assert peer.peer_id == "idrnHcGMrFxiYsmxf5Cqd6NhUTUU8X"
        assert peer.stat.total_sent == 4_908_012
        assert peer.last_seen is not None
        assert peer.last_seen.port == 39732
        assert peer.last_seen.timestamp == datetime(2018, 11, 13, 20, 56, 14, tzinfo=UTC)

    def test_connection_timestamp_object_form(self) -> None:
        ts = NetworkConnectionTimestamp.model_validate({"addr": "::1", "port": 1, "timestamp": None})
        assert ts.addr == "::1"
        assert ts.timestamp is None

    def test_id_timestamp(self) -> None:
        pair = IDTimestamp.model_validate(["ids496Ey2BKHVJYZdsk72XCwbZteTj", "2018-11-14T12:03:11Z"])
        assert pair.id == "ids496Ey2BKHVJYZdsk72XCwbZteTj"
        assert pair.timestamp == datetime(2018, 11, 14, 12, 3, 11, tzinfo=UTC)

    def test_point_array_form(self) -> None:
        point = NetworkPoint.model_validate(
            ["40.119.159.28:9732", {"state": {"event_kind": "running", "p2p_peer_id": "ids496"}}]
        )
        assert point.address == "40.119.159.28:9732"
        assert point.state.p2p_peer_id == "ids496"
        assert point.last_seen is None

    def test_point_short_array(self) -> None:
        with pytest.raises(ValidationError, match="too short"):
            NetworkPoint.model_validate(["40.119.159.28:9732"])


# =========================================================================
# Votes and errors
# =========================================================================


class TestVotes:
    """Voting resources."""

    def test_proposal_pair(self) -> None:
        proposal = Proposal.model_validate(["Pt24m4xiPbLDhVgVfABUjirbmda3yohdN82Sp9FeuAXJ4eV9otd", 2832])
        assert proposal.proposal_hash.startswith("Pt24m4")
        assert proposal.supporter_count == 2832

    def test_ballots_pass_alias(self) -> None:
        ballots = Ballots.model_validate({"yay": 26776, "nay": 0, "pass": 21})
        assert (ballots.yay, ballots.nay, ballots.pass_) == (26776, 0, 21)

    def test_period_kind_predicates(self) -> None:
        kind = PeriodKind("testing_vote")
        assert kind.is_testing_vote
        assert not kind.is_proposal
        assert not kind.is_testing
        assert not kind.is_promotion_vote
        assert PeriodKind("promotion_vote").is_promotion_vote
        assert kind == "testing_vote"


class TestRPCErrorRecord:
    """Node error records."""

    def test_extra_fields_kept(self) -> None:
        record = RPCErrorRecord.model_validate(
            {"kind": "permanent", "id": "proto.context.storage_error", "missing_key": ["rolls"]}
        )
        assert record.extra == {"missing_key": ["rolls"]}
        assert str(record) == 'kind = "permanent", id = "proto.context.storage_error"'
