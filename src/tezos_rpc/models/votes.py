"""Voting period resources under ``/chains/<chain>/blocks/<block>/votes``."""
from __future__ import annotations

from typing import Any

from pydantic import Field, model_validator

from tezos_rpc.codec.arrays import pair_fields
from tezos_rpc.models.common import TezosModel


class Ballot(TezosModel):
    pkh: str = ""
    ballot: str = ""


class BallotListing(TezosModel):
    """A delegate and its voting weight in rolls."""

    pkh: str = ""
    rolls: int = 0


class Ballots(TezosModel):
    """Ballot totals of the current voting period."""

    yay: int = 0
    nay: int = 0
    # ``pass`` is a keyword
    pass_: int = Field(default=0, alias="pass")


class Proposal(TezosModel):
    """A proposal and the number of its supporters, ``[hash, count]``."""

    proposal_hash: str = ""
    supporter_count: int = 0

    @model_validator(mode="before")
    @classmethod
    def _unpack_pair(cls, data: Any) -> Any:
        return pair_fields(data, "proposal_hash", "supporter_count")


class PeriodKind(str):
    """Kind of the current voting period.

    A plain string so that kinds introduced by later protocols still
    decode; the predicates cover the historical four.
    """

    __slots__ = ()

    @property
    def is_proposal(self) -> bool:
        return self == "proposal"

    @property
    def is_testing_vote(self) -> bool:
        return self == "testing_vote"

    @property
    def is_testing(self) -> bool:
        return self == "testing"

    @property
    def is_promotion_vote(self) -> bool:
        return self == "promotion_vote"
