"""Block header shapes shared by blocks, monitors and evidence operations."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field

from tezos_rpc.models.common import HexBytes, TezosModel


class RawBlockHeader(TezosModel):
    """Shell and protocol header fields of a block."""

    level: int = 0
    proto: int = 0
    predecessor: str = ""
    timestamp: datetime | None = None
    validation_pass: int = 0
    operations_hash: str = ""
    fitness: list[HexBytes] = Field(default_factory=list)
    context: str = ""
    priority: int = 0
    proof_of_work_nonce: HexBytes = b""
    seed_nonce_hash: str = ""
    signature: str = ""


class BlockInfo(TezosModel):
    """A block announced on the ``/monitor/heads/<chain>`` stream."""

    hash: str = ""
    level: int = 0
    proto: int = 0
    predecessor: str = ""
    timestamp: datetime | None = None
    validation_pass: int = 0
    operations_hash: str = ""
    fitness: list[HexBytes] = Field(default_factory=list)
    context: str = ""
    protocol_data: str = ""
