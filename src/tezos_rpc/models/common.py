"""Shared model base and value types.

Models are pydantic v2 ``BaseModel`` subclasses in *lax* mode: the node
encodes big integers (fees, balances, byte counters) as JSON strings,
and lax validation coerces those to ``int``.  Unknown fields are ignored
so newer node versions keep decoding.  Missing fields fall back to the
zero value of their type, mirroring how the node omits empty data.
"""
from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer


class TezosModel(BaseModel):
    """Base class of every decoded node resource."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _hex_to_bytes(value: Any) -> Any:
    if isinstance(value, str):
        # ValueError on odd length or non-hex digits
        return bytes.fromhex(value)
    return value


HexBytes = Annotated[
    bytes,
    BeforeValidator(_hex_to_bytes),
    PlainSerializer(lambda b: b.hex(), return_type=str),
]
"""Bytes encoded on the wire as a string of hexadecimal digits."""


class RPCErrorRecord(BaseModel):
    """One structured error emitted by the node.

    ``kind`` is one of ``"permanent"``, ``"temporary"``, ``"branch"`` or
    another protocol-defined string; ``id`` names the error.  Every other
    field is kept as extra data.
    """

    model_config = ConfigDict(extra="allow")

    kind: str
    id: str

    @property
    def extra(self) -> dict[str, Any]:
        return dict(self.model_extra or {})

    def __str__(self) -> str:
        return f'kind = "{self.kind}", id = "{self.id}"'
