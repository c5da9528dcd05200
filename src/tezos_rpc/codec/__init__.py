"""Decoding primitives for the node's heterogeneous JSON encodings.

* **Discriminated variants** -- :class:`VariantRegistry` selects a model
  by a ``kind``/``status`` field, with a generic fallback
  (:mod:`~tezos_rpc.codec.discriminator`).
* **Leading-scalar arrays** -- ``[id, {...}]`` style records
  (:mod:`~tezos_rpc.codec.arrays`).
"""
from __future__ import annotations

from tezos_rpc.codec.arrays import (
    merge_leading_object,
    merge_leading_scalar,
    pair_fields,
    unpack_array,
)
from tezos_rpc.codec.discriminator import VariantRegistry, load_json
from tezos_rpc.codec.values import decode_as, type_adapter

__all__ = [
    "VariantRegistry",
    "decode_as",
    "load_json",
    "merge_leading_object",
    "merge_leading_scalar",
    "pair_fields",
    "type_adapter",
    "unpack_array",
]
