"""Decoding of a JSON value into an arbitrary target type.

Targets are anything pydantic can validate: models, ``list[Model]``,
``int``, ``bool``, ``str | None``, the annotated types produced by a
:class:`~tezos_rpc.codec.discriminator.VariantRegistry`, and so on.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError

from tezos_rpc.codec.discriminator import first_error, load_json
from tezos_rpc.core.errors import DecodeError


@lru_cache(maxsize=None)
def type_adapter(target: Any) -> TypeAdapter[Any]:
    """Return a cached :class:`~pydantic.TypeAdapter` for *target*."""
    return TypeAdapter(target)


def decode_as(data: Any, target: Any) -> Any:
    """Decode *data* into *target*.

    Parameters
    ----------
    data:
        Raw JSON (``bytes``/``str``) or an already parsed value.
    target:
        The type to decode into.

    Raises
    ------
    DecodeError
        If *data* is not valid JSON or does not match *target*.
    """
    value = load_json(data)
    try:
        return type_adapter(target).validate_python(value)
    except ValidationError as exc:
        raise DecodeError(f"tezos: {first_error(exc)}") from exc
