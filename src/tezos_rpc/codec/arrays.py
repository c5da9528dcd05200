"""Decoding of heterogeneous "array with leading scalar" encodings.

Several node resources are encoded as a positional JSON array instead of
an object::

    [
        "idrnHcGMrFxiYsmxf5Cqd6NhUTUU8X",   # object ID or hash
        {"score": 0, "trusted": false}      # object with the ID omitted
    ]

:func:`unpack_array` decodes such an array positionally into a list of
target types.  :func:`merge_leading_scalar` folds the common
``[scalar, {...}]`` case into a single mapping so that a pydantic model
can accept both the array form and the plain object form.
"""
from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from tezos_rpc.codec.discriminator import load_json
from tezos_rpc.codec.values import type_adapter
from tezos_rpc.core.errors import DecodeError


def unpack_array(data: Any, *targets: Any) -> tuple[Any, ...]:
    """Decode the leading elements of a JSON array into *targets*.

    Parameters
    ----------
    data:
        Raw JSON (``bytes``/``str``) or an already parsed list.
    *targets:
        One type per leading position (``str``, ``int``, a pydantic
        model, ``dict``, ...).  Elements past ``len(targets)`` are ignored.

    Returns
    -------
    tuple[Any, ...]
        The decoded values, one per target.

    Raises
    ------
    DecodeError
        If *data* is not an array, is shorter than ``len(targets)``, or any
        position fails to decode into its target.
    """
    raw = load_json(data)
    if not isinstance(raw, (list, tuple)):
        raise DecodeError(
            f"tezos: expected JSON array, got {type(raw).__name__}"
        )
    if len(raw) < len(targets):
        raise DecodeError(
            f"tezos: JSON array is too short, expected {len(targets)}, got {len(raw)}",
            details={"expected": len(targets), "actual": len(raw)},
        )

    values: list[Any] = []
    for index, target in enumerate(targets):
        try:
            values.append(type_adapter(target).validate_python(raw[index]))
        except ValidationError as exc:
            raise DecodeError(
                f"tezos: array element {index}: {exc.errors(include_url=False)[0]['msg']}",
                details={"index": index},
            ) from exc
    return tuple(values)


def merge_leading_scalar(data: Any, field: str, scalar_type: Any = str) -> Any:
    """Fold ``[scalar, {...}]`` into ``{..., field: scalar}``.

    Anything that is not a JSON array (an object, a model instance) is
    returned unchanged, so a model's ``mode="before"`` validator can call
    this unconditionally.
    """
    if not isinstance(data, (list, tuple)):
        return data
    scalar, body = unpack_array(data, scalar_type, dict)
    return {**body, field: scalar}


def merge_leading_object(data: Any, field: str, object_type: Any = dict) -> Any:
    """Fold ``[{...}, scalar]`` into ``{...object fields, field: scalar}``.

    Used for timestamped network addresses, where the leading element is
    the address object and the trailing one the timestamp.
    """
    if not isinstance(data, (list, tuple)):
        return data
    body, scalar = unpack_array(data, object_type, Any)
    return {**body, field: scalar}


def pair_fields(data: Any, first: str, second: str) -> Any:
    """Map a two element array ``[a, b]`` onto ``{first: a, second: b}``.

    Element types are left for the model to validate.
    """
    if not isinstance(data, (list, tuple)):
        return data
    a, b = unpack_array(data, Any, Any)
    return {first: a, second: b}
