"""Discriminator-based decoding of polymorphic JSON objects.

The node encodes several families of objects as an open sum type: every
member is a JSON object carrying a string *discriminator* field
(``kind`` for operations and balance updates, ``status`` for the test
chain) whose value selects the shape of the remaining fields.

:class:`VariantRegistry` maps discriminator values to pydantic models.
Decoding one object is a two step process:

1. **Probe** -- decode only the generic (common) fields into the
   registry's fallback model, ignoring everything else.
2. **Dispatch** -- if the probed discriminator is registered, decode the
   original object again into the registered model, which subclasses the
   fallback and therefore carries the same common fields.  Otherwise the
   probe itself is the result: unknown kinds are forward compatible and
   never an error.

Registries are used directly (``OPERATION_KINDS.decode(raw)``) and as
pydantic field validators (``registry.annotated_list()``), so models holding
polymorphic lists decode them through the same dispatch.
"""
from __future__ import annotations

import json
from typing import TYPE_CHECKING, Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, ValidationError

from tezos_rpc.core.errors import DecodeError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

M = TypeVar("M", bound=BaseModel)


def reject_constant(name: str) -> Any:
    """``parse_constant`` hook refusing ``NaN``, ``Infinity`` and ``-Infinity``.

    The stdlib parser accepts them, but they are not JSON.
    """
    raise DecodeError(f"tezos: invalid JSON constant {name}", details={"constant": name})


def load_json(data: Any) -> Any:
    """Parse *data* if it is raw JSON text, otherwise return it unchanged.

    Raises
    ------
    DecodeError
        If *data* is ``bytes``/``str`` and not valid JSON, including the
        non-standard ``NaN`` and ``Infinity`` constants.
    """
    if isinstance(data, (bytes, bytearray, str)):
        try:
            return json.loads(data, parse_constant=reject_constant)
        except json.JSONDecodeError as exc:
            raise DecodeError(
                f"tezos: invalid JSON: {exc}",
                details={"position": exc.pos},
            ) from exc
    return data


class VariantRegistry(Generic[M]):
    """Registry mapping discriminator values to concrete models.

    Parameters
    ----------
    field:
        Name of the discriminator field (``"kind"``, ``"status"``).
    fallback:
        Model holding the fields common to every variant.  Every
        registered model must subclass it.
    name:
        Human-readable family name used in error messages.
    """

    def __init__(self, field: str, fallback: type[M], *, name: str | None = None) -> None:
        if field not in fallback.model_fields:
            msg = f"{fallback.__name__} has no discriminator field {field!r}"
            raise TypeError(msg)
        self._field = field
        self._fallback = fallback
        self._name = name or fallback.__name__
        self._variants: dict[str, type[M]] = {}

    # -- Registration --------------------------------------------------------

    def register(self, tag: str) -> Callable[[type[M]], type[M]]:
        """Class decorator registering a model for discriminator value *tag*."""

        def decorator(model: type[M]) -> type[M]:
            self.add(tag, model)
            return model

        return decorator

    def add(self, tag: str, model: type[M]) -> None:
        """Register *model* for discriminator value *tag*.

        Raises
        ------
        TypeError
            If *model* does not subclass the fallback model.
        ValueError
            If *tag* is already registered to a different model.
        """
        if not issubclass(model, self._fallback):
            msg = f"{model.__name__} must subclass {self._fallback.__name__}"
            raise TypeError(msg)
        existing = self._variants.get(tag)
        if existing is not None and existing is not model:
            msg = f"{self._name} tag {tag!r} already registered to {existing.__name__}"
            raise ValueError(msg)
        self._variants[tag] = model

    # -- Lookup --------------------------------------------------------------

    @property
    def field(self) -> str:
        return self._field

    @property
    def fallback(self) -> type[M]:
        return self._fallback

    def get(self, tag: str) -> type[M] | None:
        return self._variants.get(tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._variants

    def __iter__(self) -> Iterator[str]:
        return iter(self._variants)

    def __len__(self) -> int:
        return len(self._variants)

    # -- Decoding ------------------------------------------------------------

    def decode(self, data: Any) -> M:
        """Decode one discriminated object.

        Parameters
        ----------
        data:
            Raw JSON (``bytes``/``str``), an already parsed mapping, or an
            instance of the fallback model (returned unchanged).

        Returns
        -------
        M
            An instance of the registered model for the discriminator, or
            of the fallback model when the discriminator is unknown.

        Raises
        ------
        DecodeError
            If the input is not a JSON object, lacks the common fields, or
            does not match the schema of its registered model.
        """
        if isinstance(data, self._fallback):
            return data

        obj = load_json(data)
        if not isinstance(obj, dict):
            raise DecodeError(
                f"tezos: {self._name} must be a JSON object, got {type(obj).__name__}"
            )

        try:
            probe = self._fallback.model_validate(obj)
        except ValidationError as exc:
            raise DecodeError(
                f"tezos: invalid {self._name}: {first_error(exc)}",
            ) from exc

        tag = getattr(probe, self._field)
        model = self._variants.get(tag)
        if model is None:
            return probe

        try:
            return model.model_validate(obj)
        except ValidationError as exc:
            raise DecodeError(
                f"tezos: invalid {self._name} {self._field}={tag!r}: {first_error(exc)}",
                details={self._field: tag},
            ) from exc

    def decode_list(self, data: Any) -> list[M]:
        """Decode a homogeneous JSON array of discriminated objects.

        Each element is decoded independently with :meth:`decode`.  The
        first failing element aborts the whole list; its index is named
        in the error.
        """
        items = load_json(data)
        if items is None:
            return []
        if not isinstance(items, list):
            raise DecodeError(
                f"tezos: {self._name} list must be a JSON array, got {type(items).__name__}"
            )

        decoded: list[M] = []
        for index, item in enumerate(items):
            try:
                decoded.append(self.decode(item))
            except DecodeError as exc:
                raise DecodeError(
                    f"tezos: element {index}: {exc.message}",
                    details={**exc.details, "index": index},
                ) from exc
        return decoded

    # -- Pydantic integration ------------------------------------------------

    def annotated(self) -> Any:
        """Return an annotated type decoding a single discriminated field."""
        return Annotated[self._fallback, BeforeValidator(self.decode)]

    def annotated_list(self) -> Any:
        """Return an annotated type decoding a list of discriminated objects."""
        return Annotated[list[self._fallback], BeforeValidator(self.decode_list)]  # type: ignore[name-defined]

    def __repr__(self) -> str:
        return (
            f"VariantRegistry(field={self._field!r}, fallback={self._fallback.__name__}, "
            f"variants={sorted(self._variants)!r})"
        )


def first_error(exc: ValidationError) -> str:
    """Render the first pydantic error as ``loc: msg``."""
    errors = exc.errors(include_url=False)
    if not errors:
        return str(exc)
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    return f"{loc}: {first['msg']}" if loc else first["msg"]
