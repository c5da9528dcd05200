"""Tezos RPC client configuration.

Defines the validated configuration model shared, read-only, by the
client and every request it issues.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tezos_rpc._version import __version__

DEFAULT_USER_AGENT: str = f"tezos-rpc/{__version__}"


class ClientConfig(BaseModel):
    """Configuration for an RPC client talking to a single Tezos node.

    All fields carry defaults suitable for a node running locally with
    its RPC server on the standard port.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    base_url: str = Field(
        default="http://localhost:8732",
        description="Base URL of the node's RPC server.",
    )
    timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout in seconds for single-shot requests.",
    )
    stream_read_timeout: float | None = Field(
        default=None,
        gt=0.0,
        description=(
            "Maximum wait in seconds between two chunks of a monitor "
            "stream.  ``None`` waits forever."
        ),
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Value of the ``User-Agent`` header sent with every request.",
    )
    chain_id: str = Field(
        default="main",
        description="Chain used by service endpoints when none is given.",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = f"base_url must be an http(s) URL, got {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")
