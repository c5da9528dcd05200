"""Tests for tezos_rpc.core.config."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from tezos_rpc import __version__
from tezos_rpc.core.config import ClientConfig


class TestClientConfig:
    """Validation of client settings."""

    def test_defaults(self) -> None:
        config = ClientConfig()
        assert config.base_url == "http://localhost:8732"
        assert config.timeout == 30.0
        assert config.stream_read_timeout is None
        assert config.chain_id == "main"
        assert config.user_agent == f"tezos-rpc/{__version__}"

    def test_trailing_slash_stripped(self) -> None:
        assert ClientConfig(base_url="https://node.example:8732/").base_url == "https://node.example:8732"

    @pytest.mark.parametrize("url", ["node:8732", "ftp://node", ""])
    def test_base_url_must_be_http(self, url: str) -> None:
        with pytest.raises(ValidationError, match="http"):
            ClientConfig(base_url=url)

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_timeout_must_be_positive(self, timeout: float) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(timeout=timeout)

    def test_strict_types(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(timeout="30")  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        config = ClientConfig()
        with pytest.raises(ValidationError):
            config.chain_id = "test"  # type: ignore[misc]
