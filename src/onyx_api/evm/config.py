"""Configuration containers for the Onyx EVM client."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..constants import DEFAULT_API_URL, DEFAULT_RPC_URLS
from ..exceptions import InvalidArgument

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MNEMONIC_PATH = "m/44'/60'/0'/0/0"
DEFAULT_PROVIDER = "mainnet"


@dataclass(frozen=True)
class ClientConfig:
    """Aggregated configuration used to construct the Onyx client.

    ``provider_source`` may be an HTTP(S) RPC URL, a network name with a known
    public RPC endpoint, an async provider object or an existing ``AsyncWeb3``.
    """

    provider_source: Any = DEFAULT_PROVIDER
    private_key: str | None = None
    mnemonic: str | None = None
    mnemonic_path: str = DEFAULT_MNEMONIC_PATH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    api_url: str = DEFAULT_API_URL
    networks_file: str | None = None

    def __post_init__(self) -> None:
        if self.private_key and self.mnemonic:
            raise InvalidArgument(
                "Options `privateKey` and `mnemonic` are mutually exclusive",
                field="private_key",
            )
        if self.request_timeout <= 0 or self.receipt_timeout <= 0:
            raise InvalidArgument(
                "Timeouts must be positive",
                field="request_timeout",
                value=(self.request_timeout, self.receipt_timeout),
            )

    def rpc_url(self) -> str | None:
        """Return the HTTP endpoint for string sources, ``None`` for provider objects."""

        source = self.provider_source
        if not isinstance(source, str):
            return None

        if source.startswith(("http://", "https://")):
            return source

        url = DEFAULT_RPC_URLS.get(source.lower())
        if url is None:
            raise InvalidArgument(
                f"Unknown provider source {source!r}; pass an http(s) RPC URL",
                field="provider_source",
                value=source,
                details={"known_networks": sorted(DEFAULT_RPC_URLS)},
            )
        return url

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, *, prefix: str = "ONYX_"
    ) -> ClientConfig:
        """Build a config from ``ONYX_*`` environment variables."""

        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(prefix + name)
            return value or None

        kwargs: dict[str, Any] = {
            "provider_source": get("PROVIDER") or DEFAULT_PROVIDER,
            "private_key": get("PRIVATE_KEY"),
            "mnemonic": get("MNEMONIC"),
            "networks_file": get("NETWORKS_FILE"),
        }
        if get("API_URL"):
            kwargs["api_url"] = get("API_URL")
        if get("REQUEST_TIMEOUT"):
            kwargs["request_timeout"] = float(get("REQUEST_TIMEOUT") or DEFAULT_REQUEST_TIMEOUT)
        if get("RECEIPT_TIMEOUT"):
            kwargs["receipt_timeout"] = float(get("RECEIPT_TIMEOUT") or DEFAULT_RECEIPT_TIMEOUT)
        return cls(**kwargs)
