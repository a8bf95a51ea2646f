"""Connection helpers for the Onyx EVM client."""

from __future__ import annotations

import logging
from typing import cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from ..constants import CHAIN_NAMES
from ..exceptions import InvalidArgument, TransactionFailed
from ..types import NetworkInfo
from .config import ClientConfig

logger = logging.getLogger(__name__)


class Web3Connections:
    """Own the AsyncWeb3 instance and the optional local signer."""

    def __init__(self, config: ClientConfig) -> None:
        self.config = config
        self._account = self._load_account(config)
        self._web3 = self._build_web3(config)
        if self._account is not None:
            self._apply_account_middleware(self._web3, self._account)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def web3(self) -> AsyncWeb3:
        return self._web3

    @property
    def account(self) -> LocalAccount | None:
        return self._account

    @property
    def endpoint(self) -> str:
        return self.config.rpc_url() or type(self.config.provider_source).__name__

    async def signer_address(self) -> str:
        """Return the address that signs writes (local key or first node account)."""

        if self._account is not None:
            return self._account.address

        try:
            accounts = await self._web3.eth.accounts
        except Exception as exc:
            raise TransactionFailed(
                "Unable to read accounts from provider",
                method="eth_accounts",
                details={"endpoint": self.endpoint, "error": str(exc)},
            ) from exc

        if not accounts:
            raise InvalidArgument(
                "Provider exposes no accounts; pass `private_key` or `mnemonic`",
                field="provider_source",
            )
        return accounts[0]

    async def resolve_network(self) -> NetworkInfo:
        try:
            chain_id = int(await self._web3.eth.chain_id)
        except Exception as exc:
            raise TransactionFailed(
                "Failed to read chain id from provider",
                method="eth_chainId",
                details={"endpoint": self.endpoint, "error": str(exc)},
            ) from exc

        name = CHAIN_NAMES.get(chain_id, f"chain-{chain_id}")
        logger.info("Provider %s reports chain id %s (%s)", self.endpoint, chain_id, name)
        return NetworkInfo(id=chain_id, name=name)

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _load_account(self, config: ClientConfig) -> LocalAccount | None:
        if config.private_key:
            try:
                return cast(LocalAccount, Account.from_key(config.private_key))
            except Exception as exc:
                raise InvalidArgument(
                    "Failed to derive signer account from provided private key",
                    field="private_key",
                    details={"error": str(exc)},
                ) from exc

        if config.mnemonic:
            Account.enable_unaudited_hdwallet_features()
            try:
                return cast(
                    LocalAccount,
                    Account.from_mnemonic(config.mnemonic, account_path=config.mnemonic_path),
                )
            except Exception as exc:
                raise InvalidArgument(
                    "Failed to derive signer account from provided mnemonic",
                    field="mnemonic",
                    details={"error": str(exc)},
                ) from exc

        return None

    def _build_web3(self, config: ClientConfig) -> AsyncWeb3:
        source = config.provider_source
        if isinstance(source, AsyncWeb3):
            return source

        url = config.rpc_url()
        if url is not None:
            provider = AsyncHTTPProvider(url, request_kwargs={"timeout": config.request_timeout})
            logger.debug("Using HTTP provider at %s", url)
            return AsyncWeb3(provider)

        if callable(getattr(source, "make_request", None)):
            logger.debug("Using injected provider %s", type(source).__name__)
            return AsyncWeb3(source)

        raise InvalidArgument(
            "Argument `provider` must be a URL, network name, async provider or AsyncWeb3",
            field="provider_source",
            value=source,
        )

    def _apply_account_middleware(self, web3: AsyncWeb3, account: LocalAccount) -> None:
        web3.middleware_onion.inject(SignAndSendRawMiddlewareBuilder.build(account), layer=0)
        web3.eth.default_account = account.address


def create_connection(config: ClientConfig) -> Web3Connections:
    return Web3Connections(config)
