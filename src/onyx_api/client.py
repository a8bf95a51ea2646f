"""Onyx protocol client exposing every market, price and governance operation."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from .actions import ActionBase
from .api import OnyxApi
from .assets import AssetResolver
from .base import GovernanceBase, LendingProtocolBase, PriceFeedBase
from .evm.config import (
    DEFAULT_MNEMONIC_PATH,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_PROVIDER,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_REQUEST_TIMEOUT,
    ClientConfig,
)
from .evm.connections import create_connection
from .evm.gate import ConnectionGate
from .evm.transactions import TransactionHandle, Transport, Web3Transport
from .governance import DEFAULT_DELEGATION_EXPIRY, GovernanceActions
from .markets import MarketActions
from .networks import DEFAULT_REGISTRY, NetworkProfile, NetworkRegistry
from .price_feed import PriceFeedActions
from .types import CallOptions, RawAmount, Signature

logger = logging.getLogger(__name__)


class Onyx(LendingProtocolBase, PriceFeedBase, GovernanceBase):
    """Single entry point for the Onyx lending protocol.

    The client resolves the provider's network once, through a shared
    ConnectionGate, and every network-bound operation waits on it before
    touching addresses. Validation errors are raised before any RPC call.

    Example:
        onyx = Onyx("mainnet", private_key=key)
        handle = await onyx.supply("USDC", "2.5")
        receipt = await handle.wait(1)
    """

    def __init__(
        self,
        provider_source: Any = DEFAULT_PROVIDER,
        *,
        private_key: str | None = None,
        mnemonic: str | None = None,
        mnemonic_path: str = DEFAULT_MNEMONIC_PATH,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        api_url: str | None = None,
        networks_file: str | None = None,
        registry: NetworkRegistry | None = None,
        transport: Transport | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        if config is None:
            config_kwargs: dict[str, Any] = {
                "provider_source": provider_source,
                "private_key": private_key,
                "mnemonic": mnemonic,
                "mnemonic_path": mnemonic_path,
                "request_timeout": request_timeout,
                "receipt_timeout": receipt_timeout,
                "poll_interval": poll_interval,
                "networks_file": networks_file,
            }
            if api_url:
                config_kwargs["api_url"] = api_url
            config = ClientConfig(**config_kwargs)
        self._config = config

        if registry is None:
            registry = (
                NetworkRegistry.from_json(config.networks_file)
                if config.networks_file
                else DEFAULT_REGISTRY
            )
        self._registry = registry

        if transport is None:
            transport = Web3Transport(
                create_connection(config),
                receipt_timeout=config.receipt_timeout,
                poll_interval=config.poll_interval,
            )
        self._transport = transport

        self._gate = ConnectionGate(transport.resolve_network, registry)
        self._gate.start()

        resolver = AssetResolver(registry)
        self._markets = MarketActions(resolver, self._gate, transport)
        self._prices = PriceFeedActions(resolver, self._gate, transport)
        self._governance = GovernanceActions(resolver, self._gate, transport)
        self._api: OnyxApi | None = None

    @classmethod
    def from_env(cls, **overrides: Any) -> Onyx:
        """Build a client from ``ONYX_*`` environment variables."""
        return cls(config=ClientConfig.from_env(), **overrides)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def registry(self) -> NetworkRegistry:
        return self._registry

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def network(self) -> NetworkProfile | None:
        """The resolved network profile, ``None`` until the gate has opened."""
        return self._gate.profile

    @property
    def api(self) -> OnyxApi:
        if self._api is None:
            self._api = OnyxApi(
                self._config.api_url, request_timeout=self._config.request_timeout
            )
        return self._api

    async def wait_for_network(self) -> NetworkProfile:
        return await self._gate.wait()

    async def get_balance(self, address: str) -> int:
        """Return the native balance of ``address`` in wei."""

        address = ActionBase._validate_address(address, "getBalance")
        return await self._transport.get_balance(address)

    # ------------------------------------------------------------------
    # Markets
    # ------------------------------------------------------------------
    async def supply(
        self,
        asset: str,
        amount: RawAmount,
        no_approve: bool = False,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        return await self._markets.supply(asset, amount, no_approve, options)

    async def redeem(
        self, asset: str, amount: RawAmount, options: CallOptions | None = None
    ) -> TransactionHandle:
        return await self._markets.redeem(asset, amount, options)

    async def borrow(
        self, asset: str, amount: RawAmount, options: CallOptions | None = None
    ) -> TransactionHandle:
        return await self._markets.borrow(asset, amount, options)

    async def repay_borrow(
        self,
        asset: str,
        amount: RawAmount,
        borrower: str | None = None,
        no_approve: bool = False,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        return await self._markets.repay_borrow(asset, amount, borrower, no_approve, options)

    async def enter_markets(
        self, markets: str | Sequence[str] = (), options: CallOptions | None = None
    ) -> TransactionHandle:
        return await self._markets.enter_markets(markets, options)

    async def exit_market(
        self, market: str, options: CallOptions | None = None
    ) -> TransactionHandle:
        return await self._markets.exit_market(market, options)

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------
    async def get_price(self, asset: str, in_asset: str = "USDC") -> Decimal:
        return await self._prices.get_price(asset, in_asset)

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------
    async def claim_xcn(self, options: CallOptions | None = None) -> TransactionHandle:
        return await self._governance.claim_xcn(options)

    async def get_xcn_balance(self, address: str) -> int:
        return await self._governance.get_xcn_balance(address)

    async def get_xcn_accrued(self, address: str) -> int:
        return await self._governance.get_xcn_accrued(address)

    async def get_current_votes(self, address: str) -> int:
        return await self._governance.get_current_votes(address)

    async def delegate(
        self, delegatee: str, options: CallOptions | None = None
    ) -> TransactionHandle:
        return await self._governance.delegate(delegatee, options)

    async def delegate_by_sig(
        self,
        delegatee: str,
        nonce: int,
        expiry: int,
        signature: Signature | Mapping[str, str],
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        return await self._governance.delegate_by_sig(delegatee, nonce, expiry, signature, options)

    async def create_delegate_signature(
        self, delegatee: str, expiry: int = DEFAULT_DELEGATION_EXPIRY
    ) -> Signature:
        return await self._governance.create_delegate_signature(delegatee, expiry)

    async def cast_vote(
        self, proposal_id: int, support: int, options: CallOptions | None = None
    ) -> TransactionHandle:
        return await self._governance.cast_vote(proposal_id, support, options)

    async def cast_vote_with_reason(
        self,
        proposal_id: int,
        support: int,
        reason: str,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        return await self._governance.cast_vote_with_reason(proposal_id, support, reason, options)

    async def cast_vote_by_sig(
        self,
        proposal_id: int,
        support: int,
        signature: Signature | Mapping[str, str],
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        return await self._governance.cast_vote_by_sig(proposal_id, support, signature, options)

    async def create_vote_signature(self, proposal_id: int, support: int) -> Signature:
        return await self._governance.create_vote_signature(proposal_id, support)
