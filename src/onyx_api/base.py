"""Onyx protocol capability interfaces."""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from decimal import Decimal

from .evm.transactions import TransactionHandle
from .types import CallOptions, RawAmount, Signature


class LendingProtocolBase(ABC):
    """Money-market interface."""

    @abstractmethod
    async def supply(
        self,
        asset: str,
        amount: RawAmount,
        no_approve: bool = False,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def redeem(
        self, asset: str, amount: RawAmount, options: CallOptions | None = None
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def borrow(
        self, asset: str, amount: RawAmount, options: CallOptions | None = None
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def repay_borrow(
        self,
        asset: str,
        amount: RawAmount,
        borrower: str | None = None,
        no_approve: bool = False,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def enter_markets(
        self, markets: str | Sequence[str] = (), options: CallOptions | None = None
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def exit_market(
        self, market: str, options: CallOptions | None = None
    ) -> TransactionHandle:
        pass


class PriceFeedBase(ABC):
    """Oracle price interface."""

    @abstractmethod
    async def get_price(self, asset: str, in_asset: str = "USDC") -> Decimal:
        pass


class GovernanceBase(ABC):
    """XCN rewards, delegation and voting interface."""

    @abstractmethod
    async def claim_xcn(self, options: CallOptions | None = None) -> TransactionHandle:
        pass

    @abstractmethod
    async def delegate(
        self, delegatee: str, options: CallOptions | None = None
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def delegate_by_sig(
        self,
        delegatee: str,
        nonce: int,
        expiry: int,
        signature: Signature | Mapping[str, str],
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def create_delegate_signature(
        self, delegatee: str, expiry: int = 10_000_000_000
    ) -> Signature:
        pass

    @abstractmethod
    async def cast_vote(
        self, proposal_id: int, support: int, options: CallOptions | None = None
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def cast_vote_with_reason(
        self,
        proposal_id: int,
        support: int,
        reason: str,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def cast_vote_by_sig(
        self,
        proposal_id: int,
        support: int,
        signature: Signature | Mapping[str, str],
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        pass

    @abstractmethod
    async def create_vote_signature(self, proposal_id: int, support: int) -> Signature:
        pass
