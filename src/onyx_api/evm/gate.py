"""One-time network resolution barrier shared by every network-bound operation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..exceptions import UnsupportedNetwork
from ..networks import NetworkProfile, NetworkRegistry
from ..types import NetworkInfo

logger = logging.getLogger(__name__)


class ConnectionGate:
    """PENDING until the provider's network is resolved, then RESOLVED for good.

    Concurrent waiters share a single resolution task. A profile missing any
    market or core contract address fails resolution. A failure is stored and
    re-raised to every current and future waiter; there are no retries.
    """

    def __init__(
        self,
        resolve_network: Callable[[], Awaitable[NetworkInfo]],
        registry: NetworkRegistry,
    ) -> None:
        self._resolve_network = resolve_network
        self._registry = registry
        self._pending: asyncio.Task[NetworkProfile] | None = None
        self._profile: NetworkProfile | None = None
        self._error: BaseException | None = None

    @property
    def resolved(self) -> bool:
        return self._profile is not None

    @property
    def profile(self) -> NetworkProfile | None:
        return self._profile

    def start(self) -> None:
        """Begin resolution eagerly when an event loop is already running."""

        if self._pending is not None or self._profile is not None or self._error is not None:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return
        self._schedule()

    async def wait(self) -> NetworkProfile:
        if self._profile is not None:
            return self._profile
        if self._error is not None:
            raise self._error

        pending = self._pending if self._pending is not None else self._schedule()
        return await asyncio.shield(pending)

    def _schedule(self) -> asyncio.Future[NetworkProfile]:
        pending = asyncio.ensure_future(self._resolve())
        pending.add_done_callback(self._settled)
        self._pending = pending
        return pending

    def _settled(self, pending: asyncio.Future[NetworkProfile]) -> None:
        if pending.cancelled():
            # Nothing was stored; the next waiter starts a fresh resolution
            if self._pending is pending:
                self._pending = None
            logger.debug("Network resolution cancelled")
            return
        # Failures are already stored in self._error
        pending.exception()

    async def _resolve(self) -> NetworkProfile:
        try:
            network = await self._resolve_network()
            profile = self._resolve_profile(network)
        except Exception as exc:
            self._error = exc
            self._pending = None
            logger.error("Network resolution failed: %s", exc)
            raise

        self._profile = profile
        self._pending = None
        logger.info("Resolved network %s (chain id %s)", profile.name, profile.chain_id)
        return profile

    def _resolve_profile(self, network: NetworkInfo) -> NetworkProfile:
        try:
            profile = self._registry.resolve(network.id)
        except UnsupportedNetwork:
            logger.debug("No profile for chain id %s, trying name %s", network.id, network.name)
            profile = self._registry.resolve(network.name)

        missing = profile.missing()
        if missing:
            raise UnsupportedNetwork(
                f"Network {profile.name} has no deployment entries for: {', '.join(missing)}",
                network=profile.name,
                details={"missing": missing},
            )
        return profile
