"""Shared plumbing for the orchestrated protocol actions."""

from __future__ import annotations

import logging
from typing import Any

from .abi import ABIS
from .assets import AssetResolver
from .evm.gate import ConnectionGate
from .evm.transactions import Transport
from .exceptions import InvalidArgument, error_prefix
from .networks import NetworkProfile
from .types import ABI, CallContext, CallOptions
from .utils import is_address

logger = logging.getLogger(__name__)


class ActionBase:
    """Hold the resolver, gate and transport an action group works with."""

    def __init__(
        self,
        resolver: AssetResolver,
        gate: ConnectionGate,
        transport: Transport,
    ) -> None:
        self._resolver = resolver
        self._gate = gate
        self._transport = transport

    @property
    def registry(self):
        return self._resolver.registry

    async def _profile(self) -> NetworkProfile:
        return await self._gate.wait()

    def _context(
        self,
        profile: NetworkProfile,
        abi: ABI | str | None,
        options: CallOptions,
        *,
        value: int | None = None,
    ) -> CallContext:
        """Build a fresh CallContext; an explicit ABI in ``options`` wins."""

        selected = ABIS[abi] if isinstance(abi, str) else abi
        return CallContext(
            profile=profile,
            transport=self._transport,
            abi=options.abi if options.abi is not None else selected,
            gas_limit=options.gas_limit,
            value=value if value is not None else options.value,
        )

    def _address(self, profile: NetworkProfile, name: str) -> str:
        return self.registry.lookup_address(profile, name)

    @staticmethod
    def _validate_address(value: Any, operation: str, argument: str = "_address") -> str:
        prefix = error_prefix(operation)
        if not isinstance(value, str):
            raise InvalidArgument(
                prefix + f"Argument `{argument}` must be a string.",
                field=argument,
                value=value,
            )
        if not is_address(value):
            raise InvalidArgument(
                prefix + f"Argument `{argument}` must be a valid Ethereum address.",
                field=argument,
                value=value,
            )
        return value

    @staticmethod
    def _validate_integer(value: Any, operation: str, argument: str) -> int:
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgument(
                error_prefix(operation) + f"Argument `{argument}` must be an integer.",
                field=argument,
                value=value,
            )
        return value
