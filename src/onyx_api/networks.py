"""Network registry: chain ids, deployed addresses and decimals per network."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .constants import CHAIN_NAMES, DECIMALS, MARKET_TOKENS, NATIVE_ASSET, UNDERLYINGS, Contract
from .exceptions import UnknownAsset, UnknownContract, UnsupportedNetwork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NetworkProfile:
    """Immutable address and precision tables for one deployment."""

    name: str
    chain_id: int
    addresses: Mapping[str, str] = field(default_factory=dict)
    decimals: Mapping[str, int] = field(default_factory=lambda: dict(DECIMALS))

    def __post_init__(self) -> None:
        object.__setattr__(self, "addresses", MappingProxyType(dict(self.addresses)))
        object.__setattr__(self, "decimals", MappingProxyType(dict(self.decimals)))

    def missing(self, required: Iterable[str] | None = None) -> list[str]:
        """Return the required symbols or contract names with no address."""

        names = list(required) if required is not None else required_entries()
        return [name for name in names if name not in self.addresses]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NetworkProfile:
        name = data.get("name")
        chain_id = data.get("chainId", data.get("chain_id"))
        if not isinstance(name, str) or chain_id is None:
            raise UnsupportedNetwork(
                "Network entry requires a name and a chain id",
                details={"entry": dict(data)},
            )
        decimals = dict(DECIMALS)
        decimals.update(data.get("decimals") or {})
        return cls(
            name=name,
            chain_id=int(chain_id),
            addresses=dict(data.get("addresses") or {}),
            decimals=decimals,
        )


def required_entries() -> list[str]:
    """Every name the orchestrator may look up on a fully deployed network."""

    underlyings = [symbol for symbol in UNDERLYINGS if symbol != NATIVE_ASSET]
    contracts = [contract.value for contract in Contract if contract is not Contract.PRICE_ORACLE]
    return [*MARKET_TOKENS, *underlyings, *contracts]


# Canonical mainnet token contracts and the oETH market. The remaining market
# and core contract addresses are supplied through NetworkRegistry.from_json or
# register(); until then the connection gate rejects this profile.
MAINNET = NetworkProfile(
    name="mainnet",
    chain_id=1,
    addresses={
        "oETH": "0x2A5eaf0CaF7a8D9104338CD06687402e181603e4",
        "XCN": "0xA2cd3D43c775978A96BdBf12d733D5A1ED94fb18",
        "USDC": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
        "DAI": "0x6B175474E89094C44Da98b954EedeAC495271d0F",
        "WBTC": "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
        "UNI": "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984",
        "LINK": "0x514910771AF9Ca656af840dff83E8264EcF986CA",
        "BUSD": "0x4Fabb145d64652a948d72533023f6E7A623C7C53",
    },
)


class NetworkRegistry:
    """Lookup of network profiles by chain id or name. Pure, no I/O."""

    def __init__(self, profiles: Iterable[NetworkProfile] = ()) -> None:
        self._by_name: dict[str, NetworkProfile] = {}
        self._by_chain_id: dict[int, NetworkProfile] = {}
        for profile in profiles:
            self.register(profile)

    def register(self, profile: NetworkProfile) -> None:
        self._by_name[profile.name.lower()] = profile
        self._by_chain_id[profile.chain_id] = profile
        missing = profile.missing()
        if missing:
            logger.debug(
                "Network %s registered without %d entries: %s",
                profile.name,
                len(missing),
                ", ".join(missing),
            )

    @classmethod
    def from_json(cls, path: str | Path, *, include_builtin: bool = True) -> NetworkRegistry:
        """Load profiles from ``{"networks": [...]}`` on top of the built-in ones."""

        payload = json.loads(Path(path).read_text())
        entries = payload.get("networks") if isinstance(payload, Mapping) else payload
        if not isinstance(entries, list):
            raise UnsupportedNetwork(
                "Network file must contain a list of networks",
                details={"path": str(path)},
            )
        registry = cls(BUILTIN_PROFILES if include_builtin else ())
        for entry in entries:
            registry.register(NetworkProfile.from_dict(entry))
        logger.info("Loaded %d network profiles from %s", len(entries), path)
        return registry

    @property
    def profiles(self) -> list[NetworkProfile]:
        return list(self._by_name.values())

    def resolve(self, chain_id_or_name: int | str) -> NetworkProfile:
        if isinstance(chain_id_or_name, int) and not isinstance(chain_id_or_name, bool):
            profile = self._by_chain_id.get(chain_id_or_name)
        elif isinstance(chain_id_or_name, str):
            key = chain_id_or_name.strip()
            profile = self._by_name.get(key.lower())
            if profile is None and key.isdigit():
                profile = self._by_chain_id.get(int(key))
        else:
            profile = None

        if profile is None:
            raise UnsupportedNetwork(
                f"Network {chain_id_or_name!r} is not supported",
                network=chain_id_or_name,
                details={"supported": sorted(self._by_name)},
            )
        return profile

    @staticmethod
    def lookup_address(profile: NetworkProfile, name: str) -> str:
        address = profile.addresses.get(name)
        if not address:
            raise UnknownContract(
                f"No address for `{name}` on network {profile.name}",
                name=name,
                network=profile.name,
            )
        return address

    @staticmethod
    def lookup_decimals(profile: NetworkProfile, symbol: str) -> int:
        decimals = profile.decimals.get(symbol)
        if decimals is None:
            raise UnknownAsset(
                f"No decimals for `{symbol}` on network {profile.name}",
                symbol=symbol,
                network=profile.name,
            )
        return decimals


BUILTIN_PROFILES: tuple[NetworkProfile, ...] = (MAINNET,)

DEFAULT_REGISTRY = NetworkRegistry(BUILTIN_PROFILES)
