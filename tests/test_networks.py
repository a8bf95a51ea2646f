from __future__ import annotations

import json
from pathlib import Path

import pytest

from onyx_api.exceptions import UnknownAsset, UnknownContract, UnsupportedNetwork
from onyx_api.networks import DEFAULT_REGISTRY, MAINNET, NetworkProfile, NetworkRegistry


def test_resolve_by_chain_id_and_name(registry: NetworkRegistry, profile: NetworkProfile) -> None:
    assert registry.resolve(1) is profile
    assert registry.resolve("mainnet") is profile
    assert registry.resolve("MAINNET") is profile
    assert registry.resolve("1") is profile


def test_resolve_unknown_network(registry: NetworkRegistry) -> None:
    with pytest.raises(UnsupportedNetwork) as excinfo:
        registry.resolve(31337)
    assert excinfo.value.network == 31337

    with pytest.raises(UnsupportedNetwork):
        registry.resolve(True)  # type: ignore[arg-type]


def test_lookup_address_fails_fast(profile: NetworkProfile) -> None:
    sparse = NetworkProfile(name="sparse", chain_id=99, addresses={"oETH": profile.addresses["oETH"]})

    assert NetworkRegistry.lookup_address(sparse, "oETH") == profile.addresses["oETH"]
    with pytest.raises(UnknownContract) as excinfo:
        NetworkRegistry.lookup_address(sparse, "Comptroller")
    assert excinfo.value.name == "Comptroller"
    assert excinfo.value.network == "sparse"


def test_lookup_decimals(profile: NetworkProfile) -> None:
    assert NetworkRegistry.lookup_decimals(profile, "USDC") == 6
    assert NetworkRegistry.lookup_decimals(profile, "oUSDC") == 8
    assert NetworkRegistry.lookup_decimals(profile, "WBTC") == 8
    with pytest.raises(UnknownAsset):
        NetworkRegistry.lookup_decimals(profile, "DOGE")


def test_profile_is_immutable(profile: NetworkProfile) -> None:
    with pytest.raises(TypeError):
        profile.addresses["oETH"] = "0x0"  # type: ignore[index]


def test_missing_reports_absent_entries(profile: NetworkProfile) -> None:
    assert profile.missing() == []
    assert "Comptroller" in MAINNET.missing()
    assert "oETH" not in MAINNET.missing()


def test_default_registry_has_mainnet() -> None:
    assert DEFAULT_REGISTRY.resolve(1) is MAINNET
    assert MAINNET.addresses["XCN"] == "0xA2cd3D43c775978A96BdBf12d733D5A1ED94fb18"


def test_from_json_loads_profiles(tmp_path: Path) -> None:
    path = tmp_path / "networks.json"
    path.write_text(
        json.dumps(
            {
                "networks": [
                    {
                        "name": "sepolia",
                        "chainId": 11155111,
                        "addresses": {"Comptroller": "0x" + "12" * 20},
                        "decimals": {"USDC": 18},
                    }
                ]
            }
        )
    )

    registry = NetworkRegistry.from_json(path)
    sepolia = registry.resolve(11155111)

    assert sepolia.name == "sepolia"
    assert sepolia.addresses["Comptroller"] == "0x" + "12" * 20
    assert sepolia.decimals["USDC"] == 18
    assert sepolia.decimals["DAI"] == 18
    assert registry.resolve("mainnet") is MAINNET


def test_from_json_without_builtin(tmp_path: Path) -> None:
    path = tmp_path / "networks.json"
    path.write_text(json.dumps({"networks": [{"name": "local", "chainId": 31337}]}))

    registry = NetworkRegistry.from_json(path, include_builtin=False)

    assert [p.name for p in registry.profiles] == ["local"]


def test_from_json_rejects_malformed(tmp_path: Path) -> None:
    path = tmp_path / "networks.json"
    path.write_text(json.dumps({"networks": [{"chainId": 5}]}))

    with pytest.raises(UnsupportedNetwork):
        NetworkRegistry.from_json(path)


def test_register_replaces_profile(registry: NetworkRegistry) -> None:
    replacement = NetworkProfile(name="mainnet", chain_id=1, addresses={})
    registry.register(replacement)

    assert registry.resolve(1) is replacement
