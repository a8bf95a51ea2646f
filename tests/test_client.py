from __future__ import annotations

import asyncio

import pytest
from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3

from onyx_api import Onyx, OnyxApi
from onyx_api.evm.config import ClientConfig
from onyx_api.evm.connections import Web3Connections
from onyx_api.evm.transactions import Web3Transport
from onyx_api.exceptions import InvalidArgument, UnsupportedNetwork
from onyx_api.networks import NetworkProfile, NetworkRegistry

from .conftest import RecordingTransport

PRIVATE_KEY = "0x" + "11" * 32
HARDHAT_MNEMONIC = "test test test test test test test test test test test junk"
HARDHAT_ACCOUNT_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def test_private_key_account_is_default_sender() -> None:
    connections = Web3Connections(
        ClientConfig(provider_source="http://localhost:8545", private_key=PRIVATE_KEY)
    )

    expected = Account.from_key(PRIVATE_KEY).address
    assert connections.account is not None
    assert connections.account.address == expected
    assert connections.web3.eth.default_account == expected
    assert asyncio.run(connections.signer_address()) == expected


def test_mnemonic_account_uses_default_path() -> None:
    connections = Web3Connections(
        ClientConfig(provider_source="http://localhost:8545", mnemonic=HARDHAT_MNEMONIC)
    )

    assert connections.account is not None
    assert connections.account.address == HARDHAT_ACCOUNT_0


def test_invalid_private_key_rejected() -> None:
    with pytest.raises(InvalidArgument, match="private key"):
        Web3Connections(ClientConfig(provider_source="http://localhost:8545", private_key="0x00"))


def test_existing_async_web3_is_reused() -> None:
    web3 = AsyncWeb3(AsyncHTTPProvider("http://localhost:8545"))

    connections = Web3Connections(ClientConfig(provider_source=web3))

    assert connections.web3 is web3
    assert connections.account is None


def test_unsupported_provider_source_rejected() -> None:
    with pytest.raises(InvalidArgument, match="Argument `provider`"):
        Web3Connections(ClientConfig(provider_source=42))


def test_client_builds_web3_transport_by_default() -> None:
    client = Onyx("http://localhost:8545", private_key=PRIVATE_KEY)

    assert isinstance(client.transport, Web3Transport)
    assert client.network is None


def test_client_rejects_key_and_mnemonic() -> None:
    with pytest.raises(InvalidArgument, match="mutually exclusive"):
        Onyx(private_key=PRIVATE_KEY, mnemonic=HARDHAT_MNEMONIC)


def test_network_resolves_once(client: Onyx, transport: RecordingTransport) -> None:
    async def scenario() -> NetworkProfile:
        await asyncio.gather(client.exit_market("ETH"), client.exit_market("USDC"))
        return await client.wait_for_network()

    profile = asyncio.run(scenario())

    assert transport.network_calls == 1
    assert client.network is profile
    assert len(transport.writes()) == 2


def test_unsupported_network_fails_every_operation(registry: NetworkRegistry) -> None:
    transport = RecordingTransport(chain_id=31337, name="chain-31337")
    client = Onyx(transport=transport, registry=registry)

    with pytest.raises(UnsupportedNetwork):
        asyncio.run(client.exit_market("ETH"))
    with pytest.raises(UnsupportedNetwork):
        asyncio.run(client.supply("USDC", 1))

    assert transport.network_calls == 1
    assert transport.calls == []


def test_default_mainnet_profile_fails_before_any_call() -> None:
    transport = RecordingTransport()
    client = Onyx(transport=transport)

    with pytest.raises(UnsupportedNetwork, match="no deployment entries") as excinfo:
        asyncio.run(client.supply("USDC", 1))
    with pytest.raises(UnsupportedNetwork):
        asyncio.run(client.claim_xcn())

    assert "oUSDC" in excinfo.value.details["missing"]
    assert transport.calls == []


def test_get_balance(client: Onyx, transport: RecordingTransport) -> None:
    address = "0x" + "ab" * 20

    assert asyncio.run(client.get_balance(address)) == 10**18
    assert transport.calls == [("balance", address)]

    with pytest.raises(InvalidArgument, match=r"Onyx \[getBalance\]"):
        asyncio.run(client.get_balance("0xbad"))


def test_networks_file_builds_registry(tmp_path, transport: RecordingTransport) -> None:
    path = tmp_path / "networks.json"
    path.write_text('{"networks": [{"name": "local", "chainId": 31337}]}')

    client = Onyx(networks_file=str(path), transport=transport)

    assert client.registry.resolve(31337).name == "local"


def test_api_uses_configured_url(transport: RecordingTransport) -> None:
    client = Onyx(transport=transport, api_url="https://index.example")

    assert isinstance(client.api, OnyxApi)
    assert client.api.base_url == "https://index.example"
    assert client.api is client.api


def test_from_env(monkeypatch: pytest.MonkeyPatch, transport: RecordingTransport) -> None:
    monkeypatch.setenv("ONYX_PROVIDER", "http://node:8545")
    monkeypatch.setenv("ONYX_PRIVATE_KEY", PRIVATE_KEY)
    monkeypatch.delenv("ONYX_MNEMONIC", raising=False)
    monkeypatch.delenv("ONYX_NETWORKS_FILE", raising=False)

    client = Onyx.from_env(transport=transport)

    assert client.config.provider_source == "http://node:8545"
    assert client.config.private_key == PRIVATE_KEY
