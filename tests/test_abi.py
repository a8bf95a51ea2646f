from __future__ import annotations

import pytest

from onyx_api.abi import ABIS, is_signature, parse_function_signature
from onyx_api.exceptions import InvalidArgument


def test_parse_view_signature_with_returns() -> None:
    entry = parse_function_signature("function decimals() view returns (uint8)")

    assert entry["name"] == "decimals"
    assert entry["inputs"] == []
    assert entry["outputs"] == [{"name": "", "type": "uint8"}]
    assert entry["stateMutability"] == "view"


def test_parse_normalises_bare_integers() -> None:
    entry = parse_function_signature("function nonces(address) returns (uint)")

    assert entry["inputs"] == [{"name": "", "type": "address"}]
    assert entry["outputs"] == [{"name": "", "type": "uint256"}]
    assert entry["stateMutability"] == "nonpayable"


def test_parse_named_and_array_parameters() -> None:
    entry = parse_function_signature("enterMarkets(address[] oTokens, int[] weights) payable")

    assert entry["inputs"] == [
        {"name": "oTokens", "type": "address[]"},
        {"name": "weights", "type": "int256[]"},
    ]
    assert entry["stateMutability"] == "payable"


@pytest.mark.parametrize("signature", ["not a signature", "function foo(banana)"])
def test_parse_rejects_invalid(signature: str) -> None:
    with pytest.raises(InvalidArgument):
        parse_function_signature(signature)


def test_is_signature() -> None:
    assert is_signature("balanceOf(address)")
    assert not is_signature("balanceOf")


def test_market_abis_expose_core_methods() -> None:
    for name in ("oErc20", "oEther"):
        functions = {entry["name"] for entry in ABIS[name] if entry["type"] == "function"}
        assert {"mint", "redeem", "redeemUnderlying", "borrow", "repayBorrow"} <= functions
        assert "exchangeRateCurrent" in functions
