"""Contract ABIs used by the Onyx client and a parser for readable signatures."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import parse as parse_abi_type
from eth_abi.registry import registry as abi_registry

from .exceptions import InvalidArgument

Param = tuple[str, str] | tuple[str, str, bool]


def _params(items: Sequence[Param]) -> list[dict[str, Any]]:
    params = []
    for item in items:
        entry: dict[str, Any] = {"name": item[0], "type": item[1]}
        if len(item) == 3:
            entry["indexed"] = item[2]
        params.append(entry)
    return params


def _fn(
    name: str,
    inputs: Sequence[Param] = (),
    outputs: Sequence[Param] = (),
    mutability: str = "nonpayable",
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": _params(inputs),
        "outputs": _params(outputs),
        "stateMutability": mutability,
    }


def _event(name: str, inputs: Sequence[Param]) -> dict[str, Any]:
    return {"type": "event", "name": name, "inputs": _params(inputs), "anonymous": False}


_TRANSFER = _event(
    "Transfer", [("from", "address", True), ("to", "address", True), ("amount", "uint256", False)]
)
_APPROVAL = _event(
    "Approval",
    [("owner", "address", True), ("spender", "address", True), ("amount", "uint256", False)],
)

ERC20 = [
    _fn("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")], "view"),
    _fn("approve", [("spender", "address"), ("amount", "uint256")], [("", "bool")]),
    _fn("balanceOf", [("account", "address")], [("", "uint256")], "view"),
    _fn("decimals", [], [("", "uint8")], "view"),
    _fn("symbol", [], [("", "string")], "view"),
    _TRANSFER,
    _APPROVAL,
]

_MARKET_EVENTS = [
    _event(
        "AccrueInterest",
        [
            ("cashPrior", "uint256", False),
            ("interestAccumulated", "uint256", False),
            ("borrowIndex", "uint256", False),
            ("totalBorrows", "uint256", False),
        ],
    ),
    _event(
        "Mint",
        [
            ("minter", "address", False),
            ("mintAmount", "uint256", False),
            ("mintTokens", "uint256", False),
        ],
    ),
    _event(
        "Redeem",
        [
            ("redeemer", "address", False),
            ("redeemAmount", "uint256", False),
            ("redeemTokens", "uint256", False),
        ],
    ),
    _event(
        "Borrow",
        [
            ("borrower", "address", False),
            ("borrowAmount", "uint256", False),
            ("accountBorrows", "uint256", False),
            ("totalBorrows", "uint256", False),
        ],
    ),
    _event(
        "RepayBorrow",
        [
            ("payer", "address", False),
            ("borrower", "address", False),
            ("repayAmount", "uint256", False),
            ("accountBorrows", "uint256", False),
            ("totalBorrows", "uint256", False),
        ],
    ),
    _TRANSFER,
    _APPROVAL,
]

_MARKET_VIEWS = [
    _fn("exchangeRateCurrent", [], [("", "uint256")]),
    _fn("exchangeRateStored", [], [("", "uint256")], "view"),
    _fn("balanceOf", [("owner", "address")], [("", "uint256")], "view"),
    _fn("balanceOfUnderlying", [("owner", "address")], [("", "uint256")]),
    _fn("borrowBalanceCurrent", [("account", "address")], [("", "uint256")]),
    _fn("decimals", [], [("", "uint8")], "view"),
]

O_ERC20 = [
    _fn("mint", [("mintAmount", "uint256")], [("", "uint256")]),
    _fn("redeem", [("redeemTokens", "uint256")], [("", "uint256")]),
    _fn("redeemUnderlying", [("redeemAmount", "uint256")], [("", "uint256")]),
    _fn("borrow", [("borrowAmount", "uint256")], [("", "uint256")]),
    _fn("repayBorrow", [("repayAmount", "uint256")], [("", "uint256")]),
    _fn(
        "repayBorrowBehalf",
        [("borrower", "address"), ("repayAmount", "uint256")],
        [("", "uint256")],
    ),
    _fn("underlying", [], [("", "address")], "view"),
    *_MARKET_VIEWS,
    *_MARKET_EVENTS,
]

O_ETHER = [
    _fn("mint", [], [], "payable"),
    _fn("redeem", [("redeemTokens", "uint256")], [("", "uint256")]),
    _fn("redeemUnderlying", [("redeemAmount", "uint256")], [("", "uint256")]),
    _fn("borrow", [("borrowAmount", "uint256")], [("", "uint256")]),
    _fn("repayBorrow", [], [], "payable"),
    _fn("repayBorrowBehalf", [("borrower", "address")], [], "payable"),
    *_MARKET_VIEWS,
    *_MARKET_EVENTS,
]

COMPTROLLER = [
    _fn("enterMarkets", [("oTokens", "address[]")], [("", "uint256[]")]),
    _fn("exitMarket", [("oTokenAddress", "address")], [("", "uint256")]),
    _fn("getAssetsIn", [("account", "address")], [("", "address[]")], "view"),
    _fn("oracle", [], [("", "address")], "view"),
    _fn("claimXcn", [("holder", "address")]),
    _fn("xcnAccrued", [("holder", "address")], [("", "uint256")], "view"),
    _event("MarketEntered", [("oToken", "address", False), ("account", "address", False)]),
    _event("MarketExited", [("oToken", "address", False), ("account", "address", False)]),
    _event(
        "DistributedSupplierXcn",
        [
            ("oToken", "address", True),
            ("supplier", "address", True),
            ("xcnDelta", "uint256", False),
            ("xcnSupplyIndex", "uint256", False),
        ],
    ),
    _event(
        "DistributedBorrowerXcn",
        [
            ("oToken", "address", True),
            ("borrower", "address", True),
            ("xcnDelta", "uint256", False),
            ("xcnBorrowIndex", "uint256", False),
        ],
    ),
]

PRICE_ORACLE = [
    _fn("getUnderlyingPrice", [("oToken", "address")], [("", "uint256")], "view"),
]

XCN = [
    _fn("name", [], [("", "string")], "view"),
    _fn("balanceOf", [("account", "address")], [("", "uint256")], "view"),
    _fn("delegate", [("delegatee", "address")]),
    _fn(
        "delegateBySig",
        [
            ("delegatee", "address"),
            ("nonce", "uint256"),
            ("expiry", "uint256"),
            ("v", "uint8"),
            ("r", "bytes32"),
            ("s", "bytes32"),
        ],
    ),
    _fn("nonces", [("account", "address")], [("", "uint256")], "view"),
    _fn("getCurrentVotes", [("account", "address")], [("", "uint96")], "view"),
    _event(
        "DelegateChanged",
        [
            ("delegator", "address", True),
            ("fromDelegate", "address", True),
            ("toDelegate", "address", True),
        ],
    ),
    _event(
        "DelegateVotesChanged",
        [
            ("delegate", "address", True),
            ("previousBalance", "uint256", False),
            ("newBalance", "uint256", False),
        ],
    ),
    _TRANSFER,
    _APPROVAL,
]

GOVERNOR_BRAVO = [
    _fn("name", [], [("", "string")], "view"),
    _fn("castVote", [("proposalId", "uint256"), ("support", "uint8")]),
    _fn(
        "castVoteWithReason",
        [("proposalId", "uint256"), ("support", "uint8"), ("reason", "string")],
    ),
    _fn(
        "castVoteBySig",
        [
            ("proposalId", "uint256"),
            ("support", "uint8"),
            ("v", "uint8"),
            ("r", "bytes32"),
            ("s", "bytes32"),
        ],
    ),
    _event(
        "VoteCast",
        [
            ("voter", "address", True),
            ("proposalId", "uint256", False),
            ("support", "uint8", False),
            ("votes", "uint256", False),
            ("reason", "string", False),
        ],
    ),
]

ABIS: dict[str, list[dict[str, Any]]] = {
    "ERC20": ERC20,
    "oErc20": O_ERC20,
    "oEther": O_ETHER,
    "Comptroller": COMPTROLLER,
    "PriceOracle": PRICE_ORACLE,
    "XCN": XCN,
    "GovernorBravo": GOVERNOR_BRAVO,
}


_SIGNATURE_RE = re.compile(
    r"^\s*(?:function\s+)?(?P<name>[A-Za-z_][A-Za-z0-9_]*)\s*\((?P<inputs>[^)]*)\)"
    r"(?P<modifiers>[^(]*?)(?:\s*returns\s*\((?P<outputs>[^)]*)\))?\s*$"
)
_BARE_INT_RE = re.compile(r"^(u?int)(?=$|\[)")


def parse_function_signature(signature: str) -> dict[str, Any]:
    """Build an ABI entry from ``"function name(type a) view returns (type)"``."""

    match = _SIGNATURE_RE.match(signature)
    if match is None:
        raise InvalidArgument(
            f"Unable to parse function signature {signature!r}",
            field="method",
            value=signature,
        )

    modifiers = match.group("modifiers").split()
    mutability = "nonpayable"
    for candidate in ("view", "pure", "payable"):
        if candidate in modifiers:
            mutability = candidate

    return {
        "type": "function",
        "name": match.group("name"),
        "inputs": _parse_params(match.group("inputs"), signature),
        "outputs": _parse_params(match.group("outputs") or "", signature),
        "stateMutability": mutability,
    }


def _parse_params(text: str, signature: str) -> list[dict[str, Any]]:
    params = []
    for raw in (part.strip() for part in text.split(",")):
        if not raw:
            continue
        pieces = raw.split()
        type_str = pieces[0]
        name = pieces[-1] if len(pieces) > 1 and pieces[-1] not in ("memory", "calldata") else ""
        type_str = _BARE_INT_RE.sub(r"\g<1>256", type_str)
        try:
            parse_abi_type(type_str).validate()
        except (ABITypeError, ParseError) as exc:
            raise InvalidArgument(
                f"Invalid ABI type {type_str!r} in signature",
                field="method",
                value=signature,
                details={"error": str(exc)},
            ) from exc
        if not abi_registry.has_encoder(type_str):
            raise InvalidArgument(
                f"Unknown ABI type {type_str!r} in signature",
                field="method",
                value=signature,
            )
        params.append({"name": name, "type": type_str})
    return params


def is_signature(method: str) -> bool:
    return "(" in method
