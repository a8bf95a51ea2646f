"""Symbols, decimals and supported asset sets for the Onyx protocol."""

from enum import Enum

MARKET_TOKEN_PREFIX = "o"

# Market tokens always report balances with 8 decimals
MARKET_TOKEN_DECIMALS = 8

NATIVE_ASSET = "ETH"
NATIVE_MARKET = MARKET_TOKEN_PREFIX + NATIVE_ASSET


class Asset(str, Enum):
    """Underlying assets listed on the protocol."""

    ETH = "ETH"
    USDC = "USDC"
    USDT = "USDT"
    DAI = "DAI"
    WBTC = "WBTC"
    UNI = "UNI"
    LINK = "LINK"
    BUSD = "BUSD"
    XCN = "XCN"


class Contract(str, Enum):
    """Core protocol contracts looked up by name."""

    COMPTROLLER = "Comptroller"
    PRICE_ORACLE = "PriceOracle"
    GOVERNOR = "GovernorBravo"
    XCN = "XCN"


UNDERLYINGS: tuple[str, ...] = tuple(asset.value for asset in Asset)
MARKET_TOKENS: tuple[str, ...] = tuple(MARKET_TOKEN_PREFIX + symbol for symbol in UNDERLYINGS)

# Assets the price oracle can quote. Beyond the listed underlyings this only
# admits BTC, which prices only on deployments whose network profile registers
# an oBTC market and a BTC entry.
PRICE_FEED_ASSETS: tuple[str, ...] = (
    "BTC",
    "ETH",
    "USDC",
    "USDT",
    "DAI",
    "UNI",
    "LINK",
    "BUSD",
    "XCN",
)

# The price feed reports the unwrapped asset for these underlyings
PRICE_SYMBOL_REMAP = {"WBTC": "BTC"}

DECIMALS: dict[str, int] = {
    "ETH": 18,
    "USDC": 6,
    "USDT": 6,
    "DAI": 18,
    "WBTC": 8,
    "BTC": 8,
    "UNI": 18,
    "LINK": 18,
    "BUSD": 18,
    "XCN": 18,
    **{symbol: MARKET_TOKEN_DECIMALS for symbol in MARKET_TOKENS},
}

CHAIN_NAMES: dict[int, str] = {
    1: "mainnet",
    5: "goerli",
    11155111: "sepolia",
}

DEFAULT_RPC_URLS: dict[str, str] = {
    "mainnet": "https://ethereum-rpc.publicnode.com",
    "sepolia": "https://ethereum-sepolia-rpc.publicnode.com",
}

DEFAULT_API_URL = "https://api.onyx.org"

# Governor vote choices
VOTE_AGAINST = 0
VOTE_FOR = 1
VOTE_ABSTAIN = 2
