"""Exception hierarchy for the Onyx protocol client."""

from typing import Any


def error_prefix(operation: str) -> str:
    """Return the stable message prefix used by every validation error."""
    return f"Onyx [{operation}] | "


class OnyxError(Exception):
    """Base exception for all Onyx client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgument(OnyxError):
    """Raised when a call argument is malformed or has the wrong type."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidAmount(InvalidArgument):
    """Raised when an amount cannot be interpreted as a number."""


class UnsupportedAsset(OnyxError):
    """Raised when a symbol is not part of the supported asset sets."""

    def __init__(self, message: str, symbol: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.symbol = symbol


class UnknownAsset(OnyxError):
    """Raised when a network profile has no decimals for an asset."""

    def __init__(
        self,
        message: str,
        symbol: str | None = None,
        network: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.symbol = symbol
        self.network = network


class UnknownContract(OnyxError):
    """Raised when a network profile has no address for a symbol or contract."""

    def __init__(
        self,
        message: str,
        name: str | None = None,
        network: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.name = name
        self.network = network


class UnsupportedNetwork(OnyxError):
    """Raised when the connected chain has no registered network profile."""

    def __init__(
        self,
        message: str,
        network: str | int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.network = network


class TransactionFailed(OnyxError):
    """Raised when the transport rejects a read or write call."""

    def __init__(
        self,
        message: str,
        method: str | None = None,
        address: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.method = method
        self.address = address


class ApiError(OnyxError):
    """Raised when the off-chain Onyx API request fails."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code
