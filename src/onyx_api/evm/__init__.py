"""Web3-backed transport, configuration and connection gate."""

from .config import ClientConfig
from .connections import Web3Connections, create_connection
from .gate import ConnectionGate
from .transactions import TransactionHandle, Transport, Web3Transport

__all__ = [
    "ClientConfig",
    "ConnectionGate",
    "TransactionHandle",
    "Transport",
    "Web3Connections",
    "Web3Transport",
    "create_connection",
]
