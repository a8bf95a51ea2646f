"""Client for the Onyx off-chain index API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import requests

from .constants import DEFAULT_API_URL
from .evm.config import DEFAULT_REQUEST_TIMEOUT
from .exceptions import ApiError

logger = logging.getLogger(__name__)

ACCOUNT_PATH = "/api/v2/account"
OTOKEN_PATH = "/api/v2/otoken"
MARKET_HISTORY_PATH = "/api/v2/market_history/graph"
GOVERNANCE_PATHS = {
    "proposals": "/api/v2/governance/proposals",
    "voteReceipts": "/api/v2/governance/proposal_vote_receipts",
    "accounts": "/api/v2/governance/accounts",
}


class OnyxApi:
    """POST JSON queries to the account, oToken, market history and governance services."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        session: requests.Session | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._request_timeout = request_timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def account(self, payload: Mapping[str, Any]) -> Any:
        return self._query(payload, "account", ACCOUNT_PATH)

    def otoken(self, payload: Mapping[str, Any]) -> Any:
        return self._query(payload, "oToken", OTOKEN_PATH)

    def market_history(self, payload: Mapping[str, Any]) -> Any:
        return self._query(payload, "Market History", MARKET_HISTORY_PATH)

    def governance(self, payload: Mapping[str, Any], endpoint: str) -> Any:
        """Query ``proposals``, ``voteReceipts`` or (for anything else) ``accounts``."""
        path = GOVERNANCE_PATHS.get(endpoint, GOVERNANCE_PATHS["accounts"])
        return self._query(payload, "GovernanceService", path)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _query(self, payload: Mapping[str, Any], name: str, path: str) -> Any:
        prefix = f"Onyx [api] [{name}] | "
        url = self._base_url + path
        logger.debug("POST %s", url)
        try:
            response = self._session.request(
                "POST",
                url,
                json=dict(payload),
                headers={"Content-type": "application/json"},
                timeout=self._request_timeout,
            )
        except requests.RequestException as exc:
            raise ApiError(prefix + str(exc), endpoint=path) from exc

        status = response.status_code
        if not 200 <= status <= 299:
            raise ApiError(
                prefix + "Invalid request made to the Onyx API.",
                endpoint=path,
                status_code=status,
                details={"reason": response.reason},
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                prefix + "Unable to parse response body.",
                endpoint=path,
                status_code=status,
            ) from exc
