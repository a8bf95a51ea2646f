"""XCN rewards, vote delegation and Governor Bravo voting."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from hexbytes import HexBytes

from .abi import COMPTROLLER, GOVERNOR_BRAVO, XCN
from .actions import ActionBase
from .constants import VOTE_ABSTAIN, VOTE_AGAINST, VOTE_FOR, Contract
from .evm.transactions import TransactionHandle
from .exceptions import InvalidArgument, error_prefix
from .networks import NetworkProfile
from .types import CallOptions, Signature

logger = logging.getLogger(__name__)

DEFAULT_DELEGATION_EXPIRY = 10_000_000_000
VOTE_CHOICES = (VOTE_AGAINST, VOTE_FOR, VOTE_ABSTAIN)

EIP712_DOMAIN = [
    {"name": "name", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]
DELEGATION_TYPE = [
    {"name": "delegatee", "type": "address"},
    {"name": "nonce", "type": "uint256"},
    {"name": "expiry", "type": "uint256"},
]
BALLOT_TYPE = [
    {"name": "proposalId", "type": "uint256"},
    {"name": "support", "type": "uint8"},
]


def build_typed_data(
    domain_name: str,
    chain_id: int,
    verifying_contract: str,
    primary_type: str,
    fields: list[dict[str, str]],
    message: Mapping[str, Any],
) -> dict[str, Any]:
    """Assemble an EIP-712 payload in the ``eth_signTypedData_v4`` layout."""
    return {
        "types": {"EIP712Domain": EIP712_DOMAIN, primary_type: fields},
        "primaryType": primary_type,
        "domain": {
            "name": domain_name,
            "chainId": chain_id,
            "verifyingContract": verifying_contract,
        },
        "message": dict(message),
    }


def signature_params(signature: Any, operation: str) -> tuple[int, bytes, bytes]:
    """Split a signature into the ``(v, r, s)`` arguments contracts expect."""

    if isinstance(signature, Signature):
        signature = signature.as_dict()
    pieces = (
        [signature.get(key) for key in ("v", "r", "s")]
        if isinstance(signature, Mapping)
        else []
    )
    if len(pieces) != 3 or not all(isinstance(piece, str) and piece for piece in pieces):
        raise InvalidArgument(
            error_prefix(operation)
            + "Argument `signature` must be an object that contains the v, r, and s "
            "pieces of an EIP-712 signature.",
            field="signature",
            value=signature,
        )

    v, r, s = pieces
    try:
        return int(v, 16) if v.startswith("0x") else int(v), bytes(HexBytes(r)), bytes(HexBytes(s))
    except ValueError as exc:
        raise InvalidArgument(
            error_prefix(operation) + "Argument `signature` contains malformed pieces.",
            field="signature",
            value=signature,
        ) from exc


class GovernanceActions(ActionBase):
    """Reward claims, delegation and voting against the XCN and governor contracts."""

    # ------------------------------------------------------------------
    # Rewards and balances
    # ------------------------------------------------------------------
    async def claim_xcn(self, options: CallOptions | None = None) -> TransactionHandle:
        options = options or CallOptions()
        profile = await self._profile()
        comptroller = self._address(profile, Contract.COMPTROLLER.value)
        holder = await self._transport.signer_address()

        context = self._context(profile, COMPTROLLER, options)
        logger.info("Claiming XCN rewards for %s", holder)
        return await self._transport.write(comptroller, "claimXcn", [holder], context)

    async def get_xcn_balance(self, address: str) -> int:
        """Return the XCN balance of ``address`` as a mantissa."""

        holder = self._validate_address(address, "getXcnBalance")
        profile = await self._profile()
        context = self._context(profile, XCN, CallOptions())
        token = self._address(profile, Contract.XCN.value)
        return int(await self._transport.read(token, "balanceOf", [holder], context))

    async def get_xcn_accrued(self, address: str) -> int:
        """Return the unclaimed XCN rewards of ``address`` as a mantissa."""

        holder = self._validate_address(address, "getXcnAccrued")
        profile = await self._profile()
        context = self._context(profile, COMPTROLLER, CallOptions())
        comptroller = self._address(profile, Contract.COMPTROLLER.value)
        return int(await self._transport.read(comptroller, "xcnAccrued", [holder], context))

    async def get_current_votes(self, address: str) -> int:
        account = self._validate_address(address, "getCurrentVotes")
        profile = await self._profile()
        context = self._context(profile, XCN, CallOptions())
        token = self._address(profile, Contract.XCN.value)
        return int(await self._transport.read(token, "getCurrentVotes", [account], context))

    # ------------------------------------------------------------------
    # Delegation
    # ------------------------------------------------------------------
    async def delegate(
        self, delegatee: str, options: CallOptions | None = None
    ) -> TransactionHandle:
        delegatee = self._validate_address(delegatee, "delegate")
        options = options or CallOptions()
        profile = await self._profile()
        token = self._address(profile, Contract.XCN.value)

        context = self._context(profile, XCN, options)
        return await self._transport.write(token, "delegate", [delegatee], context)

    async def delegate_by_sig(
        self,
        delegatee: str,
        nonce: int,
        expiry: int,
        signature: Signature | Mapping[str, str],
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "delegateBySig"
        delegatee = self._validate_address(delegatee, operation)
        nonce = self._validate_integer(nonce, operation, "nonce")
        expiry = self._validate_integer(expiry, operation, "expiry")
        v, r, s = signature_params(signature, operation)
        options = options or CallOptions()

        profile = await self._profile()
        token = self._address(profile, Contract.XCN.value)
        context = self._context(profile, XCN, options)
        return await self._transport.write(
            token, "delegateBySig", [delegatee, nonce, expiry, v, r, s], context
        )

    async def create_delegate_signature(
        self, delegatee: str, expiry: int = DEFAULT_DELEGATION_EXPIRY
    ) -> Signature:
        """Sign an EIP-712 ``Delegation`` for the next nonce of the signer."""

        operation = "createDelegateSignature"
        delegatee = self._validate_address(delegatee, operation)
        expiry = self._validate_integer(expiry, operation, "expiry")

        profile = await self._profile()
        token = self._address(profile, Contract.XCN.value)
        context = self._context(profile, XCN, CallOptions())
        signer = await self._transport.signer_address()
        nonce = int(await self._transport.read(token, "nonces", [signer], context))
        domain_name = await self._domain_name(profile, token, XCN)

        data = build_typed_data(
            domain_name,
            profile.chain_id,
            token,
            "Delegation",
            DELEGATION_TYPE,
            {"delegatee": delegatee, "nonce": nonce, "expiry": expiry},
        )
        logger.debug("Signing delegation to %s with nonce %s", delegatee, nonce)
        return await self._transport.sign_typed_data(data)

    # ------------------------------------------------------------------
    # Voting
    # ------------------------------------------------------------------
    async def cast_vote(
        self, proposal_id: int, support: int, options: CallOptions | None = None
    ) -> TransactionHandle:
        proposal_id, support = self._validate_ballot(proposal_id, support, "castVote")
        options = options or CallOptions()
        profile = await self._profile()
        governor = self._address(profile, Contract.GOVERNOR.value)

        context = self._context(profile, GOVERNOR_BRAVO, options)
        return await self._transport.write(governor, "castVote", [proposal_id, support], context)

    async def cast_vote_with_reason(
        self,
        proposal_id: int,
        support: int,
        reason: str,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "castVoteWithReason"
        proposal_id, support = self._validate_ballot(proposal_id, support, operation)
        if not isinstance(reason, str):
            raise InvalidArgument(
                error_prefix(operation) + "Argument `reason` must be a string.",
                field="reason",
                value=reason,
            )
        options = options or CallOptions()
        profile = await self._profile()
        governor = self._address(profile, Contract.GOVERNOR.value)

        context = self._context(profile, GOVERNOR_BRAVO, options)
        return await self._transport.write(
            governor, "castVoteWithReason", [proposal_id, support, reason], context
        )

    async def cast_vote_by_sig(
        self,
        proposal_id: int,
        support: int,
        signature: Signature | Mapping[str, str],
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "castVoteBySig"
        proposal_id, support = self._validate_ballot(proposal_id, support, operation)
        v, r, s = signature_params(signature, operation)
        options = options or CallOptions()
        profile = await self._profile()
        governor = self._address(profile, Contract.GOVERNOR.value)

        context = self._context(profile, GOVERNOR_BRAVO, options)
        return await self._transport.write(
            governor, "castVoteBySig", [proposal_id, support, v, r, s], context
        )

    async def create_vote_signature(self, proposal_id: int, support: int) -> Signature:
        """Sign an EIP-712 ``Ballot`` that anyone can submit via ``cast_vote_by_sig``."""

        proposal_id, support = self._validate_ballot(proposal_id, support, "createVoteSignature")
        profile = await self._profile()
        governor = self._address(profile, Contract.GOVERNOR.value)
        domain_name = await self._domain_name(profile, governor, GOVERNOR_BRAVO)

        data = build_typed_data(
            domain_name,
            profile.chain_id,
            governor,
            "Ballot",
            BALLOT_TYPE,
            {"proposalId": proposal_id, "support": support},
        )
        return await self._transport.sign_typed_data(data)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _domain_name(self, profile: NetworkProfile, address: str, abi) -> str:
        context = self._context(profile, abi, CallOptions())
        return str(await self._transport.read(address, "name", [], context))

    def _validate_ballot(self, proposal_id: Any, support: Any, operation: str) -> tuple[int, int]:
        proposal_id = self._validate_integer(proposal_id, operation, "proposalId")
        if isinstance(support, bool) or support not in VOTE_CHOICES:
            raise InvalidArgument(
                error_prefix(operation)
                + "Argument `support` must be 0 (against), 1 (for) or 2 (abstain).",
                field="support",
                value=support,
            )
        return proposal_id, int(support)
