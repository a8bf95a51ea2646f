"""Example: Delegate XCN votes and vote on a proposal by signature."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from onyx_api import VOTE_FOR, Onyx

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


async def main() -> None:
    delegatee = os.getenv("DELEGATEE")
    if not delegatee:
        raise ValueError("DELEGATEE not found in environment variables")
    proposal_id = int(os.getenv("PROPOSAL_ID", "1"))

    onyx = Onyx.from_env()
    signer = await onyx.transport.signer_address()

    print(f"XCN balance: {await onyx.get_xcn_balance(signer)}")
    print(f"XCN accrued: {await onyx.get_xcn_accrued(signer)}")

    handle = await onyx.delegate(delegatee)
    await handle.wait(1)
    print(f"Votes of {delegatee}: {await onyx.get_current_votes(delegatee)}")

    # The ballot is signed off-chain; any account can relay it
    signature = await onyx.create_vote_signature(proposal_id, VOTE_FOR)
    vote = await onyx.cast_vote_by_sig(proposal_id, VOTE_FOR, signature)
    receipt = await vote.wait(1)
    print(f"Voted on proposal {proposal_id}: {receipt.transaction_hash}")


if __name__ == "__main__":
    asyncio.run(main())
