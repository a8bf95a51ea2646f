"""Example: Supply USDC, use it as collateral, then redeem it."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from onyx_api import Onyx, OnyxError

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

ASSET = "USDC"
AMOUNT = "25"  # human-scale units


async def main() -> None:
    if not os.getenv("ONYX_PRIVATE_KEY") and not os.getenv("ONYX_MNEMONIC"):
        raise ValueError("ONYX_PRIVATE_KEY or ONYX_MNEMONIC must be set")

    onyx = Onyx.from_env()

    try:
        supply = await onyx.supply(ASSET, AMOUNT)
        receipt = await supply.wait(1)
        print(f"Supplied {AMOUNT} {ASSET}: {receipt.transaction_hash} {receipt.event_names()}")

        entered = await (await onyx.enter_markets(ASSET)).wait(1)
        print(f"Entered o{ASSET} market: {entered.transaction_hash}")

        redeem = await onyx.redeem(ASSET, AMOUNT)
        receipt = await redeem.wait(1)
        print(f"Redeemed {AMOUNT} {ASSET}: {receipt.transaction_hash}")
    except OnyxError as exc:
        print(f"Onyx call failed: {exc} {exc.details}")


if __name__ == "__main__":
    asyncio.run(main())
