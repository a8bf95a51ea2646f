"""Example: Read oracle prices for underlyings and market tokens."""

from __future__ import annotations

import asyncio
import logging
import os

from dotenv import load_dotenv

from onyx_api import Onyx

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

PAIRS = [("ETH", "USDC"), ("WBTC", "USDC"), ("oETH", "ETH"), ("XCN", "USDT")]


async def main() -> None:
    # Needs ONYX_NETWORKS_FILE pointing at the deployment's market and Comptroller addresses
    onyx = Onyx.from_env()

    for asset, in_asset in PAIRS:
        price = await onyx.get_price(asset, in_asset)
        print(f"1 {asset} = {price:.6f} {in_asset}")


if __name__ == "__main__":
    asyncio.run(main())
