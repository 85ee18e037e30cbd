#!/usr/bin/env python3
"""Wrapped-Asset Index Oracle.

Samples the exchange rate of a wrapped-asset vault, smooths it with a rolling
average guarded against sudden swings, and reports the composite price of the
wrapped token.

Configure via CLI flags or environment variables. See --help for details.
"""

import argparse
import asyncio
import logging
import os
import sys

from .src.AccessGate import Whitelist
from .src.ContractUtility import ContractUtility
from .src.EngineConfig import DEFAULT_WINDOW_SIZE, EngineConfig
from .src.IndexKeeper import IndexKeeper
from .src.PriceEngine import PriceEngine
from .src.RateSource import ContractRateSource, HttpRateSource, RateSource

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def parse_bool(value: str | None) -> bool:
    """Parse a boolean environment value.

    Accepts 1/true/yes/on in any casing; everything else is False.

    :param value: Raw string, possibly None.
    :returns: Parsed flag.
    """
    if not value:
        return False
    return value.strip().lower() in ("1", "true", "yes", "on")


def build_rate_source(location: str, utility: ContractUtility | None) -> RateSource:
    """Create a rate source from a contract address or an HTTP URL.

    :param location: ``0x``-prefixed contract address or ``http(s)://`` URL.
    :param utility: Chain connection used for contract sources.
    :returns: Matching RateSource implementation.
    :raises ValueError: If the location is neither form.
    """
    if location.startswith(("http://", "https://")):
        return HttpRateSource(location)
    if location.startswith("0x"):
        if utility is None:
            raise ValueError("A network connection is required for contract sources")
        return ContractRateSource.from_address(utility.w3, location)
    raise ValueError(f"Unrecognized rate source '{location}'")


def run_oracle(
    index_source: RateSource,
    asset_source: RateSource,
    owner: str,
    keeper_address: str,
    config: EngineConfig,
    update_period: int,
) -> None:
    """Build the engine and drive it until the loop ends.

    Both rate sources are closed however the loop ends.
    """
    try:
        engine = PriceEngine(
            owner=owner,
            index_source=index_source,
            asset_source=asset_source,
            access_gate=Whitelist(owner, members=[keeper_address]),
            config=config,
        )
        index_keeper = IndexKeeper(engine, keeper_address, update_period=update_period)
        asyncio.run(index_keeper.run())
    finally:
        index_source.close()
        asset_source.close()


def main() -> None:
    """Main entry point for the index oracle CLI."""
    parser = argparse.ArgumentParser(
        description="Wrapped-Asset Index Oracle: smoothed exchange-rate price feed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Rate sources are given either as a contract address (read over RPC) or as an
HTTP(S) URL serving a JSON snapshot with totalAssets, totalSupply and totalAum.

Examples:
  # Local node with both figures read from one vault contract
  python -m index_oracle.main \\
      --index-source 0x5FbDB2315678afecb367f032d93F642f64180aa3 \\
      --asset-source 0x5FbDB2315678afecb367f032d93F642f64180aa3

  # Snapshot endpoints, 12 sample window, 0.5% swing limit
  python -m index_oracle.main \\
      --index-source https://vault.example/snapshot \\
      --asset-source https://fund.example/snapshot \\
      --window-size 12 --max-swing 0.5

Environment variables (CLI args take precedence):
  NETWORK, RPC_URL, INDEX_SOURCE, ASSET_SOURCE, WINDOW_SIZE,
  MAX_SWING_PERCENT, DECIMAL_ADJUSTMENT, INCLUDE_FEE, UPDATE_PERIOD,
  KEEPER_KEY, OWNER_ADDRESS
""",
    )

    parser.add_argument(
        "--network",
        type=str,
        help="Network name (localnet) or RPC URL",
        default=os.environ.get("NETWORK") or "localnet",
    )

    parser.add_argument(
        "--index-source",
        dest="index_source",
        type=str,
        help="Contract address or URL supplying totalAssets/totalSupply",
        default=os.environ.get("INDEX_SOURCE"),
    )

    parser.add_argument(
        "--asset-source",
        dest="asset_source",
        type=str,
        help="Contract address or URL supplying totalAum/totalSupply",
        default=os.environ.get("ASSET_SOURCE"),
    )

    parser.add_argument(
        "--window-size",
        dest="window_size",
        type=int,
        help=f"Samples in the moving average (default: {DEFAULT_WINDOW_SIZE})",
        default=int(os.environ.get("WINDOW_SIZE") or DEFAULT_WINDOW_SIZE),
    )

    parser.add_argument(
        "--max-swing",
        dest="max_swing",
        type=float,
        help="Max change vs previous sample in percent (default: 1.0)",
        default=float(os.environ.get("MAX_SWING_PERCENT") or "1.0"),
    )

    parser.add_argument(
        "--decimal-adjustment",
        dest="decimal_adjustment",
        type=int,
        help="Multiplier bringing totalAum/totalSupply to 18 decimals (default: 1)",
        default=int(os.environ.get("DECIMAL_ADJUSTMENT") or "1"),
    )

    parser.add_argument(
        "--include-fee",
        dest="include_fee",
        action="store_true",
        help="Count pending fees in AUM",
        default=parse_bool(os.environ.get("INCLUDE_FEE")),
    )

    parser.add_argument(
        "--update-period",
        dest="update_period",
        type=int,
        help="Seconds between index updates (minimum: 1, default: 3600)",
        default=int(os.environ.get("UPDATE_PERIOD") or "3600"),
    )

    parser.add_argument(
        "--keeper-key",
        dest="keeper_key",
        type=str,
        help="Private key identifying the keeper (localnet uses a dev key)",
        default=os.environ.get("KEEPER_KEY"),
    )

    parser.add_argument(
        "--owner",
        type=str,
        help="Owner address for configuration (default: keeper address)",
        default=os.environ.get("OWNER_ADDRESS"),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Validate arguments
    if not args.index_source:
        parser.error("--index-source is required")

    if not args.asset_source:
        parser.error("--asset-source is required")

    if args.update_period < 1:
        parser.error("--update-period must be at least 1 second")

    if not 0 <= args.max_swing <= 100:
        parser.error("--max-swing must be between 0 and 100 percent")

    try:
        config = EngineConfig(
            window_size=args.window_size,
            max_swing=EngineConfig.percent_to_fraction(args.max_swing),
            decimal_adjustment=args.decimal_adjustment,
            include_fee=args.include_fee,
        )
        keeper = ContractUtility.keeper_account(args.network, args.keeper_key)
    except ValueError as e:
        parser.error(str(e))

    owner = args.owner or keeper.address

    # Log configuration
    logger.info("=" * 60)
    logger.info("Wrapped-Asset Index Oracle")
    logger.info("=" * 60)
    logger.info(f"Network:           {args.network}")
    logger.info(f"Index Source:      {args.index_source}")
    logger.info(f"Asset Source:      {args.asset_source}")
    logger.info(f"Window Size:       {config.window_size}")
    logger.info(f"Max Swing:         {args.max_swing}%")
    logger.info(f"Decimal Adjust:    {config.decimal_adjustment}")
    logger.info(f"Include Fee:       {config.include_fee}")
    logger.info(f"Update Period:     {args.update_period}s")
    logger.info(f"Keeper:            {keeper.address}")
    logger.info(f"Owner:             {owner}")
    logger.info("=" * 60)

    try:
        sources = (args.index_source, args.asset_source)
        utility = None
        if any(s.startswith("0x") for s in sources):
            utility = ContractUtility(args.network)

        run_oracle(
            build_rate_source(args.index_source, utility),
            build_rate_source(args.asset_source, utility),
            owner,
            keeper.address,
            config,
            args.update_period,
        )
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
