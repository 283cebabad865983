"""Manual scraper runner for testing and debugging vendor extractors.

This script runs one vendor (or all configured vendors) once against the
live site and prints the prices it extracts.

Usage:
    python scripts/run_scraper.py --vendor moro
    python scripts/run_scraper.py --vendor "Centar Zlata" --limit 5
    python scripts/run_scraper.py --all
"""

import asyncio
import argparse
import sys
import os
from decimal import Decimal
from typing import Optional

# Add backend to path so we can import goldprices modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from goldprices.config import settings
from goldprices.core.exceptions import VendorNotFoundError
from goldprices.logging_config import configure_logging
from goldprices.scrapers.base import ScrapeOutcome
from goldprices.scrapers.orchestrator import create_orchestrator


async def run_scraper(vendor: Optional[str], limit: int = 10):
    """Run one vendor, or a full cycle, and display the results.

    Args:
        vendor: Vendor slug or name; None runs every configured vendor
        limit: Maximum number of prices to display per vendor
    """
    orchestrator = create_orchestrator(settings)

    print(f"\n{'='*70}")
    print(f"  Running {'all vendors' if vendor is None else vendor}")
    print(f"{'='*70}\n")

    if vendor is None:
        outcomes = await orchestrator.run_cycle()
    else:
        try:
            outcomes = [await orchestrator.run_vendor(vendor)]
        except VendorNotFoundError as e:
            print(f"\n❌ Error: {e.message}")
            print(f"\n📋 Configured vendors:")
            for name in orchestrator.vendors:
                print(f"   - {name}")
            return

    for outcome in outcomes:
        _print_outcome(outcome, limit)


def _print_outcome(outcome: ScrapeOutcome, limit: int) -> None:
    print(f"{'='*70}")
    print(f"  {outcome.vendor}")
    print(f"{'='*70}")

    if not outcome.success or outcome.data is None:
        print(f"❌ {outcome.error}\n")
        return

    prices = outcome.data.prices
    print(f"✅ Found {len(prices)} prices (scraped {outcome.data.scraped_at:%Y-%m-%d %H:%M:%S} UTC)\n")

    for i, entry in enumerate(prices[:limit], 1):
        weight = f"{entry.weight} {entry.unit}" if entry.weight else entry.unit
        print(f"[{i}] {entry.product_title or '(untitled)'}")
        print(f"    ⚖️  Weight: {weight}")
        print(f"    💰 Price: {_format_price(entry.price)}")
        if entry.regular_price and entry.discounted_price:
            print(f"    🔖 Regular: {_format_price(entry.regular_price)}")
        if entry.buy_price:
            print(f"    🏦 Buy-back: {_format_price(entry.buy_price)}")
        if entry.product_link:
            print(f"    🔗 URL: {entry.product_link[:80]}")
        print()


def _format_price(price: Optional[Decimal]) -> str:
    """Format a euro price the way Croatian shops show it ("1.234,56 €")."""
    if price is None:
        return "-"
    formatted = f"{price:,.2f}"
    return formatted.replace(",", " ").replace(".", ",").replace(" ", ".") + " €"


def main():
    """Parse arguments and run the scraper."""
    parser = argparse.ArgumentParser(
        description="Run gold price vendor scrapers once",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_scraper.py --vendor moro
  python scripts/run_scraper.py --vendor "Centar Zlata" --limit 5
  python scripts/run_scraper.py --all
        """,
    )

    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument(
        "--vendor",
        help="Vendor slug or name (e.g., 'moro', 'Centar Zlata')",
    )
    target.add_argument(
        "--all",
        action="store_true",
        help="Run every configured vendor",
    )

    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of prices to display per vendor (default: 10)",
    )

    args = parser.parse_args()

    configure_logging()
    asyncio.run(run_scraper(None if args.all else args.vendor, args.limit))


if __name__ == "__main__":
    main()
