"""
Print the rules table and a worked totals calculation for each tier.

Usage:
    python scripts/debug_totals.py [quantity] [unit_price]
"""
import sys
from decimal import Decimal
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

import pandas as pd

from rulequote.config.settings import get_settings
from rulequote.engine import CustomerTier, LineItem, calculate_totals
from rulequote.rules import load_rules_config


def debug():
    settings = get_settings()
    quantity = int(sys.argv[1]) if len(sys.argv) > 1 else 60
    unit_price = Decimal(sys.argv[2]) if len(sys.argv) > 2 else Decimal("10.00")

    print(f"Rules table: {settings.rules_csv}")
    print(pd.read_csv(settings.rules_csv, dtype=str).to_string(index=False))

    config = load_rules_config(
        settings.rules_csv,
        discounts_enabled=settings.discounts_enabled,
        currency=settings.currency,
        default_valid_days=settings.default_valid_days,
    )
    items = [LineItem(description="Debug item", quantity=quantity, unit_price=unit_price)]

    for tier in CustomerTier:
        print(f"\n--- {tier.label}: {quantity} x {unit_price} ---")
        totals = calculate_totals(items, tier, config)
        print(totals.get_explanation_text())
        print(totals.to_dict(include_explanation=False))


if __name__ == "__main__":
    debug()
