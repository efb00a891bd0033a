"""
Rules Loader - Reads the tier rules table and builds an immutable RulesConfig.

tier_rules.csv columns:
    tier, discount_threshold, discount_percentage, tax_rate

Every value is read as a string and parsed straight to Decimal so that
0.1 in the file is exactly 0.1 in the engine.
"""
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping

import pandas as pd

from ..engine.models import CustomerTier, DiscountRule, RulesConfig
from ..engine.pricing_engine import MAX_SUBTOTAL


REQUIRED_COLUMNS = ['tier', 'discount_threshold', 'discount_percentage', 'tax_rate']


class RulesConfigError(ValueError):
    """Raised when the rules table is missing, malformed or out of range."""


def parse_decimal(value, field_name: str, tier: str) -> Decimal:
    """Parse a Decimal from a CSV cell or mapping value."""
    text = str(value).strip()
    if text == '' or text.lower() == 'nan':
        raise RulesConfigError(f"{tier}: {field_name} is required")
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise RulesConfigError(f"{tier}: {field_name} must be a number, got '{text}'") from None
    if not number.is_finite():
        raise RulesConfigError(f"{tier}: {field_name} must be finite, got '{text}'")
    return number


def _check_rate(rate: Decimal, field_name: str, tier: str):
    if rate < 0 or rate >= 1:
        raise RulesConfigError(f"{tier}: {field_name} must be in [0, 1), got {rate}")


def _build_tier(tier_name: str, threshold, percentage, tax_rate) -> tuple[CustomerTier, DiscountRule, Decimal]:
    try:
        tier = CustomerTier(str(tier_name).strip().lower())
    except ValueError:
        raise RulesConfigError(f"Unknown tier '{tier_name}'") from None

    threshold = parse_decimal(threshold, 'discount_threshold', tier.value)
    percentage = parse_decimal(percentage, 'discount_percentage', tier.value)
    tax_rate = parse_decimal(tax_rate, 'tax_rate', tier.value)

    if threshold < 0:
        raise RulesConfigError(f"{tier.value}: discount_threshold must be non-negative, got {threshold}")
    if threshold > MAX_SUBTOTAL:
        raise RulesConfigError(f"{tier.value}: discount_threshold must be at most {MAX_SUBTOTAL}, got {threshold}")
    _check_rate(percentage, 'discount_percentage', tier.value)
    _check_rate(tax_rate, 'tax_rate', tier.value)

    return tier, DiscountRule(threshold_amount=threshold, percentage=percentage), tax_rate


def rules_config_from_dict(
    tiers: Mapping[str, Mapping],
    discounts_enabled: bool = True,
    currency: str = "USD",
    default_valid_days: int = 30,
) -> RulesConfig:
    """
    Build a RulesConfig from plain mappings.

    Example:
        rules_config_from_dict({
            "standard": {"discount_threshold": "500", "discount_percentage": "0.05", "tax_rate": "0.10"},
            "premium": {"discount_threshold": "100", "discount_percentage": "0.10", "tax_rate": "0.08"},
        })
    """
    discount_rules = {}
    tax_rates = {}
    for name, values in tiers.items():
        missing = [c for c in REQUIRED_COLUMNS[1:] if c not in values]
        if missing:
            raise RulesConfigError(f"{name}: missing {', '.join(missing)}")
        tier, rule, tax_rate = _build_tier(
            name,
            values['discount_threshold'],
            values['discount_percentage'],
            values['tax_rate'],
        )
        if tier in discount_rules:
            raise RulesConfigError(f"Duplicate tier '{tier.value}'")
        discount_rules[tier] = rule
        tax_rates[tier] = tax_rate

    missing_tiers = [t.value for t in CustomerTier if t not in discount_rules]
    if missing_tiers:
        raise RulesConfigError(f"No rules for tier(s): {', '.join(missing_tiers)}")

    if default_valid_days < 0:
        raise RulesConfigError(f"default_valid_days must be non-negative, got {default_valid_days}")

    return RulesConfig(
        discount_rules=discount_rules,
        tax_rates=tax_rates,
        discounts_enabled=discounts_enabled,
        currency=currency,
        default_valid_days=default_valid_days,
    )


def load_rules_config(
    path: Path,
    discounts_enabled: bool = True,
    currency: str = "USD",
    default_valid_days: int = 30,
) -> RulesConfig:
    """Load tier rules from CSV."""
    path = Path(path)
    if not path.exists():
        raise RulesConfigError(f"Rules table not found at {path}")

    try:
        df = pd.read_csv(path, dtype=str, comment='#').fillna('')
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise RulesConfigError(f"{path.name}: cannot parse rules table ({e})") from e
    df.columns = [c.strip() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise RulesConfigError(f"{path.name}: missing column(s) {', '.join(missing)}")

    tiers = {}
    for _, row in df.iterrows():
        name = str(row['tier']).strip()
        if not name:
            continue
        key = name.lower()
        if key in tiers:
            raise RulesConfigError(f"Duplicate tier '{key}' in {path.name}")
        tiers[key] = {c: row[c] for c in REQUIRED_COLUMNS[1:]}

    return rules_config_from_dict(
        tiers,
        discounts_enabled=discounts_enabled,
        currency=currency,
        default_valid_days=default_valid_days,
    )
