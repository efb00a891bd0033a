"""
Data models for the pricing engine.

Uses frozen dataclasses so that line items, rule configuration and computed
totals can be shared freely between callers without copying.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class InvalidInput(ValueError):
    """Raised when a line item or customer tier cannot be priced."""


class CustomerTier(str, Enum):
    """Customer classification controlling discount and tax policy."""
    STANDARD = "standard"
    PREMIUM = "premium"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value) -> 'CustomerTier':
        """Resolve a tier from an enum member, a string, or None (-> STANDARD)."""
        if value is None:
            return cls.STANDARD
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidInput(f"Unknown customer tier: {value!r}")


@dataclass(frozen=True)
class LineItem:
    """A single quoted line: description, whole quantity and unit price."""
    description: str
    quantity: int
    unit_price: Decimal

    @property
    def extended_price(self) -> Decimal:
        price = self.unit_price if isinstance(self.unit_price, Decimal) else Decimal(str(self.unit_price))
        return self.quantity * price


@dataclass(frozen=True)
class DiscountRule:
    """Threshold + percentage pair for one tier. Threshold is inclusive."""
    threshold_amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class RulesConfig:
    """
    Immutable pricing rules.

    Loaded once at start-up and handed to the engine on every call. A reload
    builds a new instance; existing instances are never modified.
    """
    discount_rules: dict[CustomerTier, DiscountRule]
    tax_rates: dict[CustomerTier, Decimal]
    discounts_enabled: bool = True
    currency: str = "USD"
    default_valid_days: int = 30

    def discount_rule_for(self, tier: CustomerTier) -> DiscountRule:
        return self.discount_rules[tier]

    def tax_rate_for(self, tier: CustomerTier) -> Decimal:
        return self.tax_rates[tier]

    def to_dict(self) -> dict:
        """Plain-dict view for JSON output."""
        return {
            "discounts_enabled": self.discounts_enabled,
            "currency": self.currency,
            "default_valid_days": self.default_valid_days,
            "tiers": {
                tier.value: {
                    "discount_threshold": str(self.discount_rules[tier].threshold_amount),
                    "discount_percentage": str(self.discount_rules[tier].percentage),
                    "tax_rate": str(self.tax_rates[tier]),
                }
                for tier in CustomerTier
            },
        }


@dataclass(frozen=True)
class TotalsResult:
    """Complete result of a totals calculation."""
    customer_type: CustomerTier
    item_count: int
    subtotal: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    taxable_base: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    explanation_lines: tuple[str, ...] = field(default_factory=tuple)

    @property
    def discount_applied(self) -> bool:
        return self.discount_percentage > 0

    def get_explanation_text(self) -> str:
        """Get human-readable explanation as formatted text."""
        return "\n".join(f"• {line}" for line in self.explanation_lines)

    def stored_totals(self) -> dict[str, Decimal]:
        """The money fields a quote record keeps."""
        return {
            "subtotal": self.subtotal,
            "discount_amount": self.discount_amount,
            "tax_amount": self.tax_amount,
            "total": self.total,
        }

    def to_dict(self, include_explanation: bool = True) -> dict:
        data = {
            "customer_type": self.customer_type.value,
            "item_count": self.item_count,
            "subtotal": self.subtotal,
            "discount_percentage": self.discount_percentage,
            "discount_amount": self.discount_amount,
            "taxable_base": self.taxable_base,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "total": self.total,
        }
        if include_explanation:
            data["explanation_lines"] = list(self.explanation_lines)
        return data

