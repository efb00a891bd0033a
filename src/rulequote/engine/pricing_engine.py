"""
Pricing Engine - subtotal, tier discount, tax and total for a set of line items.

Resolution order:
1. Subtotal = sum of quantity x unit price (unrounded)
2. Tier discount rule: applies when discounts are enabled and subtotal >= threshold
3. Discount amount = subtotal x percentage
4. Taxable base = subtotal - discount
5. Tax = taxable base x tier tax rate
6. Total = taxable base + tax
7. Money fields rounded half-up to cents, each from its unrounded value

calculate_totals() is pure: no I/O, no logging, no clock, no shared state.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from .models import CustomerTier, InvalidInput, LineItem, RulesConfig, TotalsResult


MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0")

# Upper bounds keep every amount well inside the default 28-digit decimal context.
MAX_QUANTITY = 1_000_000
MAX_UNIT_PRICE = Decimal("1000000000")
MAX_SUBTOTAL = Decimal("1000000000000000")


def quantize_money(value: Decimal) -> Decimal:
    """Round a money amount to cents, half-up."""
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    return f"${quantize_money(value):,.2f}"


def format_rate(rate: Decimal) -> str:
    """0.05 -> '5', 0.125 -> '12.5'."""
    percent = (rate * 100).normalize()
    return f"{percent:f}"


def _coerce_price(value) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInput(f"Unit price must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        price = value
    elif isinstance(value, (int, float)):
        price = Decimal(str(value))
    else:
        raise InvalidInput(f"Unit price must be numeric, got {value!r}")
    if not price.is_finite():
        raise InvalidInput(f"Unit price must be finite, got {value!r}")
    if price < 0:
        raise InvalidInput(f"Unit price must be non-negative, got {price}")
    if price > MAX_UNIT_PRICE:
        raise InvalidInput(f"Unit price must be at most {MAX_UNIT_PRICE}, got {price}")
    return price


def _validate_items(items: Iterable[LineItem]) -> list[tuple[int, Decimal]]:
    """Check every line before anything is computed; return (qty, price) pairs."""
    checked = []
    for index, item in enumerate(items, start=1):
        description = getattr(item, 'description', None)
        if not isinstance(description, str) or not description.strip():
            raise InvalidInput(f"Item {index}: description is required")

        quantity = getattr(item, 'quantity', None)
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidInput(f"Item {index}: quantity must be an integer, got {quantity!r}")
        if quantity <= 0:
            raise InvalidInput(f"Item {index}: quantity must be positive, got {quantity}")
        if quantity > MAX_QUANTITY:
            raise InvalidInput(f"Item {index}: quantity must be at most {MAX_QUANTITY}, got {quantity}")

        try:
            price = _coerce_price(getattr(item, 'unit_price', None))
        except InvalidInput as e:
            raise InvalidInput(f"Item {index}: {e}") from None
        checked.append((quantity, price))
    return checked


def calculate_totals(
    items: Iterable[LineItem],
    customer_type: Optional[CustomerTier],
    config: RulesConfig,
) -> TotalsResult:
    """
    Calculate totals for quote items with tier-based discount and tax.

    Args:
        items: Line items to price. An empty sequence prices to zero.
        customer_type: Tier (or its string value); None means STANDARD.
        config: Rules to apply. Read, never modified.

    Returns:
        TotalsResult with cent-rounded money fields and explanation lines.

    Raises:
        InvalidInput: malformed or out-of-range line item, or unknown tier.
    """
    tier = CustomerTier.parse(customer_type)
    lines = _validate_items(items)
    explanation = []

    subtotal = sum((qty * price for qty, price in lines), ZERO)
    if subtotal > MAX_SUBTOTAL:
        raise InvalidInput(f"Subtotal must be at most {MAX_SUBTOTAL}, got {subtotal}")
    explanation.append(f"Subtotal: {format_money(subtotal)} ({len(lines)} items)")

    tax_rate = config.tax_rate_for(tier)

    if not lines:
        explanation.append("No discount applied (no line items)")
        explanation.append(f"Tax ({format_rate(tax_rate)}% for {tier.value} customers): {format_money(ZERO)}")
        explanation.append(f"Total: {format_money(ZERO)}")
        return TotalsResult(
            customer_type=tier,
            item_count=0,
            subtotal=quantize_money(ZERO),
            discount_percentage=ZERO,
            discount_amount=quantize_money(ZERO),
            taxable_base=quantize_money(ZERO),
            tax_rate=tax_rate,
            tax_amount=quantize_money(ZERO),
            total=quantize_money(ZERO),
            explanation_lines=tuple(explanation),
        )

    discount_percentage = ZERO
    rule = config.discount_rule_for(tier)
    if not config.discounts_enabled:
        explanation.append("No discount applied (discounts are disabled)")
    elif subtotal >= rule.threshold_amount:
        discount_percentage = rule.percentage
        explanation.append(
            f"{tier.label} customer discount: {format_rate(discount_percentage)}% "
            f"(applied for orders of {format_money(rule.threshold_amount)} or more)"
        )
    else:
        explanation.append(
            f"No discount applied (minimum {format_money(rule.threshold_amount)} "
            f"required for {tier.value} customers)"
        )

    discount_amount = subtotal * discount_percentage
    taxable_base = subtotal - discount_amount
    tax_amount = taxable_base * tax_rate
    total = taxable_base + tax_amount

    explanation.append(
        f"Tax ({format_rate(tax_rate)}% for {tier.value} customers): {format_money(tax_amount)}"
    )
    explanation.append(f"Total: {format_money(total)}")

    return TotalsResult(
        customer_type=tier,
        item_count=len(lines),
        subtotal=quantize_money(subtotal),
        discount_percentage=discount_percentage,
        discount_amount=quantize_money(discount_amount),
        taxable_base=quantize_money(taxable_base),
        tax_rate=tax_rate,
        tax_amount=quantize_money(tax_amount),
        total=quantize_money(total),
        explanation_lines=tuple(explanation),
    )


class PricingEngine:
    """
    Engine bound to a rules store.

    Each call reads the store once, so a concurrent reload can never mix two
    rule sets inside a single calculation.
    """

    def __init__(self, rules_store):
        self.rules_store = rules_store

    @property
    def config(self) -> RulesConfig:
        return self.rules_store.current()

    def calculate(self, items: Iterable[LineItem], customer_type: Optional[CustomerTier] = None) -> TotalsResult:
        return calculate_totals(items, customer_type, self.rules_store.current())
