"""Engine subpackage - core pricing logic."""
from .pricing_engine import (
    MAX_QUANTITY, MAX_UNIT_PRICE, PricingEngine, calculate_totals, quantize_money,
)
from .models import CustomerTier, DiscountRule, InvalidInput, LineItem, RulesConfig, TotalsResult

__all__ = [
    'MAX_QUANTITY', 'MAX_UNIT_PRICE', 'PricingEngine', 'calculate_totals', 'quantize_money',
    'CustomerTier', 'DiscountRule', 'InvalidInput', 'LineItem', 'RulesConfig', 'TotalsResult',
]
