"""
Rulequote Package

Quote management with a rules-based pricing engine: tier discounts, tax and
totals, plus quote storage and rendered quote documents.
"""

__version__ = "1.0.0"
