"""
Document Service - renders a quote to a standalone HTML document.

Totals shown are the ones stored on the quote when it was priced; the
engine is not re-run here, so a document always matches what was quoted
even if the rules table has changed since.
"""
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..config.settings import get_package_root
from ..engine import quantize_money
from .quote_service import Quote


DEFAULT_TEMPLATES_DIR = get_package_root() / 'templates'

CURRENCY_SYMBOLS = {'USD': '$', 'EUR': '€', 'GBP': '£'}


def make_money_filter(currency: str):
    symbol = CURRENCY_SYMBOLS.get(currency.upper())

    def money(value) -> str:
        amount = quantize_money(Decimal(str(value)))
        if symbol:
            return f"{symbol}{amount:,.2f}"
        return f"{amount:,.2f} {currency}"

    return money


class DocumentRenderer:
    """Jinja2-backed quote renderer."""

    def __init__(self, templates_dir: Optional[Path] = None, currency: str = 'USD'):
        self.templates_dir = Path(templates_dir or DEFAULT_TEMPLATES_DIR)
        self.currency = currency
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(['html', 'xml']),
        )
        self.env.filters['money'] = make_money_filter(currency)

    def render_quote_html(self, quote: Quote, rendered_on: Optional[date] = None) -> str:
        template = self.env.get_template('quote.html')
        lines = [
            {
                "description": item.description,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "line_total": quantize_money(item.extended_price),
            }
            for item in quote.items
        ]
        return template.render(
            quote=quote,
            lines=lines,
            currency=self.currency,
            rendered_on=rendered_on or date.today(),
        ).strip()


def render_quote_html(quote: Quote, currency: str = 'USD', rendered_on: Optional[date] = None) -> str:
    """Render with the bundled template."""
    return DocumentRenderer(currency=currency).render_quote_html(quote, rendered_on=rendered_on)
