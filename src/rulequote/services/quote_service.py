"""
Quote Service - create/read/update/delete for quotes.

Totals come from the pricing engine and are stored on the quote at create
time and whenever items or customer type change. Explanation lines are not
stored; ask the engine for a preview when they are needed.
"""
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import structlog

from ..engine import CustomerTier, LineItem, PricingEngine, TotalsResult, calculate_totals


logger = structlog.get_logger(__name__)


class QuoteNotFoundError(ValueError):
    """Raised when a quote ID is not in the repository."""


@dataclass
class Quote:
    """A customer quote with its stored totals."""
    id: str
    customer_name: str
    customer_email: str
    customer_type: CustomerTier
    items: list[LineItem]
    created_at: datetime
    updated_at: datetime
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    notes: Optional[str] = None
    valid_until: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_type": self.customer_type.value,
            "items": [
                {
                    "description": item.description,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                }
                for item in self.items
            ],
            "notes": self.notes,
            "valid_until": self.valid_until,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "subtotal": self.subtotal,
            "discount_amount": self.discount_amount,
            "tax_amount": self.tax_amount,
            "total": self.total,
        }


class QuoteService:
    """In-memory quote repository backed by the pricing engine."""

    UPDATABLE_FIELDS = {
        'customer_name', 'customer_email', 'customer_type', 'items', 'notes', 'valid_until'
    }

    def __init__(self, engine: PricingEngine):
        self.engine = engine
        self._quotes: dict[str, Quote] = {}
        self._lock = threading.Lock()

    def preview_totals(self, items: list[LineItem], customer_type: Optional[CustomerTier] = None) -> TotalsResult:
        """Price items without storing anything."""
        return self.engine.calculate(items, customer_type)

    def create_quote(
        self,
        customer_name: str,
        customer_email: str,
        items: list[LineItem],
        customer_type: Optional[CustomerTier] = None,
        notes: Optional[str] = None,
        valid_until: Optional[date] = None,
    ) -> Quote:
        """Create a quote, computing and storing its totals."""
        config = self.engine.config
        tier = CustomerTier.parse(customer_type)
        totals = calculate_totals(items, tier, config)

        now = datetime.now(timezone.utc)
        if valid_until is None:
            valid_until = now.date() + timedelta(days=config.default_valid_days)

        quote = Quote(
            id=uuid.uuid4().hex,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_type=tier,
            items=list(items),
            created_at=now,
            updated_at=now,
            notes=notes,
            valid_until=valid_until,
            **totals.stored_totals(),
        )

        with self._lock:
            self._quotes[quote.id] = quote

        logger.info(
            "quote_created",
            quote_id=quote.id,
            customer_type=tier.value,
            item_count=totals.item_count,
            total=str(quote.total),
        )
        return quote

    def get_quote(self, quote_id: str) -> Quote:
        quote = self._quotes.get(quote_id)
        if quote is None:
            raise QuoteNotFoundError(f"Quote '{quote_id}' not found")
        return quote

    def list_quotes(self) -> list[Quote]:
        """All quotes, oldest first."""
        with self._lock:
            quotes = list(self._quotes.values())
        return sorted(quotes, key=lambda q: q.created_at)

    def update_quote(self, quote_id: str, changes: dict) -> Quote:
        """
        Apply a partial update.

        Totals are recomputed only when items or customer_type change, so
        edits to contact details or notes keep the totals that were quoted.
        """
        unknown = set(changes) - self.UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        with self._lock:
            current = self.get_quote(quote_id)
            updates = dict(changes)

            if 'customer_type' in updates:
                updates['customer_type'] = CustomerTier.parse(updates['customer_type'])
            if 'items' in updates:
                updates['items'] = list(updates['items'])

            repriced = 'items' in updates or 'customer_type' in updates
            if repriced:
                totals = self.engine.calculate(
                    updates.get('items', current.items),
                    updates.get('customer_type', current.customer_type),
                )
                updates.update(totals.stored_totals())

            updated = replace(current, updated_at=datetime.now(timezone.utc), **updates)
            self._quotes[quote_id] = updated

        logger.info(
            "quote_updated",
            quote_id=quote_id,
            fields=sorted(changes),
            repriced=repriced,
            total=str(updated.total),
        )
        return updated

    def delete_quote(self, quote_id: str) -> bool:
        with self._lock:
            if quote_id not in self._quotes:
                raise QuoteNotFoundError(f"Quote '{quote_id}' not found")
            del self._quotes[quote_id]
        logger.info("quote_deleted", quote_id=quote_id)
        return True
