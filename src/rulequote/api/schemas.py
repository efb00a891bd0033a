"""
Request models for the API.

These do the input validation for quotes. Per-item bounds match the
engine's; a subtotal over the engine's limit comes back as a 400.
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..engine import MAX_QUANTITY, MAX_UNIT_PRICE, CustomerTier, LineItem


EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class QuoteItemIn(BaseModel):
    """A line item as submitted by a client."""
    description: str = Field(min_length=1)
    quantity: int = Field(gt=0, le=MAX_QUANTITY)
    unit_price: Decimal = Field(ge=0, le=MAX_UNIT_PRICE)

    def to_line_item(self) -> LineItem:
        return LineItem(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
        )


class QuoteCreate(BaseModel):
    """Request model for creating a quote."""
    customer_name: str = Field(min_length=1)
    customer_email: str = Field(pattern=EMAIL_PATTERN)
    customer_type: CustomerTier = CustomerTier.STANDARD
    items: list[QuoteItemIn] = Field(min_length=1)
    notes: Optional[str] = None
    valid_until: Optional[date] = None


class QuoteUpdate(BaseModel):
    """Request model for updating a quote. Only fields sent are changed."""
    customer_name: Optional[str] = Field(default=None, min_length=1)
    customer_email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    customer_type: Optional[CustomerTier] = None
    items: Optional[list[QuoteItemIn]] = Field(default=None, min_length=1)
    notes: Optional[str] = None
    valid_until: Optional[date] = None


class TotalsPreviewRequest(BaseModel):
    """Request model for pricing items without saving a quote."""
    customer_type: CustomerTier = CustomerTier.STANDARD
    items: list[QuoteItemIn] = Field(default_factory=list)


class PdfJobCreate(BaseModel):
    """Request model for creating a document job."""
    quote_id: str = Field(min_length=1)
