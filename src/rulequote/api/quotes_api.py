"""
Quotes API - FastAPI router for quote CRUD and totals preview.
"""
from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.encoders import jsonable_encoder

from ..services import QuoteNotFoundError
from .schemas import QuoteCreate, QuoteUpdate, TotalsPreviewRequest
from .state import AppState, get_state

router = APIRouter(prefix="/api/quotes", tags=["quotes"])

# Fields a client may clear by sending null
NULLABLE_FIELDS = {'notes', 'valid_until'}


@router.get("")
async def list_quotes(state: AppState = Depends(get_state)):
    """List all quotes."""
    return jsonable_encoder({"quotes": [q.to_dict() for q in state.quotes.list_quotes()]})


@router.post("/preview")
async def preview_totals(request: TotalsPreviewRequest, state: AppState = Depends(get_state)):
    """Price items with the current rules without saving anything."""
    totals = state.quotes.preview_totals(
        [item.to_line_item() for item in request.items],
        request.customer_type,
    )
    return jsonable_encoder(totals.to_dict())


@router.get("/{quote_id}")
async def get_quote(quote_id: str, state: AppState = Depends(get_state)):
    """Get a single quote by ID."""
    try:
        quote = state.quotes.get_quote(quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return jsonable_encoder(quote.to_dict())


@router.post("", status_code=201)
async def create_quote(quote_data: QuoteCreate, state: AppState = Depends(get_state)):
    """Create a new quote; totals are computed and stored."""
    quote = state.quotes.create_quote(
        customer_name=quote_data.customer_name,
        customer_email=quote_data.customer_email,
        customer_type=quote_data.customer_type,
        items=[item.to_line_item() for item in quote_data.items],
        notes=quote_data.notes,
        valid_until=quote_data.valid_until,
    )
    return jsonable_encoder(quote.to_dict())


@router.put("/{quote_id}")
async def update_quote(quote_id: str, updates: QuoteUpdate, state: AppState = Depends(get_state)):
    """Update an existing quote."""
    changes = {}
    for key in updates.model_fields_set:
        value = getattr(updates, key)
        if value is None and key not in NULLABLE_FIELDS:
            raise HTTPException(status_code=422, detail=f"'{key}' cannot be null")
        changes[key] = value
    if 'items' in changes:
        changes['items'] = [item.to_line_item() for item in updates.items]

    try:
        quote = state.quotes.update_quote(quote_id, changes)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return jsonable_encoder(quote.to_dict())


@router.delete("/{quote_id}", status_code=204)
async def delete_quote(quote_id: str, state: AppState = Depends(get_state)):
    """Delete a quote."""
    try:
        state.quotes.delete_quote(quote_id)
    except QuoteNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)
