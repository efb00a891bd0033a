"""
Document rendering and document jobs.
"""
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from rulequote.engine import LineItem
from rulequote.rules import rules_config_from_dict
from rulequote.services import (
    DocumentRenderer, JobStatus, PdfJobNotFoundError, QuoteNotFoundError, render_quote_html,
)

from conftest import TIERS


@pytest.fixture
def quote(quote_service):
    return quote_service.create_quote(
        customer_name="Ada <Lovelace>",
        customer_email="ada@example.com",
        customer_type="premium",
        items=[
            LineItem(description="Bulk", quantity=60, unit_price=Decimal("10.00")),
        ],
        notes="Deliver on Monday",
        valid_until=date(2030, 1, 31),
    )


def test_render_shows_stored_totals(quote, renderer):
    html = renderer.render_quote_html(quote, rendered_on=date(2026, 10, 19))

    assert f"Quote #{quote.id}" in html
    assert "Date: 2026-10-19" in html
    assert "Subtotal: $600.00" in html
    assert "Discount: -$60.00" in html
    assert "Tax: $43.20" in html
    assert "Total: $583.20" in html
    assert "Valid until: 2030-01-31" in html
    assert "Deliver on Monday" in html


def test_render_line_totals(quote, renderer):
    html = renderer.render_quote_html(quote)
    assert "<td>$10.00</td>" in html
    assert "<td>$600.00</td>" in html


def test_render_escapes_customer_input(quote, renderer):
    html = renderer.render_quote_html(quote)
    assert "Ada &lt;Lovelace&gt;" in html
    assert "Ada <Lovelace>" not in html


def test_render_reuses_totals_after_rules_change(quote, quote_service, rules_store, renderer):
    """A document matches what was quoted even if the rules changed since."""
    rules_store.replace(rules_config_from_dict(TIERS, discounts_enabled=False))

    html = renderer.render_quote_html(quote_service.get_quote(quote.id))

    assert "Total: $583.20" in html


def test_no_discount_row_without_discount(quote_service, renderer):
    small = quote_service.create_quote(
        customer_name="Grace",
        customer_email="grace@example.com",
        items=[LineItem(description="Widget", quantity=3, unit_price=Decimal("10.00"))],
    )
    html = render_quote_html(small)
    assert "Discount:" not in html
    assert "Total: $33.00" in html


def test_other_currency_symbol(quote):
    html = DocumentRenderer(currency="EUR").render_quote_html(quote)
    assert "Total: €583.20" in html


def test_job_lifecycle(quote, pdf_jobs):
    job = pdf_jobs.create_job(quote.id)
    assert job.status == JobStatus.PENDING
    assert job.file_path is None

    done = pdf_jobs.process_job(job.job_id)

    assert done.status == JobStatus.COMPLETED
    assert done.completed_at is not None
    path = Path(done.file_path)
    assert path.exists()
    assert path.name == f"quote-{quote.id}-{job.job_id}.html"
    assert "Total: $583.20" in path.read_text(encoding="utf-8")


def test_job_runs_once(quote, pdf_jobs):
    job = pdf_jobs.create_job(quote.id)
    first = pdf_jobs.process_job(job.job_id)
    completed_at = first.completed_at

    again = pdf_jobs.process_job(job.job_id)

    assert again.status == JobStatus.COMPLETED
    assert again.completed_at == completed_at


def test_job_for_unknown_quote(pdf_jobs):
    with pytest.raises(QuoteNotFoundError):
        pdf_jobs.create_job("nope")


def test_job_fails_when_quote_disappears(quote, quote_service, pdf_jobs):
    job = pdf_jobs.create_job(quote.id)
    quote_service.delete_quote(quote.id)

    result = pdf_jobs.process_job(job.job_id)

    assert result.status == JobStatus.FAILED
    assert "not found" in result.error
    assert result.file_path is None


def test_unknown_job(pdf_jobs):
    with pytest.raises(PdfJobNotFoundError):
        pdf_jobs.get_job("job-missing")


def test_list_jobs_for_quote(quote, quote_service, pdf_jobs):
    other = quote_service.create_quote(
        customer_name="Grace",
        customer_email="grace@example.com",
        items=[LineItem(description="Widget", quantity=1, unit_price=Decimal("1.00"))],
    )
    first = pdf_jobs.create_job(quote.id)
    pdf_jobs.create_job(other.id)

    assert [j.job_id for j in pdf_jobs.list_jobs_for_quote(quote.id)] == [first.job_id]
    assert len(pdf_jobs.list_jobs()) == 2
