"""Services subpackage - quote lifecycle, documents and document jobs."""
from .quote_service import Quote, QuoteNotFoundError, QuoteService
from .document_service import DocumentRenderer, render_quote_html
from .pdf_jobs import JobStatus, PdfJob, PdfJobNotFoundError, PdfJobService

__all__ = [
    'Quote', 'QuoteNotFoundError', 'QuoteService',
    'DocumentRenderer', 'render_quote_html',
    'JobStatus', 'PdfJob', 'PdfJobNotFoundError', 'PdfJobService',
]
