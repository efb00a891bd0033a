"""
Application state shared by the API routers and the UI.

Everything is wired once per process: settings -> rules store -> engine ->
services. Routers reach it through request.app.state.rulequote.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from ..config.settings import Settings, get_settings
from ..engine import PricingEngine, RulesConfig
from ..rules import RulesStore, load_rules_config
from ..services import DocumentRenderer, PdfJobService, QuoteService


@dataclass
class AppState:
    settings: Settings
    rules_store: RulesStore
    engine: PricingEngine
    quotes: QuoteService
    renderer: DocumentRenderer
    pdf_jobs: PdfJobService


def make_rules_loader(settings: Settings):
    """Loader closure used at start-up and for every reload."""
    def load() -> RulesConfig:
        return load_rules_config(
            settings.rules_csv,
            discounts_enabled=settings.discounts_enabled,
            currency=settings.currency,
            default_valid_days=settings.default_valid_days,
        )
    return load


def build_state(settings: Optional[Settings] = None, rules_store: Optional[RulesStore] = None) -> AppState:
    settings = settings or get_settings()
    rules_store = rules_store or RulesStore.from_loader(make_rules_loader(settings))
    engine = PricingEngine(rules_store)
    quotes = QuoteService(engine)
    renderer = DocumentRenderer(settings.templates_dir, currency=rules_store.current().currency)
    pdf_jobs = PdfJobService(quotes, renderer, settings.output_dir)
    return AppState(
        settings=settings,
        rules_store=rules_store,
        engine=engine,
        quotes=quotes,
        renderer=renderer,
        pdf_jobs=pdf_jobs,
    )


def get_state(request: Request) -> AppState:
    return request.app.state.rulequote
