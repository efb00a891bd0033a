import dataclasses

import pytest
from fastapi.testclient import TestClient

from rulequote.api.main import create_app
from rulequote.api.state import build_state
from rulequote.config.settings import Settings
from rulequote.engine import PricingEngine
from rulequote.rules import RulesStore, rules_config_from_dict
from rulequote.services import DocumentRenderer, PdfJobService, QuoteService


TIERS = {
    "standard": {"discount_threshold": "500", "discount_percentage": "0.05", "tax_rate": "0.10"},
    "premium": {"discount_threshold": "100", "discount_percentage": "0.10", "tax_rate": "0.08"},
}


@pytest.fixture
def config():
    return rules_config_from_dict(TIERS)


@pytest.fixture
def rules_store(config):
    return RulesStore(config, loader=lambda: rules_config_from_dict(TIERS))


@pytest.fixture
def engine(rules_store):
    return PricingEngine(rules_store)


@pytest.fixture
def quote_service(engine):
    return QuoteService(engine)


@pytest.fixture
def renderer():
    return DocumentRenderer(currency="USD")


@pytest.fixture
def pdf_jobs(quote_service, renderer, tmp_path):
    return PdfJobService(quote_service, renderer, tmp_path / "documents")


@pytest.fixture
def settings(tmp_path):
    return dataclasses.replace(Settings.load(), output_dir=tmp_path / "documents")


@pytest.fixture
def client(settings):
    app = create_app(build_state(settings))
    with TestClient(app) as c:
        yield c
