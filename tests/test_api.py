"""
HTTP API tests using FastAPI's TestClient.
"""
import dataclasses
import shutil
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from rulequote.api import main as api_main
from rulequote.api.main import create_app
from rulequote.api.state import build_state


QUOTE = {
    "customer_name": "Ada Lovelace",
    "customer_email": "ada@example.com",
    "customer_type": "standard",
    "items": [{"description": "Bulk", "quantity": 60, "unit_price": "10.00"}],
}


def money(value) -> Decimal:
    return Decimal(str(value))


def create_quote(client, **overrides):
    response = client.post("/api/quotes", json={**QUOTE, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


def test_root_and_health(client):
    assert client.get("/").json()["endpoints"]["quotes"] == "/api/quotes"
    health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"


def test_create_quote_returns_stored_totals(client):
    body = create_quote(client)

    assert body["id"]
    assert body["customer_type"] == "standard"
    assert money(body["subtotal"]) == Decimal("600.00")
    assert money(body["discount_amount"]) == Decimal("30.00")
    assert money(body["tax_amount"]) == Decimal("57.00")
    assert money(body["total"]) == Decimal("627.00")
    assert body["valid_until"]
    assert "explanation_lines" not in body


def test_customer_type_defaults_to_standard(client):
    payload = {k: v for k, v in QUOTE.items() if k != "customer_type"}
    response = client.post("/api/quotes", json=payload)
    assert response.status_code == 201
    assert response.json()["customer_type"] == "standard"


def test_create_quote_validation(client):
    bad_payloads = [
        {**QUOTE, "customer_name": ""},
        {**QUOTE, "customer_email": "not-an-email"},
        {**QUOTE, "customer_type": "gold"},
        {**QUOTE, "items": []},
        {**QUOTE, "items": [{"description": "", "quantity": 1, "unit_price": "1"}]},
        {**QUOTE, "items": [{"description": "X", "quantity": 0, "unit_price": "1"}]},
        {**QUOTE, "items": [{"description": "X", "quantity": 1.5, "unit_price": "1"}]},
        {**QUOTE, "items": [{"description": "X", "quantity": 1, "unit_price": "-1"}]},
    ]
    for payload in bad_payloads:
        response = client.post("/api/quotes", json=payload)
        assert response.status_code == 422, payload
    assert client.get("/api/quotes").json()["quotes"] == []


def test_get_list_update_delete(client):
    created = create_quote(client)
    quote_id = created["id"]

    assert client.get(f"/api/quotes/{quote_id}").json()["id"] == quote_id
    assert [q["id"] for q in client.get("/api/quotes").json()["quotes"]] == [quote_id]

    updated = client.put(f"/api/quotes/{quote_id}", json={"customer_type": "premium"})
    assert updated.status_code == 200
    assert money(updated.json()["total"]) == Decimal("583.20")

    notes = client.put(f"/api/quotes/{quote_id}", json={"notes": "Call first"})
    assert notes.json()["notes"] == "Call first"
    assert money(notes.json()["total"]) == Decimal("583.20")

    assert client.delete(f"/api/quotes/{quote_id}").status_code == 204
    assert client.get(f"/api/quotes/{quote_id}").status_code == 404


def test_update_rejects_null_for_required_fields(client):
    quote_id = create_quote(client)["id"]
    response = client.put(f"/api/quotes/{quote_id}", json={"customer_name": None})
    assert response.status_code == 422


def test_unknown_quote_is_404(client):
    assert client.get("/api/quotes/nope").status_code == 404
    assert client.put("/api/quotes/nope", json={"notes": "x"}).status_code == 404
    assert client.delete("/api/quotes/nope").status_code == 404


def test_preview_includes_explanation(client):
    response = client.post("/api/quotes/preview", json={
        "customer_type": "premium",
        "items": QUOTE["items"],
    })
    body = response.json()

    assert response.status_code == 200
    assert money(body["total"]) == Decimal("583.20")
    assert money(body["discount_percentage"]) == Decimal("0.10")
    assert body["explanation_lines"][-1] == "Total: $583.20"
    assert client.get("/api/quotes").json()["quotes"] == []


def test_preview_of_empty_items(client):
    body = client.post("/api/quotes/preview", json={"items": []}).json()
    assert money(body["total"]) == Decimal("0")
    assert body["item_count"] == 0


def test_pdf_job_runs_and_downloads(client):
    quote_id = create_quote(client)["id"]

    response = client.post("/api/pdf-jobs", json={"quote_id": quote_id})
    assert response.status_code == 201
    job = response.json()
    assert job["status"] == "pending"

    status = client.get(f"/api/pdf-jobs/{job['job_id']}").json()
    assert status["status"] == "completed"
    assert status["file_path"].endswith(".html")

    download = client.get(f"/api/pdf-jobs/{job['job_id']}/download")
    assert download.status_code == 200
    assert "text/html" in download.headers["content-type"]
    assert "Total: $627.00" in download.text

    jobs = client.get(f"/api/pdf-jobs/quote/{quote_id}").json()["jobs"]
    assert [j["job_id"] for j in jobs] == [job["job_id"]]
    assert len(client.get("/api/pdf-jobs").json()["jobs"]) == 1


def test_pdf_job_for_unknown_quote(client):
    assert client.post("/api/pdf-jobs", json={"quote_id": "nope"}).status_code == 404
    assert client.post("/api/pdf-jobs", json={"quote_id": ""}).status_code == 422


def test_unknown_pdf_job(client):
    assert client.get("/api/pdf-jobs/job-missing").status_code == 404
    assert client.get("/api/pdf-jobs/job-missing/download").status_code == 404


def test_rules_endpoint(client):
    body = client.get("/api/rules").json()
    assert body["tiers"]["standard"]["discount_threshold"] == "500"
    assert body["tiers"]["premium"]["tax_rate"] == "0.08"
    assert body["discounts_enabled"] is True


def test_rules_reload(client):
    response = client.post("/api/rules/reload")
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_out_of_range_items_are_rejected(client):
    huge_price = [{"description": "Big", "quantity": 1, "unit_price": 1e27}]
    huge_quantity = [{"description": "Many", "quantity": 1_000_001, "unit_price": "1.00"}]

    for items in (huge_price, huge_quantity):
        assert client.post("/api/quotes", json={**QUOTE, "items": items}).status_code == 422
        assert client.post("/api/quotes/preview", json={"items": items}).status_code == 422
    assert client.get("/api/quotes").json()["quotes"] == []


def test_subtotal_over_limit_is_a_400(client):
    line = {"description": "Max", "quantity": 1_000_000, "unit_price": "1000000000"}
    response = client.post("/api/quotes", json={**QUOTE, "items": [line, line]})

    assert response.status_code == 400
    assert "Subtotal must be at most" in response.json()["detail"]
    assert client.get("/api/quotes").json()["quotes"] == []


@pytest.fixture
def rules_file(tmp_path, settings):
    path = tmp_path / "tier_rules.csv"
    shutil.copyfile(settings.rules_csv, path)
    return path


@pytest.fixture
def reloadable_client(settings, rules_file):
    app = create_app(build_state(dataclasses.replace(settings, rules_csv=rules_file)))
    with TestClient(app) as c:
        yield c


@pytest.mark.parametrize("body", [
    "",
    "tier,discount_threshold\nstandard,500\n",
    "tier,discount_threshold,discount_percentage,tax_rate\nstandard,500,1.5,0.10\npremium,100,0.10,0.08\n",
])
def test_reload_of_bad_table_keeps_rules(reloadable_client, rules_file, body):
    before = reloadable_client.get("/api/rules").json()
    rules_file.write_text(body, encoding="utf-8")

    response = reloadable_client.post("/api/rules/reload")

    assert response.status_code == 400
    assert response.json()["detail"]
    assert reloadable_client.get("/api/rules").json() == before
    preview = reloadable_client.post("/api/quotes/preview", json={"items": QUOTE["items"]})
    assert money(preview.json()["total"]) == Decimal("627.00")


def test_reload_picks_up_edited_table(reloadable_client, rules_file):
    rules_file.write_text(
        "tier,discount_threshold,discount_percentage,tax_rate\n"
        "standard,1000,0.05,0.20\n"
        "premium,100,0.10,0.08\n",
        encoding="utf-8",
    )

    response = reloadable_client.post("/api/rules/reload")

    assert response.status_code == 200
    assert response.json()["rules"]["tiers"]["standard"]["tax_rate"] == "0.20"
    preview = reloadable_client.post("/api/quotes/preview", json={"items": QUOTE["items"]})
    assert money(preview.json()["total"]) == Decimal("720.00")


def test_importing_api_module_builds_no_app():
    assert not hasattr(api_main, "app")
    assert callable(api_main.create_app)
