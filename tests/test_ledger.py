"""Tests for the ledger API client."""
from unittest.mock import patch
import httpx
import pytest
from backoffice.services import ledger_service
from backoffice.services.ledger_service import LedgerError


def test_record_adjustment_sends_payload(app):
    with app.app_context():
        with patch("backoffice.services.ledger_service.httpx.request") as request:
            request.return_value = httpx.Response(200, json={"data": {"id": 1}})
            result = ledger_service.record_adjustment(
                location_id=2, variant_id=3, reason="fact_inventory", change_value=-4
            )

    assert result == {"id": 1}
    method, url = request.call_args.args
    assert method == "PUT"
    assert url == "http://ledger.test/admin/inventory-levels"
    assert request.call_args.kwargs["json"] == {
        "location_id": 2,
        "variant_id": 3,
        "reason": "fact_inventory",
        "change_value": -4,
        "reference_document_id": 0,
    }
    assert request.call_args.kwargs["headers"] == {"Authorization": "Bearer test-token"}


def test_empty_response_body(app):
    with app.app_context():
        with patch("backoffice.services.ledger_service.httpx.request") as request:
            request.return_value = httpx.Response(204)
            assert ledger_service.record_adjustment(1, 1, "create_product", 5) is None



def test_plain_text_success_body(app):
    with app.app_context():
        with patch("backoffice.services.ledger_service.httpx.request") as request:
            request.return_value = httpx.Response(200, text="OK")
            assert ledger_service.record_adjustment(1, 1, "fact_inventory", 5) is None

def test_error_status_raises(app):
    with app.app_context():
        with patch("backoffice.services.ledger_service.httpx.request") as request:
            request.return_value = httpx.Response(500, text="boom")
            with pytest.raises(LedgerError):
                ledger_service.record_adjustment(1, 1, "fact_inventory", 5)


def test_connection_error_raises(app):
    with app.app_context():
        with patch("backoffice.services.ledger_service.httpx.request") as request:
            request.side_effect = httpx.ConnectError("refused")
            with pytest.raises(LedgerError):
                ledger_service.record_adjustment(1, 1, "fact_inventory", 5)


def test_missing_url_raises(app, monkeypatch):
    with app.app_context():
        monkeypatch.setitem(app.config, "LEDGER_API_URL", "")
        with pytest.raises(LedgerError):
            ledger_service.record_adjustment(1, 1, "fact_inventory", 5)
