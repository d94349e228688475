from __future__ import annotations

import json
import logging
import math
from math import isclose

import pytest
from flask.testing import FlaskClient

from cashflow.app import create_app
from cashflow.domain.scenario import LOW_RETURN_WARNING


def years_payload() -> dict:
    return {
        "mode": "years",
        "years": 30,
        "firstExpense": 100000,
        "inflationRate": 0.03,
        "nominalRate": 0.07,
        "timing": "end",
    }


def test_years_scenario_returns_records(client: FlaskClient):
    resp = client.post("/api/calc/scenario", json=years_payload())

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["mode"] == "years"
    assert len(body["records"]) == 30
    assert [row["year"] for row in body["records"]] == list(range(1, 31))
    assert set(body["records"][0]) == {"year", "expense", "growth", "endPrincipal"}
    assert isclose(body["finalBalance"], 0.0, abs_tol=1.0)
    assert body["requiredPrincipal"] > 0
    assert body["warnings"] == []


def test_principal_scenario_warns_on_low_return(client: FlaskClient):
    payload = {
        "mode": "principal",
        "initialPrincipal": 1000000,
        "firstExpense": 100000,
        "inflationRate": 0.03,
        "nominalRate": 0.02,
    }

    resp = client.post("/api/calc/scenario", json=payload)

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["yearsSupported"] == len(body["records"])
    assert body["records"][-1]["endPrincipal"] <= 0
    assert LOW_RETURN_WARNING in body["warnings"]


def test_max_years_comes_from_config():
    app = create_app({"TESTING": True, "MAX_YEARS": 10})
    payload = {
        "mode": "principal",
        "initialPrincipal": 1000000,
        "firstExpense": 1000,
        "inflationRate": 0.0,
        "nominalRate": 0.1,
    }

    with app.test_client() as client:
        resp = client.post("/api/calc/scenario", json=payload)

    assert resp.status_code == 200
    assert resp.get_json()["yearsSupported"] == 10


def test_unknown_mode_returns_422(client: FlaskClient):
    resp = client.post("/api/calc/scenario", json={"mode": "lottery"})

    assert resp.status_code == 422
    assert "detail" in resp.get_json()


def test_non_finite_rate_returns_422(client: FlaskClient):
    resp = client.post(
        "/api/calc/scenario",
        data='{"mode": "years", "nominalRate": NaN}',
        content_type="application/json",
    )

    assert resp.status_code == 422


def test_malformed_json_returns_400(client: FlaskClient):
    resp = client.post("/api/calc/scenario", data="{not json", content_type="application/json")

    assert resp.status_code == 400


def test_principal_endpoint(client: FlaskClient):
    resp = client.post(
        "/api/calc/principal",
        json={"firstWithdrawal": 1000, "nominalRate": 0.05, "growthRate": 0.05, "years": 10},
    )

    assert resp.status_code == 200
    assert isclose(resp.get_json()["requiredPrincipal"], 1000 * 10 / 1.05)


def test_principal_endpoint_zero_years(client: FlaskClient):
    resp = client.post(
        "/api/calc/principal",
        json={"firstWithdrawal": 1000, "nominalRate": 0.05, "years": 0, "timing": "begin"},
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"requiredPrincipal": 0.0}


def test_principal_endpoint_rejects_negative_withdrawal(client: FlaskClient):
    resp = client.post(
        "/api/calc/principal",
        json={"firstWithdrawal": -1, "nominalRate": 0.05, "years": 10},
    )

    assert resp.status_code == 422


def test_accumulation_endpoint(client: FlaskClient):
    resp = client.post(
        "/api/calc/accumulation",
        json={"years": 1, "initialPrincipal": 0, "monthlyContribution": 100, "nominalRate": 0},
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["finalBalance"] == 1200.0
    assert body["records"] == [{"year": 1, "expense": 0.0, "growth": 1200.0, "endPrincipal": 1200.0}]


def test_principal_endpoint_with_overflowing_ratio(client: FlaskClient):
    resp = client.post(
        "/api/calc/principal",
        json={"firstWithdrawal": 1000, "nominalRate": -0.9, "growthRate": 0.5, "years": 1000},
    )

    assert resp.status_code == 200
    value = resp.get_json()["requiredPrincipal"]
    assert math.isfinite(value) and value > 0


def test_principal_scenario_with_zero_expense_and_huge_inflation(client: FlaskClient):
    payload = {"mode": "principal", "firstExpense": 0, "inflationRate": 100}

    resp = client.post("/api/calc/scenario", json=payload)

    assert resp.status_code == 200
    assert resp.get_json()["yearsSupported"] == 200


def test_non_finite_results_serialize_as_null(client: FlaskClient):
    resp = client.post(
        "/api/calc/accumulation",
        json={"years": 1000, "initialPrincipal": 1e6, "nominalRate": 12},
    )

    assert resp.status_code == 200
    text = resp.get_data(as_text=True)
    assert "Infinity" not in text and "NaN" not in text
    body = json.loads(text, parse_constant=lambda token: pytest.fail(f"invalid JSON token {token}"))
    assert body["finalBalance"] is None
    assert body["records"][0]["endPrincipal"] is not None


def test_validation_error_body_is_strict_json(client: FlaskClient):
    resp = client.post(
        "/api/calc/scenario",
        data='{"mode": "years", "nominalRate": Infinity}',
        content_type="application/json",
    )

    assert resp.status_code == 422
    assert "Infinity" not in resp.get_data(as_text=True)


def test_unexpected_errors_are_logged_and_return_500(client: FlaskClient, monkeypatch, caplog):
    def explode(*args, **kwargs):
        raise RuntimeError("engine failure")

    monkeypatch.setattr("cashflow.app.api.routes.run_scenario", explode)
    caplog.set_level(logging.ERROR, logger="cashflow.app.api.routes")

    resp = client.post("/api/calc/scenario", json=years_payload())

    assert resp.status_code == 500
    assert resp.get_json() == {"detail": "internal server error"}
    assert "unhandled error on /api/calc/scenario" in caplog.text
    assert "engine failure" in caplog.text
