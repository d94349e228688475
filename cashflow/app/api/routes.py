"""HTTP routes for the Flask API."""

import logging
from http import HTTPStatus
from typing import Any, Dict

from flask import Blueprint, Response, current_app, jsonify, request
from pydantic import BaseModel, ValidationError
from werkzeug.exceptions import HTTPException

from cashflow.core.annuity import required_principal
from cashflow.core.export import build_csv, records_to_rows
from cashflow.core.projection import simulate_compound
from cashflow.domain.scenario import run_scenario, scenario_adapter
from cashflow.schemas.projection import (
    AccumulationRequest,
    AccumulationResponse,
    ExportRequest,
    PingResponse,
    PrincipalRequest,
    PrincipalResponse,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    logger.info("rejected request to %s: %d validation error(s)", request.path, exc.error_count())
    return jsonify({"detail": exc.errors(include_url=False, include_input=False)}), HTTPStatus.UNPROCESSABLE_ENTITY


@api_bp.errorhandler(Exception)
def _handle_unexpected_error(exc: Exception):
    """Log anything the routes did not anticipate and answer with a JSON 500."""
    if isinstance(exc, HTTPException):
        return exc
    logger.exception("unhandled error on %s", request.path)
    return jsonify({"detail": "internal server error"}), HTTPStatus.INTERNAL_SERVER_ERROR


def _json_response(model: BaseModel) -> Response:
    """Serialize through pydantic so non-finite floats become null rather than bare NaN/Infinity."""
    return current_app.response_class(model.model_dump_json(), mimetype="application/json")


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message="pong", maxYears=current_app.config["MAX_YEARS"])
    return jsonify(response.model_dump())


@api_bp.post("/calc/scenario")
def scenario() -> Any:
    """Run one scenario (years / principal / compound) and return its records."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = scenario_adapter.validate_python(raw_payload)
    result = run_scenario(payload, max_years=current_app.config["MAX_YEARS"])
    return _json_response(result)


@api_bp.post("/calc/principal")
def principal() -> Any:
    """Required starting principal for a growing stream of withdrawals."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = PrincipalRequest.model_validate(raw_payload)
    value = required_principal(
        payload.firstWithdrawal,
        payload.nominalRate,
        payload.growthRate,
        payload.years,
        payload.timing,
    )
    return _json_response(PrincipalResponse(requiredPrincipal=value))


@api_bp.post("/calc/accumulation")
def accumulation() -> Any:
    """Monthly-compounded savings schedule."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = AccumulationRequest.model_validate(raw_payload)
    records = simulate_compound(
        payload.years,
        payload.initialPrincipal,
        payload.monthlyContribution,
        payload.nominalRate,
    )
    response = AccumulationResponse(
        records=records,
        finalBalance=records[-1].endPrincipal if records else 0.0,
    )
    return _json_response(response)


@api_bp.post("/calc/export")
def export() -> Response:
    """Download a scenario's yearly records as CSV."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = ExportRequest.model_validate(raw_payload)
    result = run_scenario(payload.scenario, max_years=current_app.config["MAX_YEARS"])

    filename = payload.filename or current_app.config["EXPORT_FILENAME"]
    body = build_csv(records_to_rows(result.records, payload.headers))
    logger.info("exporting %d record(s) as %s", len(result.records), filename)

    return Response(
        body,
        status=HTTPStatus.OK,
        content_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
