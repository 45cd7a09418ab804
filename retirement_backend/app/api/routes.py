"""HTTP routes for the Flask API."""

import logging
import sqlite3
from datetime import datetime
from http import HTTPStatus
from itertools import chain
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from retirement_backend.config import Settings
from retirement_backend.core.expenses import summarize_month
from retirement_backend.core.ping import get_ping_message, get_version
from retirement_backend.core.projection import project_cached, series_bounds
from retirement_backend.core.summary import summarize
from retirement_backend.database import fetch_latest_parameters, save_parameters
from retirement_backend.schemas.expenses import ExpenseRequest
from retirement_backend.schemas.ping import PingResponse
from retirement_backend.schemas.projection import (
    Bounds,
    ProjectionRequest,
    ProjectionResponse,
    whole_units,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _settings() -> Settings:
    return current_app.config["SETTINGS"]


def default_request(current_year: int) -> ProjectionRequest:
    """Documented defaults served when no parameters are stored."""
    return ProjectionRequest(
        currentYear=current_year,
        monthlyDeposit=300.0,
        depositGrowthRate=1.0,
        marketRate=6.1,
        retirementStartYear=max(2065, current_year),
        retirementGrowthRate=2.0,
        retirementDuration=20,
        initialCapital=0.0,
    )


@api_bp.errorhandler(ValidationError)
def _handle_validation_error(exc: ValidationError):
    """Convert Pydantic validation errors into JSON responses."""
    logger.warning("rejected payload: %d validation error(s)", exc.error_count())
    return jsonify({"detail": exc.errors(include_url=False, include_context=False)}), HTTPStatus.BAD_REQUEST


@api_bp.get("/ping")
def ping() -> Any:
    """Health-check endpoint."""
    response = PingResponse(message=get_ping_message(), version=get_version())
    return jsonify(response.model_dump())


@api_bp.post("/projection")
def projection() -> Any:
    """Chart rows plus the expected monthly pension for one parameter set."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = ProjectionRequest.model_validate(raw_payload)
    params = payload.to_parameters(horizon_years=_settings().horizon_years)

    series = project_cached(params)
    bounds = series_bounds(
        chain.from_iterable(
            (point.invested_capital, point.wealth, point.remaining_pension)
            for point in series.points
        )
    )

    response = ProjectionResponse(
        rows=series.chart_rows(),
        expectedMonthlyPension=whole_units(series.expected_monthly_pension),
        retirementWealth=whole_units(series.retirement_wealth),
        bounds=Bounds(min=bounds[0], max=bounds[1]) if bounds else None,
    )
    return jsonify(response.model_dump())


@api_bp.get("/parameters")
def get_parameters() -> Any:
    """Last saved parameters, or the defaults when none can be loaded."""
    try:
        params = fetch_latest_parameters(_settings().db_path)
    except (sqlite3.Error, ValueError) as exc:
        logger.warning("loading saved parameters failed, serving defaults: %s", exc)
        params = None

    if params is None:
        payload = default_request(datetime.utcnow().year)
    else:
        payload = ProjectionRequest.from_parameters(params)
    return jsonify(payload.model_dump())


@api_bp.put("/parameters")
def put_parameters() -> Any:
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = ProjectionRequest.model_validate(raw_payload)
    params = payload.to_parameters(horizon_years=_settings().horizon_years)
    try:
        save_parameters(params, _settings().db_path)
    except sqlite3.Error as exc:
        logger.error("saving parameters failed: %s", exc)
        return jsonify({"detail": "parameters could not be saved"}), HTTPStatus.INTERNAL_SERVER_ERROR
    return jsonify(ProjectionRequest.from_parameters(params).model_dump()), HTTPStatus.OK


@api_bp.post("/expenses/summary")
def expense_summary() -> Any:
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = ExpenseRequest.model_validate(raw_payload)
    summary = summarize_month(payload.transactions, payload.month)
    return jsonify(summary.model_dump())


@api_bp.post("/expenses/insight")
def expense_insight() -> Any:
    """AI commentary for a month of spending, static text when the service fails."""
    raw_payload: Dict[str, Any] = request.get_json(force=True, silent=False)
    payload = ExpenseRequest.model_validate(raw_payload)
    summary = summarize_month(payload.transactions, payload.month)
    text = summarize(summary, payload.transactions, settings=_settings())
    return jsonify({"generatedText": text})
