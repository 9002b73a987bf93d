"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text

from tokenauth.api.deps import json_response, timing
from tokenauth.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application and token store health information."""

    backend = current_app.config.get("TOKEN_STORE_BACKEND", "sqlalchemy")
    store_status = "ok"
    if backend == "sqlalchemy":
        try:
            db.session.execute(text("SELECT 1"))
        except Exception:  # pragma: no cover - depends on DB backend
            current_app.logger.exception("healthcheck.db_error")
            store_status = "fail"
    payload = {"status": "ok", "token_store": backend, "store": store_status}
    return json_response(payload)
