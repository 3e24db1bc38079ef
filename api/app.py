"""Flask REST API exposing the sales tracker services to the browser."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request
from flask_cors import CORS

from salesdesk.catalog import reference_data
from salesdesk.demo import seed_demo_records
from salesdesk.entry_form import FormState, field_errors
from salesdesk.exceptions import (
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from salesdesk.list_view import (
    CSV_MIME_TYPE,
    FilterState,
    export_csv,
    export_filename,
    filter_options,
    record_detail,
    summarize,
)
from salesdesk.services import TransactionService
from salesdesk.storage import JSONStorage

_TRUTHY = {"1", "true", "yes", "y", "on"}


def create_app(data_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)

    env_name = os.getenv("SALES_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("SALES_TRACKER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    data_path = Path(data_dir or os.getenv("SALES_TRACKER_DATA_DIR") or "data")
    storage = JSONStorage(data_path)
    transactions = TransactionService(storage)
    if os.getenv("SALES_TRACKER_SEED_DEMO", "").lower() in _TRUTHY:
        seeded = seed_demo_records(transactions)
        if seeded:
            app.logger.info("Seeded %d demo transactions into %s", seeded, data_path)
    app.extensions["transactions"] = transactions

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str, **extra: Any):
        app.logger.error("%s: %s", message, exc)
        body: Dict[str, Any] = {"error": message, "details": str(exc), **extra}
        return jsonify(body), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error", fields=exc.errors)

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        # Retryable failures are the storage being unavailable; the rest were rejected.
        status = 503 if exc.retryable else 409
        return _handle_error(exc, status, "Persistence error", retryable=exc.retryable)

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _filters() -> FilterState:
        return FilterState.from_mapping(request.args)

    @app.get("/reference")
    def get_reference():
        return _success(reference_data())

    @app.post("/entries/preview")
    def preview_entry():
        payload = _json_body()
        state = FormState.from_dict(payload)
        action = payload.get("action")
        if action == "increment":
            state = state.increment_quantity()
        elif action == "decrement":
            state = state.decrement_quantity()
        elif action == "reset":
            state = state.reset()
        elif action is not None:
            raise ValidationError(f"Unknown form action: {action}")
        return _success({"state": state.to_dict(), "errors": field_errors(state.to_dict())})

    @app.get("/transactions")
    def list_transactions():
        filters = _filters()
        records = transactions.fetch_all()
        shown = transactions.list(filters)
        return _success({
            "items": [record.to_dict() for record in shown],
            "filters": filters.to_dict(),
            "options": filter_options(records),
            "summary": summarize(len(records), len(shown)).to_dict(),
        })

    @app.post("/transactions")
    def create_transaction():
        payload = _json_body()
        record = transactions.add(payload)
        return _success(record.to_dict(), 201)

    @app.get("/transactions/export")
    def export_transactions():
        content = export_csv(transactions.list(_filters()))
        return Response(
            content,
            mimetype=CSV_MIME_TYPE,
            headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
        )

    @app.get("/transactions/<record_id>")
    def get_transaction(record_id: str):
        record = transactions.get(record_id)
        return _success({**record.to_dict(), "detail": record_detail(record)})

    @app.put("/transactions/<record_id>")
    def update_transaction(record_id: str):
        payload = _json_body()
        record = transactions.update(record_id, payload)
        return _success(record.to_dict())

    @app.delete("/transactions/<record_id>")
    def delete_transaction(record_id: str):
        if request.args.get("confirm", "").lower() not in _TRUTHY:
            raise ValidationError(
                "Deletion must be confirmed",
                {"confirm": "Pass confirm=true to delete this entry"},
            )
        transactions.delete_by_id(record_id)
        return _success({}, 204)

    return app
