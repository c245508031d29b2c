"""Shared plumbing for the JSON API blueprints."""
import logging
from flask import abort, current_app, request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from printmarket.errors import (
    ExternalServiceError,
    InvalidState,
    LockedState,
    NotFound,
    PrintmarketError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    NotFound: 404,
    InvalidState: 409,
    LockedState: 423,
    ExternalServiceError: 502,
}


def _status_for(error):
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def current_vendor_id():
    """Vendor id asserted by the upstream auth layer."""
    raw = request.headers.get("X-Vendor-Id", "")
    if not raw.isdigit():
        abort(401)
    return int(raw)


def current_admin_id():
    raw = request.headers.get("X-Admin-Id", "")
    if not raw.isdigit():
        abort(401)
    admin_id = int(raw)
    if admin_id not in current_app.config["ADMIN_IDS"]:
        logger.info("Rejected non-admin user: %s", admin_id)
        abort(403)
    return admin_id


def page_args():
    page = request.args.get("page", 1, type=int)
    per_page = min(request.args.get("per_page", 20, type=int), 100)
    return max(page, 1), max(per_page, 1)


def paginated(pagination, key):
    return {
        key: [item.to_dict() for item in pagination.items],
        "pagination": {
            "page": pagination.page,
            "per_page": pagination.per_page,
            "total": pagination.total,
            "pages": pagination.pages,
        },
    }


def register_error_handlers(bp):
    @bp.errorhandler(PrintmarketError)
    def handle_core_error(error):
        body = error.to_dict()
        status = _status_for(error)
        if isinstance(error, ExternalServiceError):
            body["retryable"] = True
        return body, status

    @bp.errorhandler(ValidationError)
    def handle_payload_error(error):
        problems = [
            {"loc": list(e["loc"]), "msg": e["msg"]} for e in error.errors()
        ]
        return {"error": "invalid_payload", "message": "Invalid request payload", "details": problems}, 400

    @bp.errorhandler(ValueError)
    def handle_value_error(error):
        return {"error": "invalid_input", "message": str(error)}, 400

    @bp.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        logger.exception("Database error while handling %s", request.path)
        return {
            "error": "database_error",
            "message": "The operation was not applied; retry later",
            "retryable": True,
        }, 503
