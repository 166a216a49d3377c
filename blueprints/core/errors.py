from __future__ import annotations
import logging
from uuid import uuid4

from flask import jsonify
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from extensions import db
from . import bp

log = logging.getLogger(__name__)


class ApiError(Exception):
    """Ошибка сервиса: публичное сообщение уходит клиенту, detail пишется только в лог."""
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, *, detail: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.detail = detail
        self.log_id = uuid4().hex[:12]


class BadRequest(ApiError):
    status_code = 400
    default_message = "Bad request"


class Unauthorized(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class Conflict(ApiError):
    status_code = 409
    default_message = "Conflict"


class ServiceUnavailable(ApiError):
    status_code = 503
    default_message = "Service unavailable"


@bp.app_errorhandler(ApiError)
def _handle_api_error(err: ApiError):
    body = {"error": err.message}
    if err.status_code >= 500:
        log.error("api error %s: %s", err.log_id, err.detail or err.message)
        body["log_id"] = err.log_id
    elif err.detail:
        log.info("api error %s: %s", err.log_id, err.detail)
    return jsonify(body), err.status_code


@bp.app_errorhandler(ValidationError)
def _handle_validation_error(err: ValidationError):
    return jsonify({
        "error": "validation_error",
        "detail": err.errors(include_url=False, include_context=False),
    }), 422


@bp.app_errorhandler(IntegrityError)
def _handle_integrity_error(err: IntegrityError):
    db.session.rollback()
    log.info("integrity error: %s", err.orig)
    return jsonify({"error": "Unique constraint violation"}), 409


@bp.app_errorhandler(HTTPException)
def _handle_http_exception(err: HTTPException):
    return jsonify({"error": err.description or err.name}), err.code or 500
