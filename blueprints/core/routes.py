from __future__ import annotations
import json, logging, time
from datetime import datetime, UTC
from uuid import uuid4

from flask import current_app, g, jsonify, render_template, request, url_for
from sqlalchemy import text
from werkzeug.wrappers.response import Response

from extensions import db
from . import bp
from .openapi import build_openapi

REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_FIELDS = ("event", "path", "method", "status", "duration_ms", "request_id", "user")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in REQUEST_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _has_json_handler(logger: logging.Logger) -> bool:
    return any(
        isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), JSONFormatter)
        for h in logger.handlers
    )


def _setup_structured_logging(app):
    # app.logger пишет в свой handler, остальные модули пишут через root
    for logger in (app.logger, logging.getLogger()):
        if not _has_json_handler(logger):
            handler = logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    app.logger.propagate = False


def _current_user_label() -> str | None:
    # не дёргаем request_loader повторно: берём только уже загруженного пользователя
    user = g.get("_login_user")
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return user.get_id()


@bp.before_app_request
def _assign_request_id_and_start_timer():
    g._req_start = time.perf_counter()
    g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex


@bp.after_app_request
def _log_request(response: Response):
    started = g.get("_req_start")
    duration_ms = int((time.perf_counter() - started) * 1000) if started is not None else None
    request_id = g.get("request_id")
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    extra = {
        "event": "http_request",
        "path": request.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration_ms,
        "request_id": request_id,
        "user": _current_user_label(),
    }
    logging.getLogger("http").info("request handled", extra=extra)
    return response


@bp.record_once
def _on_register(state):
    app = state.app
    _setup_structured_logging(app)
    app.config.setdefault("STARTED_AT", time.time())


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


@bp.get("/health")
def health():
    database = {"status": "connected"}
    healthy = True
    try:
        db.session.execute(text("SELECT 1"))
    except Exception as exc:  # любая ошибка драйвера = БД недоступна
        db.session.rollback()
        healthy = False
        database = {"status": "disconnected", "error": str(exc)}
        current_app.logger.error("health check failed: %s", exc)

    started = current_app.config.get("STARTED_AT", time.time())
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": _now_iso(),
        "version": current_app.config.get("APP_VERSION"),
        "uptime_seconds": int(time.time() - started),
        "database": database,
    }
    return jsonify(body), 200 if healthy else 503


@bp.get("/health/live")
def live():
    return jsonify({"status": "alive", "timestamp": _now_iso()})


@bp.get("/version")
def version():
    return jsonify({"version": current_app.config.get("APP_VERSION"), "api": "v1"})


@bp.get("/swagger-openapi.json")
def openapi_document():
    return jsonify(build_openapi(current_app))


@bp.get("/swagger/")
def swagger_ui():
    return render_template("swagger.html", spec_url=url_for("core.openapi_document"))
