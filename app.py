from __future__ import annotations
import os

from flask import Flask
from sqlalchemy import inspect

from config import config_map
from extensions import db, login_manager, mailer, migrate


def _bootstrap_from_config(app: Flask) -> None:
    if not app.config.get("SEED_ROLES"):
        return
    with app.app_context():
        # таблиц может ещё не быть (до flask db upgrade)
        if not inspect(db.engine).has_table("admin_roles"):
            return
        from bootstrap import ensure_default_admin, seed_roles  # локальный импорт, чтобы избежать циклов
        seed_roles()
        ensure_default_admin()


def register_blueprints(app: Flask) -> None:
    from blueprints.core import bp as core_bp
    from blueprints.auth import api_bp as auth_api_bp
    from blueprints.users import api_bp as users_api_bp
    from blueprints.projects import api_bp as projects_api_bp
    from blueprints.security_codes import api_bp as security_codes_api_bp
    from blueprints.groups import api_bp as groups_api_bp
    from blueprints.catalog import api_bp as catalog_api_bp
    from blueprints.selections import api_bp as selections_api_bp
    from blueprints.fairs import api_bp as fairs_api_bp
    from blueprints.complaints import api_bp as complaints_api_bp
    from blueprints.blacklist import api_bp as blacklist_api_bp

    # core без префикса → '/health' в корне
    app.register_blueprint(core_bp)
    for api_bp in (auth_api_bp, users_api_bp, projects_api_bp, security_codes_api_bp, groups_api_bp,
                   catalog_api_bp, selections_api_bp, fairs_api_bp, complaints_api_bp, blacklist_api_bp):
        app.register_blueprint(api_bp, url_prefix="/api/v1")


def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    cfg_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config_map[cfg_name])
    # --- изоляция БД в тестах ---
    # pytest всегда выставляет PYTEST_CURRENT_TEST: держим БД в памяти.
    if os.environ.get("PYTEST_CURRENT_TEST"):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
        app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", {"connect_args": {"check_same_thread": False}})

    try:
        os.makedirs(app.config["DATA_DIR"], exist_ok=True)
    except OSError:
        pass
    db.init_app(app)
    migrate.init_app(app, db, render_as_batch=True)
    login_manager.init_app(app)
    mailer.init_app(app)
    register_blueprints(app)
    if app.config.get("LOGS_MONGO_URI"):
        app.logger.info("LOGS_MONGO_URI is set, log shipping is not supported: logs stay on stdout")
    _bootstrap_from_config(app)
    return app
