from __future__ import annotations
import json
import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_domains(name: str) -> list[str]:
    # ожидаем JSON-массив: ["studenti.unitn.it", "unitn.it"]
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        log.warning("%s is not valid JSON, signup domains disabled", name)
        return []
    if not isinstance(value, list):
        log.warning("%s must be a JSON array, signup domains disabled", name)
        return []
    return [str(d).strip().lower() for d in value if str(d).strip()]


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    BASE_DIR = Path(__file__).resolve().parent
    DATA_DIR = os.getenv("DATA_DIR", str(BASE_DIR / "instance"))

    # --- сервер ---
    ADDRESS = os.getenv("ADDRESS", "127.0.0.1")
    PORT = int(os.getenv("PORT", "8080"))
    WORKERS = int(os.getenv("WORKERS", "0"))  # 0 = многопоточный режим dev-сервера

    # --- БД ---
    SQLALCHEMY_DATABASE_URI = os.getenv("DB_URL") or f"sqlite:///{Path(DATA_DIR) / 'app.db'}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- JWT ---
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-jwt-secret")
    JWT_VALIDITY_DAYS = int(os.getenv("JWT_VALIDITY_DAYS", "7"))

    # --- логи ---
    LOGS_MONGO_URI = os.getenv("LOGS_MONGO_URI", "")
    LOGS_DB_NAME = os.getenv("LOGS_DB_NAME", "")

    # --- администратор по умолчанию ---
    DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "")
    DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "")

    # --- регистрация студентов ---
    ALLOWED_SIGNUP_DOMAINS = _env_domains("ALLOWED_SIGNUP_DOMAINS")
    SKIP_EMAIL_CONFIRMATION = _env_bool("SKIP_EMAIL_CONFIRMATION")

    # --- почта ---
    SMTP_HOST = os.getenv("SMTP_HOST", "")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
    APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:3000")
    EMAIL_FROM = os.getenv("EMAIL_FROM", "Advanced Programming")
    EMAIL_TOKEN_SECRET = os.getenv("EMAIL_TOKEN_SECRET", "dev-email-secret")
    EMAIL_TOKEN_VALIDITY_HOURS = 24

    APP_VERSION = "0.1.0"


class DevConfig(BaseConfig):
    DEBUG = True
    SEED_ROLES = True


class ProdConfig(BaseConfig):
    DEBUG = False
    SEED_ROLES = True


class TestConfig(BaseConfig):
    TESTING = True
    SEED_ROLES = False  # тесты создают схему сами и сидят роли после create_all
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET = "test-jwt-secret-key-with-32-chars!"
    EMAIL_TOKEN_SECRET = "test-email-secret"
    ALLOWED_SIGNUP_DOMAINS = ["studenti.unitn.it"]
    SKIP_EMAIL_CONFIRMATION = False
    SMTP_HOST = ""
    APP_BASE_URL = "http://frontend.test"


config_map = {
    "dev": DevConfig,
    "prod": ProdConfig,
    "test": TestConfig,
    "default": DevConfig,
}
