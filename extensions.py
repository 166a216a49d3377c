from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from sqlalchemy import event
from sqlalchemy.engine import Engine

from mail import Mailer

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
# токены без сессий: пользователь восстанавливается из Authorization на каждый запрос
login_manager.session_protection = None
mailer = Mailer()


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite по умолчанию не проверяет FK и не делает ON DELETE CASCADE
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
