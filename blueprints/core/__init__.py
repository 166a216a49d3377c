from flask import Blueprint

bp = Blueprint("core", __name__)

# Критично: импортируем модули, чтобы регистрировались маршруты и обработчики
from . import routes, errors  # noqa: E402,F401
