from flask import Blueprint

api_bp = Blueprint("projects_api", __name__)

from . import routes  # noqa: E402,F401
