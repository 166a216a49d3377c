from __future__ import annotations

from flask import jsonify

from blueprints.auth.routes import admin_required
from blueprints.helpers import created, dump, no_content, paginate, parse_body
from models import AvailableAdminRole as R
from . import api_bp, services as svc
from .schemas import BlacklistIn, BlacklistOut


@api_bp.get("/admins/blacklist")
@admin_required(R.ROOT, R.PROFESSOR)
def blacklist_list():
    return jsonify(paginate(svc.entries_query(), BlacklistOut))


@api_bp.post("/admins/blacklist")
@admin_required(R.ROOT, R.PROFESSOR)
def blacklist_create():
    data = parse_body(BlacklistIn)
    return created(dump(BlacklistOut, svc.create_entry(data)))


@api_bp.delete("/admins/blacklist/<int:blacklist_id>")
@admin_required(R.ROOT, R.PROFESSOR)
def blacklist_delete(blacklist_id: int):
    svc.delete_entry(blacklist_id)
    return no_content()
