from __future__ import annotations

from flask import jsonify

from blueprints.auth.routes import admin_required, current_account, student_required
from blueprints.helpers import created, dump, dump_many, parse_body
from blueprints.projects.services import ensure_project_access
from . import api_bp, services as svc
from .schemas import ComplaintIn, ComplaintOut


@api_bp.post("/students/complaints")
@student_required
def complaints_create():
    data = parse_body(ComplaintIn)
    complaint = svc.create_complaint(current_account(), **data.model_dump())
    return created(dump(ComplaintOut, svc.complaint_row(complaint)))


@api_bp.get("/admins/complaints/projects/<int:project_id>")
@admin_required
def complaints_by_project(project_id: int):
    project = ensure_project_access(current_account(), project_id)
    rows = svc.project_complaints(project)
    return jsonify(dump_many(ComplaintOut, [svc.complaint_row(c) for c in rows]))
