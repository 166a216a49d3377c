from __future__ import annotations

from flask import jsonify

from blueprints.auth.routes import admin_required, current_account, student_required
from blueprints.helpers import created, dump, dump_many, no_content, parse_body
from blueprints.projects.services import ensure_project_access
from . import api_bp, services as svc
from .schemas import (
    GroupSelectionIn, GroupSelectionInfo, GroupSelectionOut, ImplementationDetailIn, ImplementationDetailKeyIn,
    ImplementationDetailOut, StudentSelectionIn, StudentSelectionInfo, StudentSelectionOut,
)


# ---------- выбор группы ----------
@api_bp.post("/students/group-deliverable-selections/<int:group_id>")
@student_required
def group_selection_create(group_id: int):
    data = parse_body(GroupSelectionIn)
    selection = svc.create_group_selection(current_account(), group_id, data.group_deliverable_id)
    return created({
        "group_deliverable_selection_id": selection.group_deliverable_selection_id,
        "message": "Deliverable selected successfully",
    })


@api_bp.get("/students/group-deliverable-selections/<int:group_id>")
@student_required
def group_selection_get(group_id: int):
    return jsonify(dump(GroupSelectionOut, svc.read_group_selection(current_account(), group_id)))


# ---------- детали реализации ----------
@api_bp.post("/students/group-component-implementation-details/<int:group_id>")
@student_required
def details_create(group_id: int):
    data = parse_body(ImplementationDetailIn)
    detail = svc.create_detail(current_account(), group_id, **data.model_dump())
    return created(dump(ImplementationDetailOut, svc.detail_row(detail)))


@api_bp.get("/students/group-component-implementation-details/<int:group_id>")
@student_required
def details_list(group_id: int):
    rows = svc.list_details(current_account(), group_id)
    return jsonify({"details": dump_many(ImplementationDetailOut, [svc.detail_row(d) for d in rows])})


@api_bp.patch("/students/group-component-implementation-details/<int:group_id>")
@student_required
def details_update(group_id: int):
    data = parse_body(ImplementationDetailIn)
    detail = svc.update_detail(current_account(), group_id, **data.model_dump())
    return jsonify(dump(ImplementationDetailOut, svc.detail_row(detail)))


@api_bp.delete("/students/group-component-implementation-details/<int:group_id>")
@student_required
def details_delete(group_id: int):
    data = parse_body(ImplementationDetailKeyIn)
    svc.delete_detail(current_account(), group_id, data.group_deliverable_component_id)
    return no_content()


# ---------- выбор студента ----------
@api_bp.post("/students/deliverable-selection")
@student_required
def student_selection_create():
    data = parse_body(StudentSelectionIn)
    selection = svc.create_student_selection(current_account(), **data.model_dump())
    return created(dump(StudentSelectionOut, svc.student_selection_row(selection)))


@api_bp.patch("/students/deliverable-selection")
@student_required
def student_selection_update():
    data = parse_body(StudentSelectionIn)
    selection = svc.update_student_selection(current_account(), **data.model_dump())
    return jsonify(dump(StudentSelectionOut, svc.student_selection_row(selection)))


@api_bp.get("/students/deliverable-selection/project/<int:project_id>")
@student_required
def student_selection_get(project_id: int):
    selection = svc.read_student_selection(current_account(), project_id)
    return jsonify(dump(StudentSelectionOut, svc.student_selection_row(selection)))


@api_bp.delete("/students/deliverable-selection/project/<int:project_id>")
@student_required
def student_selection_delete(project_id: int):
    svc.delete_student_selection(current_account(), project_id)
    return no_content()


# ---------- админы ----------
@api_bp.get("/admins/group-deliverable-selections/projects/<int:project_id>")
@admin_required
def admin_group_selections(project_id: int):
    project = ensure_project_access(current_account(), project_id)
    return jsonify({
        "project_id": project.project_id,
        "project_name": project.name,
        "selections": dump_many(GroupSelectionInfo, svc.project_group_selections(project)),
    })


@api_bp.get("/admins/student-deliverable-selections/projects/<int:project_id>")
@admin_required
def admin_student_selections(project_id: int):
    project = ensure_project_access(current_account(), project_id)
    return jsonify({
        "project_id": project.project_id,
        "project_name": project.name,
        "selections": dump_many(StudentSelectionInfo, svc.project_student_selections(project)),
    })
