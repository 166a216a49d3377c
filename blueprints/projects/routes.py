from __future__ import annotations

from flask import jsonify

from blueprints.auth.routes import MANAGER_ROLES, admin_required, current_account, student_required
from blueprints.helpers import created, dump, dump_many, no_content, parse_body
from models import AvailableAdminRole as R
from . import api_bp, services as svc
from .schemas import (
    AssignCoordinatorIn, CoordinatorOut, ProjectIn, ProjectOut, ProjectUpdateIn, StudentProjectOut,
)

OWNERS = (R.ROOT, R.PROFESSOR)


def _coordinator_out(assignment) -> dict:
    admin = assignment.admin
    return dump(CoordinatorOut, {
        "admin_id": admin.admin_id,
        "first_name": admin.first_name,
        "last_name": admin.last_name,
        "email": admin.email,
        "assigned_at": assignment.assigned_at,
    })


# ---------- админы ----------
@api_bp.post("/admins/projects")
@admin_required(*OWNERS)
def projects_create():
    data = parse_body(ProjectIn)
    return created(dump(ProjectOut, svc.create_project(data)))


@api_bp.get("/admins/projects")
@admin_required
def projects_list():
    return jsonify(dump_many(ProjectOut, svc.visible_projects_query(current_account()).all()))


@api_bp.get("/admins/projects/<int:project_id>")
@admin_required
def projects_get(project_id: int):
    return jsonify(dump(ProjectOut, svc.ensure_project_access(current_account(), project_id)))


@api_bp.patch("/admins/projects/<int:project_id>")
@admin_required(*MANAGER_ROLES)
def projects_update(project_id: int):
    project = svc.ensure_project_access(current_account(), project_id)
    data = parse_body(ProjectUpdateIn)
    return jsonify(dump(ProjectOut, svc.update_project(project, data)))


@api_bp.delete("/admins/projects/<int:project_id>")
@admin_required(*OWNERS)
def projects_delete(project_id: int):
    svc.delete_project(svc.get_project(project_id))
    return no_content()


@api_bp.post("/admins/projects/<int:project_id>/coordinators")
@admin_required(*OWNERS)
def coordinators_assign(project_id: int):
    project = svc.get_project(project_id)
    data = parse_body(AssignCoordinatorIn)
    assignment = svc.assign_coordinator(project, data.admin_id)
    return created({
        "message": "Coordinator assigned to project successfully",
        "coordinator_project_id": assignment.coordinator_project_id,
        "coordinator": _coordinator_out(assignment),
        "project": {"project_id": project.project_id, "name": project.name},
    })


@api_bp.get("/admins/projects/<int:project_id>/coordinators")
@admin_required
def coordinators_list(project_id: int):
    project = svc.ensure_project_access(current_account(), project_id)
    return jsonify({
        "project_id": project.project_id,
        "project_name": project.name,
        "coordinators": [_coordinator_out(a) for a in svc.project_coordinators(project)],
    })


@api_bp.delete("/admins/projects/<int:project_id>/coordinators/<int:admin_id>")
@admin_required(*OWNERS)
def coordinators_remove(project_id: int, admin_id: int):
    svc.remove_coordinator(svc.get_project(project_id), admin_id)
    return no_content()


# ---------- студент ----------
@api_bp.get("/students/projects")
@student_required
def student_projects():
    rows = svc.student_projects(current_account().student_id)
    out = []
    for project, group, member in rows:
        item = dump(ProjectOut, project)
        item.update(group_id=group.group_id, group_name=group.name, role=member.role.name)
        out.append(dump(StudentProjectOut, item))
    return jsonify(out)
