from __future__ import annotations

from flask import jsonify

from blueprints.auth.routes import MANAGER_ROLES, admin_required, current_account, student_required
from blueprints.core.errors import Forbidden
from blueprints.groups.services import student_group_in_project
from blueprints.helpers import created, dump, dump_many, no_content, parse_body
from blueprints.projects.services import ensure_project_access, get_project
from . import api_bp, services as svc
from .schemas import FairIn, FairOut, FairUpdateIn, TransactionIn, TransactionOut


def _transactions_out(rows) -> list[dict]:
    return dump_many(TransactionOut, [svc.transaction_row(t) for t in rows])


# ---------- админы ----------
@api_bp.post("/admins/fairs")
@admin_required(*MANAGER_ROLES)
def fairs_create():
    data = parse_body(FairIn)
    return created(dump(FairOut, svc.create_fair(current_account(), data)))


@api_bp.get("/admins/fairs/projects/<int:project_id>")
@admin_required
def fairs_by_project(project_id: int):
    ensure_project_access(current_account(), project_id)
    return jsonify(dump_many(FairOut, svc.project_fairs(project_id)))


@api_bp.get("/admins/fairs/<int:fair_id>")
@admin_required
def fairs_get(fair_id: int):
    return jsonify(dump(FairOut, svc.get_fair(current_account(), fair_id)))


@api_bp.patch("/admins/fairs/<int:fair_id>")
@admin_required(*MANAGER_ROLES)
def fairs_update(fair_id: int):
    fair = svc.get_fair(current_account(), fair_id)
    data = parse_body(FairUpdateIn)
    return jsonify(dump(FairOut, svc.update_fair(fair, data)))


@api_bp.delete("/admins/fairs/<int:fair_id>")
@admin_required(*MANAGER_ROLES)
def fairs_delete(fair_id: int):
    svc.delete_fair(svc.get_fair(current_account(), fair_id))
    return no_content()


@api_bp.get("/admins/fairs/<int:fair_id>/transactions")
@admin_required
def fairs_transactions(fair_id: int):
    fair = svc.get_fair(current_account(), fair_id)
    return jsonify(_transactions_out(svc.fair_transactions(fair)))


# ---------- студенты ----------
@api_bp.get("/students/fairs/projects/<int:project_id>")
@student_required
def student_fairs(project_id: int):
    get_project(project_id)
    if student_group_in_project(current_account().student_id, project_id) is None:
        raise Forbidden("You must be a member of a group in this project")
    return jsonify(dump_many(FairOut, svc.project_fairs(project_id)))


@api_bp.post("/students/transactions")
@student_required
def transactions_create():
    data = parse_body(TransactionIn)
    tx = svc.create_transaction(current_account(), **data.model_dump())
    return created(dump(TransactionOut, svc.transaction_row(tx)))


@api_bp.get("/students/transactions/groups/<int:group_id>")
@student_required
def transactions_of_group(group_id: int):
    return jsonify(_transactions_out(svc.group_transactions(current_account(), group_id)))
