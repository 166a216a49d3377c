from __future__ import annotations

from flask import jsonify, request

from blueprints.auth.routes import MANAGER_ROLES, admin_required, current_account, student_required
from blueprints.helpers import created, dump, dump_many, no_content, parse_body
from . import api_bp, services as svc
from .schemas import (
    ProjectInfo, SecurityCodeIn, SecurityCodeOut, SecurityCodeUpdateIn, ValidateCodeIn, ValidateCodeOut,
)


# ---------- админы ----------
@api_bp.post("/admins/security-codes")
@admin_required(*MANAGER_ROLES)
def codes_create():
    data = parse_body(SecurityCodeIn)
    code = svc.create_code(current_account(), **data.model_dump())
    return created(dump(SecurityCodeOut, code))


@api_bp.get("/admins/security-codes")
@admin_required
def codes_list():
    project_id = request.args.get("project_id", type=int)
    rows = svc.codes_query(current_account(), project_id).all()
    out = dump_many(SecurityCodeOut, rows)
    for item, row in zip(out, rows):
        item["project_name"] = row.project.name
    return jsonify(out)


@api_bp.patch("/admins/security-codes/<int:security_code_id>")
@admin_required(*MANAGER_ROLES)
def codes_update(security_code_id: int):
    code = svc.get_code(current_account(), security_code_id)
    data = parse_body(SecurityCodeUpdateIn)
    return jsonify(dump(SecurityCodeOut, svc.update_code(code, **data.model_dump())))


@api_bp.delete("/admins/security-codes/<int:security_code_id>")
@admin_required(*MANAGER_ROLES)
def codes_delete(security_code_id: int):
    svc.delete_code(svc.get_code(current_account(), security_code_id))
    return no_content()


# ---------- студенты ----------
@api_bp.post("/students/security-codes/validate")
@student_required
def codes_validate():
    data = parse_body(ValidateCodeIn)
    code = svc.find_active_code(data.security_code)
    if code is None:
        return jsonify(dump(ValidateCodeOut, {"is_valid": False}))
    project = ProjectInfo.model_validate(code.project)
    return jsonify(dump(ValidateCodeOut, {"is_valid": True, "project": project}))
