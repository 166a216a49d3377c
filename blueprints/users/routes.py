from __future__ import annotations

from flask import jsonify

from blueprints.auth.routes import admin_required, current_account, student_required
from blueprints.helpers import created, dump, no_content, paginate, parse_body
from models import AvailableAdminRole as R
from . import api_bp, services as svc
from .schemas import AdminCreateIn, AdminOut, AdminUpdateIn, StudentOut, StudentUpdateMeIn, UpdateMeIn

READERS = (R.ROOT, R.PROFESSOR, R.TUTOR)
WRITERS = (R.ROOT, R.PROFESSOR)


# ---------- админы ----------
@api_bp.get("/admins/users")
@admin_required(*READERS)
def admins_list():
    return jsonify(paginate(svc.visible_admins_query(current_account()), AdminOut))


@api_bp.get("/admins/users/me")
@admin_required
def admins_me():
    return jsonify(dump(AdminOut, current_account()))


@api_bp.patch("/admins/users/me")
@admin_required
def admins_update_me():
    data = parse_body(UpdateMeIn)
    return jsonify(dump(AdminOut, svc.update_me(current_account(), data)))


@api_bp.get("/admins/users/<int:admin_id>")
@admin_required(*READERS)
def admins_get(admin_id: int):
    return jsonify(dump(AdminOut, svc.get_admin(current_account(), admin_id)))


@api_bp.post("/admins/users")
@admin_required(*WRITERS)
def admins_create():
    data = parse_body(AdminCreateIn)
    return created(dump(AdminOut, svc.create_admin(current_account(), data)))


@api_bp.patch("/admins/users/<int:admin_id>")
@admin_required(*WRITERS)
def admins_update(admin_id: int):
    data = parse_body(AdminUpdateIn)
    return jsonify(dump(AdminOut, svc.update_admin(current_account(), admin_id, data)))


@api_bp.delete("/admins/users/<int:admin_id>")
@admin_required(*WRITERS)
def admins_delete(admin_id: int):
    svc.delete_admin(current_account(), admin_id)
    return no_content()


# ---------- студент: свой профиль ----------
@api_bp.get("/students/users/me")
@student_required
def students_me():
    return jsonify(dump(StudentOut, current_account()))


@api_bp.patch("/students/users/me")
@student_required
def students_update_me():
    data = parse_body(StudentUpdateMeIn)
    return jsonify(dump(StudentOut, svc.update_me(current_account(), data)))
