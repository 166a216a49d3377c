# blueprints/auth/routes.py
from __future__ import annotations
import logging
from functools import wraps
from typing import Callable, Optional

from flask import jsonify, request
from flask_login import current_user, login_required

from blueprints.core.errors import BadRequest, Forbidden, Unauthorized
from blueprints.helpers import created, dump, no_content, parse_body
from extensions import db, login_manager
from models import Admin, AvailableAdminRole, Student
from . import api_bp, services as svc, tokens
from .schemas import (
    AllowedDomainsOut, EmailIn, LoginIn, ResetPasswordIn, SignupIn, TokenOut,
)

log = logging.getLogger(__name__)

# роли, которые могут управлять проектами и каталогами
MANAGER_ROLES = (
    AvailableAdminRole.ROOT, AvailableAdminRole.PROFESSOR, AvailableAdminRole.COORDINATOR,
)


# ---------- Flask-Login: пользователь из Bearer-токена ----------
def _bearer_token(req) -> Optional[str]:
    header = req.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@login_manager.request_loader
def load_user_from_request(req) -> Admin | Student | None:
    token = _bearer_token(req)
    if token is None:
        return None
    try:
        claims = tokens.decode_access_token(token)
    except Unauthorized as exc:
        log.info("rejected bearer token: %s", exc.detail)
        return None
    model = Admin if claims.get("adm") else Student
    return db.session.get(model, int(claims["sub"]))


@login_manager.unauthorized_handler
def _unauth():
    return jsonify({"error": "Authentication required"}), 401


# ---------- декораторы ролей ----------
def admin_required(*roles):
    """@admin_required пускает любого админа, @admin_required(AvailableAdminRole.ROOT, ...) только эти роли."""
    if len(roles) == 1 and callable(roles[0]):
        return admin_required()(roles[0])

    def decorator(fn: Callable):
        @wraps(fn)
        @login_required
        def wrapper(*args, **kwargs):
            if not getattr(current_user, "is_admin", False):
                raise Forbidden()
            if roles and not current_user.has_role(*roles):
                raise Forbidden()
            return fn(*args, **kwargs)
        wrapper.required_login = "admin"
        return wrapper
    return decorator


def student_required(fn: Callable):
    @wraps(fn)
    @login_required
    def wrapper(*args, **kwargs):
        if getattr(current_user, "is_admin", True):
            raise Forbidden()
        return fn(*args, **kwargs)
    wrapper.required_login = "student"
    return wrapper


def current_account():
    """Реальный объект Admin/Student за прокси current_user."""
    return current_user._get_current_object()


def _query_token() -> str:
    token = request.args.get("t", "").strip()
    if not token:
        raise BadRequest("Missing token")
    return token


# ---------- админы ----------
@api_bp.post("/admins/auth/login")
def admin_login():
    data = parse_body(LoginIn)
    token = svc.login_admin(data.email, data.password)
    return jsonify(dump(TokenOut, {"token": token}))


@api_bp.post("/admins/auth/forgot-password")
def admin_forgot_password():
    data = parse_body(EmailIn)
    svc.request_password_reset(Admin, data.email)
    return no_content()


@api_bp.post("/admins/auth/reset-password")
def admin_reset_password():
    token = _query_token()
    data = parse_body(ResetPasswordIn)
    svc.reset_password(Admin, token, data.new_password)
    return no_content()


# ---------- студенты ----------
@api_bp.post("/students/auth/login")
def student_login():
    data = parse_body(LoginIn)
    token = svc.login_student(data.email, data.password)
    return jsonify(dump(TokenOut, {"token": token}))


@api_bp.post("/students/auth/signup")
def student_signup():
    data = parse_body(SignupIn)
    student = svc.signup_student(**data.model_dump())
    return created({"student_id": student.student_id})


@api_bp.get("/students/auth/confirm")
def student_confirm():
    svc.confirm_student(_query_token())
    return no_content()


@api_bp.post("/students/auth/forgot-password")
def student_forgot_password():
    data = parse_body(EmailIn)
    svc.request_password_reset(Student, data.email)
    return no_content()


@api_bp.post("/students/auth/reset-password")
def student_reset_password():
    token = _query_token()
    data = parse_body(ResetPasswordIn)
    svc.reset_password(Student, token, data.new_password)
    return no_content()


@api_bp.get("/students/auth/allowed-domains")
def student_allowed_domains():
    return jsonify(dump(AllowedDomainsOut, {"domains": svc.allowed_domains()}))
