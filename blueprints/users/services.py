from __future__ import annotations
import logging
import secrets

from flask import current_app
from sqlalchemy import func

from blueprints.auth import services as auth_svc
from blueprints.core.errors import (
    BadRequest, Conflict, Forbidden, NotFound, ServiceUnavailable, Unauthorized,
)
from extensions import db, mailer
from mail import MailError
from models import Admin, AdminRole, AvailableAdminRole, Student
from .schemas import AdminCreateIn, AdminUpdateIn, UpdateMeIn

log = logging.getLogger(__name__)


def _is_root(admin: Admin) -> bool:
    return admin.admin_role_id == AvailableAdminRole.ROOT


def _email_taken(model, email: str, *, exclude_id: int | None = None) -> bool:
    pk = model.__mapper__.primary_key[0]
    q = db.session.query(model).filter(func.lower(model.email) == email.strip().lower())
    if exclude_id is not None:
        q = q.filter(pk != exclude_id)
    return db.session.query(q.exists()).scalar()


def _check_role(actor: Admin, role_id: int) -> None:
    if db.session.get(AdminRole, role_id) is None:
        raise BadRequest("Invalid admin role")
    if role_id == AvailableAdminRole.ROOT and not _is_root(actor):
        raise Forbidden("Only a Root admin can grant the Root role")


def _non_empty(value: str | None, label: str) -> str | None:
    if value is None:
        return None
    if not value.strip():
        raise BadRequest(f"{label} cannot be empty")
    return value.strip()


# ---------- чтение ----------
def visible_admins_query(actor: Admin):
    """Root видит всех, остальные видят всех кроме Root."""
    q = db.session.query(Admin).order_by(Admin.admin_id)
    if not _is_root(actor):
        q = q.filter(Admin.admin_role_id != AvailableAdminRole.ROOT)
    return q


def get_admin(actor: Admin, admin_id: int) -> Admin:
    admin = db.session.get(Admin, admin_id)
    if admin is None or (_is_root(admin) and not _is_root(actor)):
        raise NotFound("Admin not found")
    return admin


# ---------- изменение ----------
def create_admin(actor: Admin, data: AdminCreateIn) -> Admin:
    _check_role(actor, data.admin_role_id)
    email = data.email.strip().lower()
    if _email_taken(Admin, email):
        raise Conflict("Email already in use")

    generated = data.password is None or not data.password.strip()
    password = secrets.token_urlsafe(12) if generated else data.password

    admin = Admin(
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=email,
        admin_role_id=data.admin_role_id,
    )
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    log.info("admin %s created by %s", admin.admin_id, actor.admin_id)

    if generated:
        try:
            mailer.send_admin_welcome(admin.email, admin.full_name, password)
        except MailError as exc:
            raise ServiceUnavailable(
                "The admin has been created but the welcome email could not be sent",
                detail=str(exc),
            ) from exc
    return admin


def update_admin(actor: Admin, admin_id: int, data: AdminUpdateIn) -> Admin:
    admin = get_admin(actor, admin_id)
    fields = data.model_dump(exclude_unset=True)
    if not fields:
        raise BadRequest("At least one field must be provided")

    if "admin_role_id" in fields and data.admin_role_id is not None:
        _check_role(actor, data.admin_role_id)
        admin.admin_role_id = data.admin_role_id
    if data.first_name is not None:
        admin.first_name = _non_empty(data.first_name, "First name")
    if data.last_name is not None:
        admin.last_name = _non_empty(data.last_name, "Last name")
    if data.email is not None:
        email = _non_empty(data.email, "Email").lower()
        if _email_taken(Admin, email, exclude_id=admin.admin_id):
            raise Conflict("Email already in use")
        admin.email = email
    if data.password is not None:
        admin.set_password(_non_empty(data.password, "Password"))

    db.session.commit()
    return admin


def delete_admin(actor: Admin, admin_id: int) -> None:
    admin = get_admin(actor, admin_id)
    if admin.admin_id == actor.admin_id:
        raise BadRequest("You cannot delete your own account")
    db.session.delete(admin)
    db.session.commit()
    log.info("admin %s deleted by %s", admin_id, actor.admin_id)


def update_me(user: Admin | Student, data: UpdateMeIn) -> Admin | Student:
    """Свой профиль: требует текущий пароль."""
    if not data.old_password:
        raise BadRequest("Old password is required")
    if not user.check_password(data.old_password):
        raise Unauthorized("Incorrect password")
    changes = data.model_dump(exclude_unset=True, exclude={"old_password"})
    if not changes:
        raise BadRequest("At least one field must be provided")

    if data.first_name is not None:
        user.first_name = _non_empty(data.first_name, "First name")
    if data.last_name is not None:
        user.last_name = _non_empty(data.last_name, "Last name")
    email_changed = False
    if data.email is not None:
        email = _non_empty(data.email, "Email").lower()
        model = type(user)
        if not user.is_admin:
            auth_svc.check_email_domain(email)
        own_id = user.admin_id if user.is_admin else user.student_id
        if _email_taken(model, email, exclude_id=own_id):
            raise Conflict("Email already in use by another account")
        email_changed = email != user.email
        user.email = email
    university_id = getattr(data, "university_id", None)
    if university_id is not None and university_id != user.university_id:
        auth_svc.check_not_blacklisted(university_id)
        if auth_svc.university_id_taken(university_id, exclude_id=user.student_id):
            raise Conflict("University id already in use by another account")
        user.university_id = university_id
    if data.password is not None:
        user.set_password(_non_empty(data.password, "Password"))

    # новый адрес студента снова надо подтвердить
    confirm = email_changed and not user.is_admin and not current_app.config.get("SKIP_EMAIL_CONFIRMATION")
    if confirm:
        user.is_pending = True
    db.session.commit()
    if confirm:
        auth_svc.send_confirmation(
            user, "The email has been changed but the confirmation email could not be sent"
        )
    return user
