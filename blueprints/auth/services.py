from __future__ import annotations
import logging

from flask import current_app
from sqlalchemy import func

from blueprints.core.errors import (
    BadRequest, Conflict, Forbidden, ServiceUnavailable, Unauthorized,
)
from extensions import db, mailer
from mail import MailError
from models import Admin, Blacklist, Student
from . import tokens

log = logging.getLogger(__name__)

WRONG_CREDENTIALS = "Incorrect email or password"


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _find_by_email(model, email: str):
    return db.session.query(model).filter(func.lower(model.email) == _normalize_email(email)).first()


# ---------- вход ----------
def login_admin(email: str, password: str) -> str:
    admin = _find_by_email(Admin, email)
    if admin is None or not admin.check_password(password):
        raise Unauthorized(WRONG_CREDENTIALS)
    log.info("admin %s logged in", admin.admin_id)
    return tokens.create_access_token(admin.admin_id, is_admin=True, role_id=admin.admin_role_id)


def login_student(email: str, password: str) -> str:
    student = _find_by_email(Student, email)
    if student is None or not student.check_password(password):
        raise Unauthorized(WRONG_CREDENTIALS)
    return tokens.create_access_token(student.student_id, is_admin=False)


# ---------- регистрация студента ----------
def allowed_domains() -> list[str]:
    return list(current_app.config.get("ALLOWED_SIGNUP_DOMAINS") or [])


def _check_signup_fields(first_name: str, last_name: str, email: str, password: str) -> None:
    for value, label in ((first_name, "First name"), (last_name, "Last name"),
                         (email, "Email"), (password, "Password")):
        if not value or not value.strip():
            raise BadRequest(f"{label} cannot be empty")


def check_email_domain(email: str) -> None:
    local, sep, domain = email.partition("@")
    if not sep or not local or not domain:
        raise BadRequest("Invalid email format")
    if domain.lower() not in allowed_domains():
        raise BadRequest("Email domain not allowed for signup")


def check_not_blacklisted(university_id: int) -> None:
    if db.session.query(Blacklist).filter_by(university_id=university_id).first():
        log.info("university id %s is blacklisted", university_id)
        raise Forbidden("This university id is not allowed to sign up")


def university_id_taken(university_id: int, *, exclude_id: int | None = None) -> bool:
    q = db.session.query(Student).filter_by(university_id=university_id)
    if exclude_id is not None:
        q = q.filter(Student.student_id != exclude_id)
    return db.session.query(q.exists()).scalar()


def send_confirmation(student: Student, failure_message: str) -> None:
    token = tokens.create_email_token(student.email, tokens.PURPOSE_CONFIRM)
    try:
        mailer.send_account_confirmation(student.email, student.full_name, token)
    except MailError as exc:
        raise ServiceUnavailable(failure_message, detail=str(exc)) from exc


def signup_student(*, first_name: str, last_name: str, email: str, password: str,
                   university_id: int) -> Student:
    _check_signup_fields(first_name, last_name, email, password)
    email = _normalize_email(email)
    check_email_domain(email)

    check_not_blacklisted(university_id)
    if _find_by_email(Student, email):
        raise Conflict("Email already registered")
    if university_id_taken(university_id):
        raise Conflict("University id already registered")

    skip_confirmation = bool(current_app.config.get("SKIP_EMAIL_CONFIRMATION"))
    student = Student(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email,
        university_id=university_id,
        is_pending=not skip_confirmation,
    )
    student.set_password(password)
    db.session.add(student)
    db.session.commit()
    log.info("new student account created: %s", student.student_id)

    if skip_confirmation:
        return student

    send_confirmation(
        student,
        "The account has been created but the confirmation email could not be sent; "
        "ask the coordinator to approve you manually.",
    )
    return student


def confirm_student(token: str) -> None:
    email = tokens.decode_email_token(token, tokens.PURPOSE_CONFIRM)
    student = _find_by_email(Student, email)
    if student is None:
        raise BadRequest("Invalid or expired token", detail=f"student {email} not found")
    student.is_pending = False
    db.session.commit()
    log.info("student %s confirmed", student.student_id)


# ---------- сброс пароля ----------
def _purpose_for(model) -> str:
    return tokens.PURPOSE_ADMIN_RESET if model is Admin else tokens.PURPOSE_RESET


def request_password_reset(model, email: str) -> None:
    """Молча ничего не делает для неизвестного email, чтобы не раскрывать аккаунты."""
    user = _find_by_email(model, email)
    if user is None:
        log.info("password reset requested for unknown email")
        return
    token = tokens.create_email_token(user.email, _purpose_for(model))
    try:
        mailer.send_password_reset(user.email, user.full_name, token, admin=model is Admin)
    except MailError as exc:
        raise ServiceUnavailable("Password reset request failed", detail=str(exc)) from exc


def reset_password(model, token: str, new_password: str) -> None:
    email = tokens.decode_email_token(token, _purpose_for(model))
    if not new_password or not new_password.strip():
        raise BadRequest("Password cannot be empty")
    user = _find_by_email(model, email)
    if user is None:
        raise BadRequest("Account not found")
    user.set_password(new_password)
    db.session.commit()
    log.info("password reset for %s", user.get_id())
