from __future__ import annotations
import logging
import secrets
import string
from datetime import datetime

from blueprints.core.errors import BadRequest, NotFound, ServiceUnavailable
from blueprints.projects.services import ensure_project_access, is_coordinator, assigned_project_ids
from extensions import db
from models import Admin, SecurityCode, StudentRole, as_utc_naive, utcnow

log = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_GENERATION_ATTEMPTS = 20


def generate_code() -> str:
    """Код вида XXX-XXX из A-Z0-9."""
    chars = [secrets.choice(CODE_ALPHABET) for _ in range(6)]
    return "".join(chars[:3]) + "-" + "".join(chars[3:])


def _unique_code(exclude: str | None = None) -> str:
    for _ in range(MAX_GENERATION_ATTEMPTS):
        code = generate_code()
        if code == exclude:
            continue
        if not db.session.query(SecurityCode).filter_by(code=code).first():
            return code
    raise ServiceUnavailable("Failed to generate a unique security code")


def _future_expiration(value: datetime) -> datetime:
    expiration = as_utc_naive(value)
    if expiration <= utcnow():
        raise BadRequest("Expiration must be in the future")
    return expiration


def create_code(admin: Admin, *, project_id: int, user_role_id: int, expiration: datetime) -> SecurityCode:
    ensure_project_access(admin, project_id)
    if db.session.get(StudentRole, user_role_id) is None:
        raise NotFound("Student role not found")
    code = SecurityCode(
        project_id=project_id,
        user_role_id=user_role_id,
        code=_unique_code(),
        expiration=_future_expiration(expiration),
    )
    db.session.add(code)
    db.session.commit()
    log.info("security code %s created for project %s", code.security_code_id, project_id)
    return code


def codes_query(admin: Admin, project_id: int | None = None):
    q = db.session.query(SecurityCode).order_by(SecurityCode.security_code_id)
    if project_id is not None:
        ensure_project_access(admin, project_id)
        q = q.filter(SecurityCode.project_id == project_id)
    elif is_coordinator(admin):
        q = q.filter(SecurityCode.project_id.in_(assigned_project_ids(admin)))
    return q


def get_code(admin: Admin, security_code_id: int) -> SecurityCode:
    code = db.session.get(SecurityCode, security_code_id)
    if code is None:
        raise NotFound("Security code not found")
    ensure_project_access(admin, code.project_id)
    return code


def update_code(code: SecurityCode, *, expiration: datetime | None, regenerate_code: bool) -> SecurityCode:
    if expiration is None and not regenerate_code:
        raise BadRequest("At least one field must be provided")
    if expiration is not None:
        code.expiration = _future_expiration(expiration)
    if regenerate_code:
        code.code = _unique_code(exclude=code.code)
    db.session.commit()
    return code


def delete_code(code: SecurityCode) -> None:
    db.session.delete(code)
    db.session.commit()


def find_active_code(raw: str) -> SecurityCode | None:
    """Код существует и не истёк; иначе None."""
    code = db.session.query(SecurityCode).filter_by(code=(raw or "").strip().upper()).first()
    if code is None or code.is_expired(utcnow()):
        return None
    return code
