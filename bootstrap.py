"""Идемпотентное наполнение справочников ролей и root-админа."""
from __future__ import annotations
import logging

from flask import current_app

from extensions import db
from models import ADMIN_ROLE_NAMES, STUDENT_ROLE_NAMES, Admin, AdminRole, AvailableAdminRole, StudentRole

log = logging.getLogger(__name__)


def _upsert_roles(model, pk: str, names: dict) -> int:
    changed = 0
    for role_id, name in names.items():
        row = db.session.get(model, int(role_id))
        if row is None:
            db.session.add(model(**{pk: int(role_id), "name": name}))
            changed += 1
        elif row.name != name:
            # имя чиним на месте, id остаётся прежним
            row.name = name
            changed += 1
    return changed


def seed_roles() -> int:
    changed = _upsert_roles(AdminRole, "admin_role_id", ADMIN_ROLE_NAMES)
    changed += _upsert_roles(StudentRole, "student_role_id", STUDENT_ROLE_NAMES)
    if changed:
        db.session.commit()
        log.info("roles seeded: %s rows changed", changed)
    return changed


def ensure_default_admin() -> Admin | None:
    email = (current_app.config.get("DEFAULT_ADMIN_EMAIL") or "").strip().lower()
    password = current_app.config.get("DEFAULT_ADMIN_PASSWORD") or ""
    if not email or not password:
        log.warning("DEFAULT_ADMIN_EMAIL/DEFAULT_ADMIN_PASSWORD not set, default admin skipped")
        return None
    admin = db.session.query(Admin).filter_by(email=email).first()
    if admin is not None:
        return admin
    admin = Admin(first_name="Root", last_name="Admin", email=email,
                  admin_role_id=int(AvailableAdminRole.ROOT))
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    log.info("default root admin %s created", email)
    return admin
