from __future__ import annotations
import re
from datetime import timedelta

import pytest
from flask import g

from app import create_app
from bootstrap import seed_roles
from extensions import db
from mail import Mailer
from models import (
    Admin, AvailableAdminRole, AvailableStudentRole, Group, GroupMember, Project, SecurityCode, Student, utcnow,
)
from blueprints.auth.tokens import create_access_token

PASSWORD = "s3cret-pass"


@pytest.fixture()
def app():
    app = create_app("test")
    with app.app_context():
        db.create_all()
        seed_roles()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    # контекст приложения общий для всех запросов теста, поэтому g живёт между ними;
    # пользователь Flask-Login должен браться из заголовка каждого запроса заново
    @app.before_request
    def _forget_login_user():
        g.pop("_login_user", None)

    return app.test_client()


@pytest.fixture()
def outbox(monkeypatch):
    """Письма вместо SMTP попадают в список."""
    sent = []
    monkeypatch.setattr(Mailer, "_deliver", lambda self, message: sent.append(message))
    return sent


def mail_text(message) -> str:
    return message.get_body(("plain",)).get_content()


def token_from_mail(message) -> str:
    found = re.search(r"[?&]t=([\w\-.]+)", mail_text(message))
    assert found, mail_text(message)
    return found.group(1)


# ---------- фабрики ----------
_admin_seq = iter(range(1, 100000))


def make_admin(role=AvailableAdminRole.ROOT, email=None, password=PASSWORD) -> Admin:
    admin = Admin(first_name="Ada", last_name=role.name.title(),
                  email=email or f"{role.name.lower()}{next(_admin_seq)}@uni.test",
                  admin_role_id=int(role))
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    return admin


_university_ids = iter(range(100000, 200000))


def make_student(email=None, pending=False, password=PASSWORD, first_name="Stu") -> Student:
    uid = next(_university_ids)
    student = Student(first_name=first_name, last_name=str(uid),
                      email=email or f"s{uid}@studenti.unitn.it",
                      university_id=uid, is_pending=pending)
    student.set_password(password)
    db.session.add(student)
    db.session.commit()
    return student


def make_project(name="Fair 2025", **overrides) -> Project:
    fields = dict(name=name, year=2025, max_student_uploads=5, max_group_size=3, max_groups=5,
                  deliverable_selection_deadline=None, active=True)
    fields.update(overrides)
    project = Project(**fields)
    db.session.add(project)
    db.session.commit()
    return project


def make_code(project, role=AvailableStudentRole.GROUP_LEADER, code="ABC-123", expires_in=timedelta(days=1)):
    sc = SecurityCode(project_id=project.project_id, user_role_id=int(role), code=code,
                      expiration=utcnow() + expires_in)
    db.session.add(sc)
    db.session.commit()
    return sc


def make_group(project, leader, name="Team A", members=()) -> Group:
    group = Group(project_id=project.project_id, name=name)
    group.members.append(GroupMember(student_id=leader.student_id,
                                     student_role_id=int(AvailableStudentRole.GROUP_LEADER)))
    for m in members:
        group.members.append(GroupMember(student_id=m.student_id, student_role_id=int(AvailableStudentRole.MEMBER)))
    db.session.add(group)
    db.session.commit()
    return group


def auth(user) -> dict:
    if user.is_admin:
        token = create_access_token(user.admin_id, is_admin=True, role_id=user.admin_role_id)
    else:
        token = create_access_token(user.student_id, is_admin=False)
    return {"Authorization": f"Bearer {token}"}
