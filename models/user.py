from __future__ import annotations
from datetime import datetime
from enum import IntEnum

from flask_login import UserMixin
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from .common import utcnow


# ---------- Roles ----------
class AvailableAdminRole(IntEnum):
    ROOT = 1
    PROFESSOR = 2
    TUTOR = 3
    COORDINATOR = 4


class AvailableStudentRole(IntEnum):
    GROUP_LEADER = 1
    MEMBER = 2


ADMIN_ROLE_NAMES = {
    AvailableAdminRole.ROOT: "Root",
    AvailableAdminRole.PROFESSOR: "Professor",
    AvailableAdminRole.TUTOR: "Tutor",
    AvailableAdminRole.COORDINATOR: "Coordinator",
}

STUDENT_ROLE_NAMES = {
    AvailableStudentRole.GROUP_LEADER: "Group Leader",
    AvailableStudentRole.MEMBER: "Member",
}


class AdminRole(db.Model):
    __tablename__ = "admin_roles"

    admin_role_id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    def __repr__(self):
        return f"<AdminRole {self.name}>"


class StudentRole(db.Model):
    __tablename__ = "student_roles"

    student_role_id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    def __repr__(self):
        return f"<StudentRole {self.name}>"


# ---------- Accounts ----------
class _PasswordMixin:
    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)


class Admin(UserMixin, _PasswordMixin, db.Model):
    __tablename__ = "admins"

    admin_id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    admin_role_id: Mapped[int] = mapped_column(
        ForeignKey("admin_roles.admin_role_id", ondelete="RESTRICT"), nullable=False
    )

    role = relationship("AdminRole")

    is_admin = True

    # Flask-Login: id должен различать админов и студентов
    def get_id(self):
        return f"admin:{self.admin_id}"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def has_role(self, *roles: AvailableAdminRole) -> bool:
        return self.admin_role_id in {int(r) for r in roles}

    def __repr__(self):
        return f"<Admin {self.email}>"


class Student(UserMixin, _PasswordMixin, db.Model):
    __tablename__ = "students"

    student_id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    university_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    is_pending: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")

    is_admin = False

    def get_id(self):
        return f"student:{self.student_id}"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Student {self.email}>"


class CoordinatorProject(db.Model):
    __tablename__ = "coordinator_projects"

    coordinator_project_id: Mapped[int] = mapped_column(primary_key=True)
    admin_id: Mapped[int] = mapped_column(ForeignKey("admins.admin_id", ondelete="CASCADE"), nullable=False)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False)
    assigned_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    admin = relationship("Admin")
    project = relationship("Project")

    __table_args__ = (
        UniqueConstraint("admin_id", "project_id", name="uq_coordinator_projects_admin_project"),
    )


class Blacklist(db.Model):
    __tablename__ = "blacklist"

    blacklist_id: Mapped[int] = mapped_column(primary_key=True)
    university_id: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    banned_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
