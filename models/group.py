from __future__ import annotations
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db
from .common import utcnow


class Group(db.Model):
    __tablename__ = "groups"

    group_id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    project = relationship("Project")
    members = relationship(
        "GroupMember", back_populates="group",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="GroupMember.group_member_id",
    )

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_groups_project_name"),
    )

    def __repr__(self):
        return f"<Group {self.name}>"


class GroupMember(db.Model):
    __tablename__ = "group_members"

    group_member_id: Mapped[int] = mapped_column(primary_key=True)
    group_id: Mapped[int] = mapped_column(ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False)
    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_role_id: Mapped[int] = mapped_column(
        ForeignKey("student_roles.student_role_id", ondelete="CASCADE"), nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, server_default=func.now()
    )

    group = relationship("Group", back_populates="members")
    student = relationship("Student")
    role = relationship("StudentRole")

    __table_args__ = (
        UniqueConstraint("group_id", "student_id", name="uq_group_members_group_student"),
    )


class Complaint(db.Model):
    __tablename__ = "complaints"

    complaint_id: Mapped[int] = mapped_column(primary_key=True)
    from_group_id: Mapped[int] = mapped_column(ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False)
    to_group_id: Mapped[int] = mapped_column(ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    from_group = relationship("Group", foreign_keys=[from_group_id])
    to_group = relationship("Group", foreign_keys=[to_group_id])
