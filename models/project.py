from __future__ import annotations
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db


class Project(db.Model):
    __tablename__ = "projects"

    project_id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    max_student_uploads: Mapped[int] = mapped_column(Integer, nullable=False)
    max_group_size: Mapped[int] = mapped_column(Integer, nullable=False)
    max_groups: Mapped[int] = mapped_column(Integer, nullable=False, default=10, server_default="10")
    deliverable_selection_deadline: Mapped[datetime | None] = mapped_column(DateTime)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False)

    def selection_deadline_passed(self, now: datetime) -> bool:
        deadline = self.deliverable_selection_deadline
        return deadline is not None and now > deadline

    def __repr__(self):
        return f"<Project {self.name} {self.year}>"


class Fair(db.Model):
    __tablename__ = "fairs"

    fair_id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True
    )
    details: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    project = relationship("Project")

    def is_open(self, now: datetime) -> bool:
        return self.start_date <= now <= self.end_date
