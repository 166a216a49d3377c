from __future__ import annotations
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db
from .common import utcnow


# ---------- Group catalog ----------
class GroupDeliverable(db.Model):
    __tablename__ = "group_deliverables"

    group_deliverable_id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_group_deliverables_project_name"),
    )


class GroupDeliverableComponent(db.Model):
    __tablename__ = "group_deliverable_components"

    group_deliverable_component_id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_group_deliverable_components_project_name"),
    )


class GroupDeliverablesComponent(db.Model):
    """Состав поставки: компонент × количество."""
    __tablename__ = "group_deliverables_components"

    id: Mapped[int] = mapped_column(primary_key=True)
    group_deliverable_id: Mapped[int] = mapped_column(
        ForeignKey("group_deliverables.group_deliverable_id", ondelete="CASCADE"), nullable=False
    )
    group_deliverable_component_id: Mapped[int] = mapped_column(
        ForeignKey("group_deliverable_components.group_deliverable_component_id", ondelete="CASCADE"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    deliverable = relationship("GroupDeliverable")
    component = relationship("GroupDeliverableComponent")

    __table_args__ = (
        UniqueConstraint("group_deliverable_id", "group_deliverable_component_id",
                         name="uq_group_deliverables_components_pair"),
    )


class GroupDeliverableSelection(db.Model):
    __tablename__ = "group_deliverable_selections"

    group_deliverable_selection_id: Mapped[int] = mapped_column(primary_key=True)
    group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False, unique=True
    )
    group_deliverable_id: Mapped[int] = mapped_column(
        ForeignKey("group_deliverables.group_deliverable_id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    group = relationship("Group")
    deliverable = relationship("GroupDeliverable")
    implementation_details = relationship(
        "GroupComponentImplementationDetail", back_populates="selection",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="GroupComponentImplementationDetail.id",
    )


class GroupComponentImplementationDetail(db.Model):
    """Реализация одного компонента выбранной группой поставки."""
    __tablename__ = "group_component_implementation_details"

    id: Mapped[int] = mapped_column(primary_key=True)
    group_deliverable_selection_id: Mapped[int] = mapped_column(
        ForeignKey("group_deliverable_selections.group_deliverable_selection_id", ondelete="CASCADE"),
        nullable=False,
    )
    group_deliverable_component_id: Mapped[int] = mapped_column(
        ForeignKey("group_deliverable_components.group_deliverable_component_id", ondelete="CASCADE"),
        nullable=False,
    )
    markdown_description: Mapped[str] = mapped_column(Text, nullable=False)
    repository_link: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    selection = relationship("GroupDeliverableSelection", back_populates="implementation_details")
    component = relationship("GroupDeliverableComponent")

    __table_args__ = (
        UniqueConstraint("group_deliverable_selection_id", "group_deliverable_component_id",
                         name="uq_group_component_implementation_details_pair"),
    )


class Transaction(db.Model):
    __tablename__ = "transactions"

    transaction_id: Mapped[int] = mapped_column(primary_key=True)
    buyer_group_id: Mapped[int] = mapped_column(ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False)
    group_deliverable_selection_id: Mapped[int] = mapped_column(
        ForeignKey("group_deliverable_selections.group_deliverable_selection_id", ondelete="CASCADE"),
        nullable=False,
    )
    fair_id: Mapped[int] = mapped_column(ForeignKey("fairs.fair_id", ondelete="CASCADE"), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    buyer_group = relationship("Group")
    selection = relationship("GroupDeliverableSelection")
    fair = relationship("Fair")


# ---------- Student catalog ----------
class StudentDeliverable(db.Model):
    __tablename__ = "student_deliverables"

    student_deliverable_id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_student_deliverables_project_name"),
    )


class StudentDeliverableComponent(db.Model):
    __tablename__ = "student_deliverable_components"

    student_deliverable_component_id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "name", name="uq_student_deliverable_components_project_name"),
    )


class StudentDeliverablesComponent(db.Model):
    __tablename__ = "student_deliverables_components"

    id: Mapped[int] = mapped_column(primary_key=True)
    student_deliverable_id: Mapped[int] = mapped_column(
        ForeignKey("student_deliverables.student_deliverable_id", ondelete="CASCADE"), nullable=False
    )
    student_deliverable_component_id: Mapped[int] = mapped_column(
        ForeignKey("student_deliverable_components.student_deliverable_component_id", ondelete="CASCADE"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    deliverable = relationship("StudentDeliverable")
    component = relationship("StudentDeliverableComponent")

    __table_args__ = (
        UniqueConstraint("student_deliverable_id", "student_deliverable_component_id",
                         name="uq_student_deliverables_components_pair"),
    )


class StudentDeliverableSelection(db.Model):
    __tablename__ = "student_deliverable_selections"

    student_deliverable_selection_id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.student_id", ondelete="CASCADE"), nullable=False)
    student_deliverable_id: Mapped[int] = mapped_column(
        ForeignKey("student_deliverables.student_deliverable_id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow, server_default=func.now()
    )

    student = relationship("Student")
    deliverable = relationship("StudentDeliverable")

    __table_args__ = (
        UniqueConstraint("student_id", "student_deliverable_id",
                         name="uq_student_deliverable_selections_student_deliverable"),
    )


class StudentUpload(db.Model):
    __tablename__ = "student_uploads"

    upload_id: Mapped[int] = mapped_column(primary_key=True)
    student_deliverable_selection_id: Mapped[int] = mapped_column(
        ForeignKey("student_deliverable_selections.student_deliverable_selection_id", ondelete="CASCADE"),
        nullable=False,
    )
    path: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
