from __future__ import annotations
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from extensions import db


class SecurityCode(db.Model):
    __tablename__ = "security_codes"

    security_code_id: Mapped[int] = mapped_column(primary_key=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_role_id: Mapped[int] = mapped_column(
        ForeignKey("student_roles.student_role_id", ondelete="CASCADE"), nullable=False
    )
    code: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    expiration: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    project = relationship("Project")
    role = relationship("StudentRole")

    def is_expired(self, now: datetime) -> bool:
        return self.expiration <= now
