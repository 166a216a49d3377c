from __future__ import annotations
import logging

from blueprints.core.errors import BadRequest, Forbidden
from blueprints.groups.services import get_group, membership
from extensions import db
from models import Complaint, Group, Project, Student

log = logging.getLogger(__name__)


def complaint_row(c: Complaint) -> dict:
    return {
        "complaint_id": c.complaint_id,
        "from_group_id": c.from_group_id,
        "from_group_name": c.from_group.name,
        "to_group_id": c.to_group_id,
        "to_group_name": c.to_group.name,
        "text": c.text,
        "created_at": c.created_at,
    }


def create_complaint(student: Student, *, from_group_id: int, to_group_id: int, text: str) -> Complaint:
    if not text or not text.strip():
        raise BadRequest("Complaint text cannot be empty")
    if from_group_id == to_group_id:
        raise BadRequest("A group cannot file a complaint against itself")
    source = get_group(from_group_id)
    if membership(source.group_id, student.student_id) is None:
        raise Forbidden("You are not a member of this group")
    target = get_group(to_group_id)
    if source.project_id != target.project_id:
        raise BadRequest("Both groups must belong to the same project")

    complaint = Complaint(from_group_id=source.group_id, to_group_id=target.group_id, text=text.strip())
    db.session.add(complaint)
    db.session.commit()
    log.info("complaint %s filed by group %s against group %s",
             complaint.complaint_id, source.group_id, target.group_id)
    return complaint


def project_complaints(project: Project) -> list[Complaint]:
    return (db.session.query(Complaint)
            .join(Group, Group.group_id == Complaint.from_group_id)
            .filter(Group.project_id == project.project_id)
            .order_by(Complaint.created_at, Complaint.complaint_id)
            .all())
