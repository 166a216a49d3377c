from __future__ import annotations
import logging

from sqlalchemy import select

from blueprints.core.errors import BadRequest, Forbidden, NotFound
from blueprints.groups.services import LEADER, get_group, membership
from blueprints.projects.services import ensure_project_access
from extensions import db
from models import Admin, Fair, GroupDeliverableSelection, Student, Transaction, as_utc_naive, utcnow
from .schemas import FairIn, FairUpdateIn

log = logging.getLogger(__name__)


# ---------- ярмарки ----------
def _check_fair_fields(details: str | None, start, end) -> None:
    if details is not None and not details.strip():
        raise BadRequest("Details field is mandatory")
    if end <= start:
        raise BadRequest("End date must be after start date")


def create_fair(admin: Admin, data: FairIn) -> Fair:
    ensure_project_access(admin, data.project_id)
    start, end = as_utc_naive(data.start_date), as_utc_naive(data.end_date)
    _check_fair_fields(data.details, start, end)
    fair = Fair(project_id=data.project_id, details=data.details.strip(), start_date=start, end_date=end)
    db.session.add(fair)
    db.session.commit()
    log.info("fair %s created for project %s", fair.fair_id, data.project_id)
    return fair


def get_fair(admin: Admin, fair_id: int) -> Fair:
    fair = db.session.get(Fair, fair_id)
    if fair is None:
        raise NotFound("Fair not found")
    ensure_project_access(admin, fair.project_id)
    return fair


def project_fairs(project_id: int) -> list[Fair]:
    return db.session.query(Fair).filter_by(project_id=project_id).order_by(Fair.start_date).all()


def update_fair(fair: Fair, data: FairUpdateIn) -> Fair:
    fields = data.model_dump(exclude_unset=True)
    if not fields:
        raise BadRequest("At least one field must be provided")
    if any(v is None for v in fields.values()):
        raise BadRequest("Fields cannot be null")
    start = as_utc_naive(fields["start_date"]) if "start_date" in fields else fair.start_date
    end = as_utc_naive(fields["end_date"]) if "end_date" in fields else fair.end_date
    _check_fair_fields(fields.get("details"), start, end)
    if "details" in fields:
        fair.details = fields["details"].strip()
    fair.start_date, fair.end_date = start, end
    db.session.commit()
    return fair


def delete_fair(fair: Fair) -> None:
    db.session.delete(fair)
    db.session.commit()


# ---------- покупки ----------
def transaction_row(t: Transaction) -> dict:
    selection = t.selection
    return {
        "transaction_id": t.transaction_id,
        "fair_id": t.fair_id,
        "buyer_group_id": t.buyer_group_id,
        "buyer_group_name": t.buyer_group.name,
        "seller_group_id": selection.group_id,
        "seller_group_name": selection.group.name,
        "group_deliverable_selection_id": t.group_deliverable_selection_id,
        "group_deliverable_name": selection.deliverable.name,
        "timestamp": t.timestamp,
    }


def create_transaction(student: Student, *, buyer_group_id: int, group_deliverable_selection_id: int,
                       fair_id: int) -> Transaction:
    buyer = get_group(buyer_group_id)
    member = membership(buyer.group_id, student.student_id)
    if member is None or member.student_role_id != LEADER:
        raise Forbidden("Only group leaders can buy deliverables")
    fair = db.session.get(Fair, fair_id)
    if fair is None:
        raise NotFound("Fair not found")
    selection = db.session.get(GroupDeliverableSelection, group_deliverable_selection_id)
    if selection is None:
        raise NotFound("Deliverable selection not found")

    if not (fair.project_id == buyer.project_id == selection.group.project_id):
        raise BadRequest("Fair, deliverable and buyer group must belong to the same project")
    if not fair.is_open(utcnow()):
        raise BadRequest("Fair is not open")
    if selection.group_id == buyer.group_id:
        raise BadRequest("A group cannot buy its own deliverable")

    tx = Transaction(
        buyer_group_id=buyer.group_id,
        group_deliverable_selection_id=selection.group_deliverable_selection_id,
        fair_id=fair.fair_id,
    )
    db.session.add(tx)
    db.session.commit()
    log.info("group %s bought selection %s at fair %s", buyer.group_id, selection.group_deliverable_selection_id,
             fair.fair_id)
    return tx


def group_transactions(student: Student, group_id: int) -> list[Transaction]:
    group = get_group(group_id)
    if membership(group.group_id, student.student_id) is None:
        raise Forbidden("You are not a member of this group")
    # группа видит и свои покупки, и продажи своей поставки
    seller_selection_ids = select(GroupDeliverableSelection.group_deliverable_selection_id).where(
        GroupDeliverableSelection.group_id == group_id
    )
    return (db.session.query(Transaction)
            .filter((Transaction.buyer_group_id == group_id)
                    | Transaction.group_deliverable_selection_id.in_(seller_selection_ids))
            .order_by(Transaction.timestamp)
            .all())


def fair_transactions(fair: Fair) -> list[Transaction]:
    return db.session.query(Transaction).filter_by(fair_id=fair.fair_id).order_by(Transaction.timestamp).all()
