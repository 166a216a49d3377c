from __future__ import annotations
import logging

from blueprints.core.errors import BadRequest, Conflict, NotFound
from extensions import db
from models import Blacklist
from .schemas import BlacklistIn

log = logging.getLogger(__name__)


def entries_query():
    return db.session.query(Blacklist).order_by(Blacklist.banned_at.desc(), Blacklist.blacklist_id.desc())


def create_entry(data: BlacklistIn) -> Blacklist:
    fields = {k: v.strip() for k, v in data.model_dump(exclude={"university_id"}).items()}
    for key, value in fields.items():
        if not value:
            raise BadRequest(f"{key.replace('_', ' ').capitalize()} cannot be empty")
    if db.session.query(Blacklist).filter_by(university_id=data.university_id).first():
        raise Conflict("University ID is already blacklisted")
    entry = Blacklist(university_id=data.university_id, **fields)
    db.session.add(entry)
    db.session.commit()
    log.info("university id %s blacklisted", data.university_id)
    return entry


def delete_entry(blacklist_id: int) -> None:
    entry = db.session.get(Blacklist, blacklist_id)
    if entry is None:
        raise NotFound("Blacklist entry not found")
    db.session.delete(entry)
    db.session.commit()
