from __future__ import annotations
from typing import Any, Iterable, Type, TypeVar

from flask import jsonify, request
from pydantic import BaseModel
from sqlalchemy.orm import Query

M = TypeVar("M", bound=BaseModel)


def parse_body(schema: Type[M]) -> M:
    """Валидирует JSON тела запроса; ValidationError превращается в 422 обработчиком core."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    return schema.model_validate(payload)


def dump(schema: Type[BaseModel], obj: Any) -> dict:
    return schema.model_validate(obj).model_dump(mode="json")


def dump_many(schema: Type[BaseModel], rows: Iterable[Any]) -> list[dict]:
    return [dump(schema, r) for r in rows]


def ok(data: Any, status: int = 200):
    return jsonify(data), status


def created(data: Any):
    return jsonify(data), 201


def no_content():
    return "", 204


def page_args(default_per_page: int = 50, max_per_page: int = 200) -> tuple[int, int]:
    page = max(request.args.get("page", 1, type=int) or 1, 1)
    per_page = request.args.get("per_page", default_per_page, type=int) or default_per_page
    return page, min(max(per_page, 1), max_per_page)


def paginate(query: Query, schema: Type[BaseModel]) -> dict:
    page, per_page = page_args()
    total = query.count()
    rows = query.offset((page - 1) * per_page).limit(per_page).all()
    return {"items": dump_many(schema, rows), "meta": {"page": page, "per_page": per_page, "total": total}}
