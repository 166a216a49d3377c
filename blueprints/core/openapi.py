"""OpenAPI 3.1 документ: пути из url_map приложения, схемы из pydantic-моделей блюпринтов."""
from __future__ import annotations
import importlib
import inspect
import re

from flask import Flask
from pydantic import BaseModel
from pydantic.json_schema import models_json_schema

SCHEMA_MODULES = (
    "auth", "users", "projects", "security_codes", "groups", "catalog",
    "selections", "fairs", "complaints", "blacklist",
)
_RULE_ARG = re.compile(r"<(?:(?P<converter>[a-z]+):)?(?P<name>\w+)>")
_HIDDEN_ENDPOINTS = {"static"}


def schema_models() -> list[type[BaseModel]]:
    found: list[type[BaseModel]] = []
    for name in SCHEMA_MODULES:
        module = importlib.import_module(f"blueprints.{name}.schemas")
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if issubclass(obj, BaseModel) and obj.__module__ == module.__name__:
                found.append(obj)
    return found


def _components() -> dict:
    models = schema_models()
    # In-модели описываем как вход, остальные как ответ
    pairs = [(m, "validation" if m.__name__.endswith("In") else "serialization") for m in models]
    _, top = models_json_schema(pairs, ref_template="#/components/schemas/{model}")
    return top.get("$defs", {})


def _operation(app: Flask, rule, method: str) -> dict:
    view = app.view_functions[rule.endpoint]
    blueprint, _, func_name = rule.endpoint.rpartition(".")
    doc = inspect.getdoc(view)
    op = {
        "operationId": f"{rule.endpoint}.{method.lower()}",
        "tags": [(blueprint or "core").removesuffix("_api")],
        "summary": doc.splitlines()[0] if doc else func_name.replace("_", " "),
        "responses": {"default": {"description": "JSON response or {\"error\": ...}"}},
    }
    params = [
        {"name": m["name"], "in": "path", "required": True,
         "schema": {"type": "integer" if m["converter"] == "int" else "string"}}
        for m in _RULE_ARG.finditer(rule.rule)
    ]
    if params:
        op["parameters"] = params
    if getattr(view, "required_login", None):
        op["security"] = [{"bearerAuth": []}]
    return op


def build_openapi(app: Flask) -> dict:
    paths: dict[str, dict] = {}
    for rule in sorted(app.url_map.iter_rules(), key=lambda r: r.rule):
        if rule.endpoint in _HIDDEN_ENDPOINTS:
            continue
        path = _RULE_ARG.sub(r"{\g<name>}", rule.rule)
        for method in sorted((rule.methods or set()) - {"HEAD", "OPTIONS"}):
            paths.setdefault(path, {})[method.lower()] = _operation(app, rule, method)
    return {
        "openapi": "3.1.0",
        "info": {
            "title": "Project Fair Backend API v1",
            "version": app.config.get("APP_VERSION", "0.1.0"),
            "license": {"name": "MIT", "identifier": "MIT"},
        },
        "paths": paths,
        "components": {
            "schemas": _components(),
            "securitySchemes": {"bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        },
    }
