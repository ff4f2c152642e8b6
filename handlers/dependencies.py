"""
handlers/dependencies.py
------------------------
FastAPI dependencies that hand the app's injected resources and the
decoded request body to handlers.
Tests swap the resources through ``app.dependency_overrides``.
"""

import json
from typing import Any

from fastapi import Request

from db.connection import ConnectionPool
from errors import MalformedRequest, StoreUnavailable
from repositories.cadastro_repo import CadastroRepository

_FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_pool(request: Request) -> ConnectionPool:
    db_pool = request.app.state.pool
    if db_pool is None:
        raise StoreUnavailable("Database pool not initialized.")
    return db_pool


def get_repository(request: Request) -> CadastroRepository:
    repository = request.app.state.repository
    if repository is None:
        raise StoreUnavailable("Database pool not initialized.")
    return repository


async def read_payload(request: Request) -> dict[str, Any]:
    """
    Decode the request body as a JSON object or an HTML form.

    Bodies that are empty, or valid JSON but not an object, yield ``{}`` so
    the missing fields reach the database and fail on its constraints.

    Raises:
        MalformedRequest: If a JSON body cannot be parsed.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(_FORM_CONTENT_TYPES):
        form = await request.form()
        return dict(form)

    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise MalformedRequest(f"Invalid JSON body: {e}") from e
    return payload if isinstance(payload, dict) else {}
