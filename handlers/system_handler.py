"""
handlers/system_handler.py
--------------------------
Liveness check and the schema initialization endpoint.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from db.connection import ConnectionPool
from db.init_db import ensure_schema
from handlers.dependencies import get_pool
from handlers.envelope import envelope, store_call

router = APIRouter()


@router.get("/")
async def status():
    """Report that the API is up, with the current server time."""
    return {
        "message": "API PET Saúde funcionando!",
        "status": "online",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/api/create-table")
async def create_table(db_pool: ConnectionPool = Depends(get_pool)):
    """Create the cadastro table if it does not exist yet."""
    await store_call(ensure_schema, db_pool, action="create table")
    return envelope(message="Tabela criada com sucesso!")
