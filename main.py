"""
main.py
-------
Entry point for the Cadastro API.

Responsibilities:
    - Build the FastAPI application around an injected connection pool.
    - Register CORS, the route handlers and the error envelope.
    - Optionally create the schema before serving traffic.
    - Run the server with uvicorn.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from config import API_HOST, API_PORT, AUTO_CREATE_SCHEMA, CORS_ORIGINS
from db.connection import ConnectionPool
from db.init_db import ensure_schema
from handlers import cadastro_handler, system_handler
from handlers.envelope import register_error_handlers
from repositories.cadastro_repo import CadastroRepository
from utils.logger import get_logger, uvicorn_log_config

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the pool if none was injected; close it on shutdown if we own it."""
    owns_pool = app.state.pool is None
    if owns_pool:
        logger.info("Initializing database...")
        app.state.pool = ConnectionPool.from_config()
        app.state.repository = CadastroRepository(app.state.pool)

    if AUTO_CREATE_SCHEMA:
        await run_in_threadpool(ensure_schema, app.state.pool)

    yield

    if owns_pool:
        app.state.pool.close()
        app.state.pool = None
        app.state.repository = None


def create_app(db_pool: Optional[ConnectionPool] = None) -> FastAPI:
    """
    Build the application.

    Args:
        db_pool: Pool to serve requests from. When omitted, one is built from
            config.py at startup and closed at shutdown.
    """
    app = FastAPI(title="API PET Saúde", lifespan=lifespan)
    app.state.pool = db_pool
    app.state.repository = CadastroRepository(db_pool) if db_pool is not None else None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(system_handler.router)
    app.include_router(cadastro_handler.router)
    return app


def main() -> None:
    """Initialize and run the API server."""
    logger.info(f"🚀 API PET Saúde starting on http://{API_HOST}:{API_PORT}")
    uvicorn.run(create_app(), host=API_HOST, port=API_PORT, log_config=uvicorn_log_config())
    logger.info("API PET Saúde stopped.")


if __name__ == "__main__":
    main()
