"""
handlers/envelope.py
--------------------
Uniform JSON response envelope and the error-translation layer.

Every handler runs its database call through :func:`store_call`, which turns
any driver or pool failure into a :class:`errors.CadastroError`. The
exception handlers installed by :func:`register_error_handlers` render those
as ``{"success": false, ...}`` so no failure reaches the transport unhandled.
"""

from typing import Any, Callable, Optional

import psycopg2
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from errors import (
    CadastroError,
    ConstraintViolation,
    NotFound,
    StoreError,
    StoreUnavailable,
)
from utils.logger import get_logger

logger = get_logger(__name__)


def envelope(
    status_code: int = 200,
    success: bool = True,
    headers: Optional[dict[str, str]] = None,
    **fields: Any,
) -> JSONResponse:
    """
    Build a response body ``{"success": ..., **fields}``.

    Dates and timestamps are encoded as ISO-8601 strings.
    """
    body = {"success": success, **fields}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def _driver_message(error: Exception) -> str:
    return str(error).strip() or error.__class__.__name__


async def store_call(func: Callable, *args: Any, action: str) -> Any:
    """
    Run a blocking repository call in the threadpool and translate failures.

    Args:
        func: Repository method to call.
        *args: Positional arguments for ``func``.
        action: Short description used in the error log line.

    Returns:
        Whatever ``func`` returns.

    Raises:
        StoreUnavailable: The pool could not hand out a connection.
        ConstraintViolation: A column constraint rejected the statement.
        StoreError: Any other failure.
    """
    try:
        return await run_in_threadpool(func, *args)
    except CadastroError as e:
        logger.error(f"Failed to {action}: {e}")
        raise
    except psycopg2.IntegrityError as e:
        logger.error(f"Failed to {action}: {e}")
        raise ConstraintViolation(_driver_message(e)) from e
    except psycopg2.OperationalError as e:
        logger.error(f"Failed to {action}: {e}")
        raise StoreUnavailable(_driver_message(e)) from e
    except Exception as e:
        logger.error(f"Failed to {action}: {e}")
        raise StoreError(_driver_message(e)) from e


async def _not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return envelope(exc.status_code, success=False, message=str(exc))


async def _cadastro_error_handler(request: Request, exc: CadastroError) -> JSONResponse:
    return envelope(exc.status_code, success=False, error=str(exc))


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unknown routes (404) and unsupported methods (405) end up here.
    return envelope(
        exc.status_code,
        success=False,
        headers=getattr(exc, "headers", None),
        error=str(exc.detail),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "; ".join(str(err.get("msg", "")) for err in exc.errors())
    return envelope(422, success=False, error=message or "Invalid request")


def register_error_handlers(app: FastAPI) -> None:
    """Install the envelope renderers for the CadastroError hierarchy and FastAPI's own errors."""
    app.add_exception_handler(NotFound, _not_found_handler)
    app.add_exception_handler(CadastroError, _cadastro_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
