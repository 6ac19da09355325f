# backend/toolcrib/main.py
import logging
import os
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Union

from fastapi import FastAPI, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import bootstrap, log_config
from .apps.loans.router import router as loans_router
from .apps.products.router import router as products_router
from .apps.workers.router import router as workers_router
from .errors import ServiceError

APP_ENV = os.getenv("APP_ENV", "development").lower()

log_config.configure_logging()
logger = logging.getLogger(__name__)


def _allowed_origins() -> List[str]:
    """
    Parse CORS_ALLOWED_ORIGINS from env.

    Accepts comma-separated origins. If unset, defaults to local dev ports.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if raw:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if origins:
            return origins
    return [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
        "http://localhost:3000",
    ]


def _field_path(loc: Sequence[Union[str, int]]) -> str:
    """("body", "items", 0, "cantidadPrestada") -> "items[0].cantidadPrestada"."""
    parts = list(loc)
    if parts and parts[0] in {"body", "query", "path", "header", "cookie"}:
        parts = parts[1:]
    path = ""
    for part in parts:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path or "body"


def _error_envelope(request: Request, message: str, status_code: int) -> Dict[str, Any]:
    return {
        "error": {
            "message": message,
            "status": status_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
        }
    }


app = FastAPI(title="Toolcrib API", version="1.0.0")
cors_origins = _allowed_origins()
allow_credentials = "*" not in cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def ensure_database(request: Request, call_next):
    if not bootstrap.is_initialized():
        await run_in_threadpool(bootstrap.ensure_initialized)
    return await call_next(request)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.info(
        "Request rejected",
        extra={"path": request.url.path, "code": exc.code, "detail": exc.message},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors: Dict[str, str] = {}
    for error in exc.errors():
        errors.setdefault(_field_path(error.get("loc", ())), error.get("msg", "Valor inválido"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Ruta no encontrada"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_envelope(request, message, exc.status_code),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"path": request.url.path})
    body = _error_envelope(
        request, "Error interno del servidor", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    if APP_ENV != "production":
        body["error"]["message"] = str(exc) or body["error"]["message"]
        body["error"]["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


@app.get("/", tags=["health"])
def read_root():
    return {
        "status": "ok",
        "message": "Toolcrib backend is running",
        "environment": APP_ENV,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health", tags=["health"])
def health():
    return {
        "status": "ok",
        "environment": APP_ENV,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(products_router)
app.include_router(workers_router)
app.include_router(loans_router)
