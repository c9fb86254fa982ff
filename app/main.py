# app/main.py
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import IntegrityError
from starlette.requests import Request

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.errors import AuthError, Unauthorized
from app.core.logging import get_logger, setup_logging
from app.db.bootstrap import run_migrations_and_seed

setup_logging(settings)
log = get_logger(__name__)

if not settings.JWT_SECRET:
    log.warning("jwt_secret_missing", environment=settings.ENVIRONMENT)

api = FastAPI(
    title="Portal Auth API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    swagger_ui_parameters={"displayRequestDuration": True, "persistAuthorization": True},
)

api.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# /metrics (Prometheus)
Instrumentator().instrument(api).expose(api, include_in_schema=False, should_gzip=True)

api.include_router(api_router, prefix="/api/v1")

@api.get("/healthz", tags=["health"])
def healthz():
    return {"status": "ok"}

@api.on_event("startup")
def startup():
    if settings.AUTO_MIGRATE:
        run_migrations_and_seed()

# ---------- error envelope ----------
def _error(status_code: int, code: str, message: str, details=None, headers=None) -> JSONResponse:
    body = {"code": code, "message": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)

@api.exception_handler(AuthError)
def handle_auth_error(request: Request, exc: AuthError):
    log.warning("request_rejected", code=exc.code, status=exc.status_code, path=request.url.path)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)

@api.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return _error(400, "VALIDATION_ERROR", "Request validation failed", details)

@api.exception_handler(IntegrityError)
def handle_integrity_error(request: Request, exc: IntegrityError):
    log.info("integrity_conflict", path=request.url.path)
    return _error(409, "CONFLICT", "Resource already exists")

@api.exception_handler(Exception)
def handle_unexpected(request: Request, exc: Exception):
    log.error("unhandled_exception", path=request.url.path, exc_info=exc)
    return _error(500, "INTERNAL_ERROR", "Internal server error")
