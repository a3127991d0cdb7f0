import logging
import os
import re

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DisconnectionError, IntegrityError, OperationalError

# Application imports
from lexibox.core.config import settings
from lexibox.core.errors import AppError, TransientDatabaseError
from lexibox.db.base import Base
from lexibox.api.api import api_router
from lexibox.db import session as db_session

# --- Logging configuration ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# --- FastAPI application ---
app = FastAPI(
    title="Lexibox API",
    openapi_url="/api/openapi.json",
)


def _sanitize_origin(origin: str | None) -> str | None:
    if not origin:
        return None
    value = origin.strip()
    if not value:
        return None
    if not value.startswith("http"):
        value = f"https://{value}"
    return value.rstrip("/")


def _compile_origin_regex(patterns: set[str]) -> re.Pattern[str] | None:
    valid_patterns: list[str] = []
    for pattern in sorted(patterns):
        candidate = pattern.strip()
        if not candidate:
            continue

        try:
            re.compile(candidate)
        except re.error as exc:
            logger.warning("Ignoring invalid CORS regex: %s (%s)", candidate, exc)
            continue

        valid_patterns.append(candidate)

    if not valid_patterns:
        return None

    if len(valid_patterns) == 1:
        return re.compile(valid_patterns[0])

    combined = "|".join(f"(?:{pattern})" for pattern in valid_patterns)
    return re.compile(combined)


def _build_cors_config() -> tuple[list[str], re.Pattern[str] | None]:
    base_origins = {_sanitize_origin(o) for o in settings.BACKEND_CORS_ORIGINS}

    additional = os.getenv("ADDITIONAL_CORS_ORIGINS")
    if additional:
        for origin in additional.split(","):
            base_origins.add(_sanitize_origin(origin))

    allow_origins = sorted({origin for origin in base_origins if origin})

    regex_candidates = {
        pattern.strip()
        for pattern in settings.BACKEND_CORS_ORIGIN_REGEXES
        if pattern and pattern.strip()
    }
    allow_origin_regex = _compile_origin_regex(regex_candidates)

    logger.info("CORS origins: %s", allow_origins)
    if allow_origin_regex is not None:
        logger.info("CORS regex: %s", allow_origin_regex.pattern)

    return allow_origins, allow_origin_regex


# --- Middlewares ---
cors_origins, cors_regex = _build_cors_config()

cors_kwargs: dict[str, object] = {
    "allow_origins": cors_origins,
    "allow_credentials": True,
    "allow_methods": ["*"],
    "allow_headers": ["Authorization", "Content-Type"],
}

if cors_regex is not None:
    cors_kwargs["allow_origin_regex"] = cors_regex

app.add_middleware(CORSMiddleware, **cors_kwargs)


# --- Error handlers ---
def _error_response(status_code: int, message: str, code: str, details=None) -> JSONResponse:
    payload = {"success": False, "message": message, "code": code}
    if details is not None:
        payload["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=payload)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_payload()))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "The request is invalid.",
        "VALIDATION_ERROR",
        details=exc.errors(),
    )


@app.exception_handler(OperationalError)
@app.exception_handler(DisconnectionError)
async def database_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Database unavailable during %s %s: %s", request.method, request.url.path, exc)
    error = TransientDatabaseError("The database is unavailable, please retry later.")
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error during %s %s: %s", request.method, request.url.path, exc.orig)
    return _error_response(
        status.HTTP_409_CONFLICT,
        "The request conflicts with existing data.",
        "DUPLICATE_RESOURCE",
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error during %s %s", request.method, request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred.",
        "INTERNAL_SERVER_ERROR",
    )


app.include_router(api_router, prefix="/api")


# --- Startup ---
@app.on_event("startup")
def startup():
    logger.info("Checking and creating database tables...")
    Base.metadata.create_all(bind=db_session.engine)
    logger.info("Database tables are ready.")


# --- Root route ---
@app.get("/")
def read_root():
    return {"message": "Welcome to the Lexibox API!"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
