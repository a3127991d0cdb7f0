from pydantic_settings import BaseSettings
from typing import List
from pydantic import ValidationError, field_validator
import sys


class Settings(BaseSettings):
    DATABASE_URL: str
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
    ]
    BACKEND_CORS_ORIGIN_REGEXES: List[str] = []

    ENVIRONMENT: str = "development"

    # --- Database connection ---
    DATABASE_CONNECTION_MAX_RETRIES: int = 3
    DATABASE_CONNECTION_RETRY_BACKOFF_SECONDS: float = 1.0

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    # Pagination
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Ensure MySQL URLs always use the PyMySQL driver.

        Hosting panels usually hand out ``mysql://`` URLs, which SQLAlchemy maps
        to the ``mysqlclient`` C extension. We ship PyMySQL instead, so those
        URLs (and the ``mariadb://`` alias) are rewritten to
        ``mysql+pymysql://`` while SQLite and other backends are left untouched.
        """

        if not isinstance(value, str):
            return value

        if "+pymysql" in value:
            return value

        replacements = {
            "mysql://": "mysql+pymysql://",
            "mysql+mysqldb://": "mysql+pymysql://",
            "mariadb://": "mysql+pymysql://",
            "mariadb+mysqldb://": "mysql+pymysql://",
        }

        for prefix, target in replacements.items():
            if value.startswith(prefix):
                return target + value[len(prefix) :]

        return value


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Pretty-print missing or invalid environment variables.

    The exception bubbles up during module import, where it is hard to tell
    which variable is responsible, so the structured payload is written to
    stderr before re-raising.
    """

    header = "Configuration error while loading environment variables:"
    print(header, file=sys.stderr)

    details = exc.errors()
    if details:
        for error in details:
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "Unknown validation error")
            type_name = error.get("type")
            hint_parts = [message]
            if type_name:
                hint_parts.append(f"(type={type_name})")
            hint = " ".join(hint_parts)
            print(f"  - {location}: {hint}", file=sys.stderr)
    else:
        print(exc, file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
