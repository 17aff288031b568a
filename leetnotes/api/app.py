"""FastAPI server for the LeetNotes extension"""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from leetnotes.api.routes.health import router as health_router
from leetnotes.api.routes.notes import router as notes_router
from leetnotes.api.routes.settings import router as settings_router
from leetnotes.config import APP_ENV, APP_VERSION, EXTENSION_ID
from leetnotes.infrastructure.database import init_database
from leetnotes.observability.logging import get_logger
from leetnotes.observability.telemetry import counter, log_event

logger = get_logger(__name__)

app = FastAPI(title="LeetNotes API", version=APP_VERSION)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Return field names only for malformed bodies.

    Side Effects:
        - Logs validation errors (request path only)
        - Increments validation error counter
    """
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    counter("api.validation_errors")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Invalid request format. Please check your request and try again.",
            "error_count": len(exc.errors()),
            "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
        },
    )


# CORS - the extension's origin, plus localhost and any unpacked extension in development
ALLOWED_ORIGINS: list[str] = []
if EXTENSION_ID:
    ALLOWED_ORIGINS.append(f"chrome-extension://{EXTENSION_ID}")

ALLOWED_ORIGIN_REGEX = None
if APP_ENV == "development":
    ALLOWED_ORIGINS.extend(
        [
            "http://localhost:3000",
            "http://localhost:8000",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:8000",
        ]
    )
    ALLOWED_ORIGIN_REGEX = r"chrome-extension://[a-p]{32}"

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_origin_regex=ALLOWED_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(health_router)
app.include_router(notes_router)
app.include_router(settings_router)


@app.on_event("startup")
async def initialize_database() -> None:
    """Create the settings/credentials tables if needed (idempotent)."""
    init_database()
    log_event("api.startup", service="leetnotes", version=APP_VERSION, env=APP_ENV)


@app.get("/")
def root() -> dict[str, str]:
    return {"service": "LeetNotes API", "version": APP_VERSION, "docs": "/docs"}
