import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from eventbook.core.config import settings
from eventbook.core.errors import (
    CapacityExceededError,
    ConsistencyError,
    DuplicateAccountError,
    DuplicateBookingError,
    ForbiddenError,
    InvalidCredentialsError,
    LedgerError,
    NotFoundError,
    StoreUnavailableError,
)
from eventbook.core.logging import setup_logging
from eventbook.database.db import Base, engine
from eventbook.models import Booking, Event, User  # noqa: F401  (registers tables)
from eventbook.routes import auth, bookings, events, reports, users

setup_logging()
logger = logging.getLogger(__name__)

# Checked in order; first match wins
ERROR_STATUS = [
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (InvalidCredentialsError, 401),
    (CapacityExceededError, 400),
    (DuplicateBookingError, 400),
    (DuplicateAccountError, 400),
    (ConsistencyError, 409),
    (StoreUnavailableError, 503),
]

app = FastAPI(title="Event Booking API", version="1.0.0")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)

# Include the routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(events.router)
app.include_router(bookings.router)
app.include_router(reports.router)


@app.get("/healthz", tags=["health"])
def healthz():
    return {"status": "ok"}


@app.exception_handler(LedgerError)
def handle_ledger_error(request: Request, exc: LedgerError):
    status_code = next((code for kind, code in ERROR_STATUS if isinstance(exc, kind)), 500)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "code": exc.code})


@app.exception_handler(OperationalError)
def handle_store_fault(request: Request, exc: OperationalError):
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Booking store is unavailable, please try again.", "code": StoreUnavailableError.code},
    )


@app.exception_handler(Exception)
def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error", "code": "INTERNAL_ERROR"})
