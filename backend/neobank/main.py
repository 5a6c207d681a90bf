"""
Business Banking API — FastAPI Application Entry Point

Aggregates all routers, configures logging and middleware, serves stored
uploads, and initializes the database on startup.
"""
import logging
import os
import time
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from neobank.config import get_settings
from neobank.database import SessionLocal, init_db
from neobank.routes import (
    account_router, dashboard_router, cards_router, expenses_router,
    invoices_router, payments_router, onboarding_router, drafts_router,
)
from neobank.schemas.schemas import HealthResponse
from neobank.services.errors import NotFoundError, ConflictError

settings = get_settings()


# ─── Logging ─────────────────────────────────────────────────────────
def configure_logging() -> None:
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")

    file_handler = logging.FileHandler(os.path.join(settings.LOG_DIR, "server.log"))
    file_handler.setFormatter(formatter)
    console = logging.StreamHandler()
    console.setFormatter(formatter)

    root = logging.getLogger("neobank")
    root.setLevel(settings.LOG_LEVEL)
    root.handlers = [console, file_handler]


configure_logging()
logger = logging.getLogger("neobank.main")

# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "API for a UAE business banking app: KYB onboarding (company, ownership, "
        "compliance, documents), local drafts, account ledger, dashboard, cards, "
        "expenses and invoices."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
)

# ─── Startup ─────────────────────────────────────────────────────────
BOOT_TIME = time.time()


@app.on_event("startup")
def on_startup():
    """Initialize database tables, seed the demo organization and log boot info."""
    init_db()
    os.makedirs(settings.STORAGE_DIR, exist_ok=True)
    os.makedirs(settings.DRAFT_DIR, exist_ok=True)

    logger.info(
        "\n%s\n  %s v%s\n  TIME: %s\n  DATABASE: %s\n  STORAGE: %s\n  DEMO ORG: %s  ACCOUNT: %s  USER: %s\n  DEBUG: %s\n%s",
        "=" * 60, settings.APP_NAME, settings.APP_VERSION, datetime.now().isoformat(),
        settings.DATABASE_URL, settings.STORAGE_DIR,
        settings.DEMO_ORG_ID, settings.DEMO_ACCOUNT_ID, settings.DEMO_USER_ID,
        settings.DEBUG, "=" * 60,
    )


# ─── Middleware ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every API request with timing."""
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 1)

    if request.url.path.startswith("/api"):
        logger.info("%s %s -> %s (%sms)", request.method, request.url.path, response.status_code, duration)

    return response


# ─── Error Handlers ──────────────────────────────────────────────────
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc), "error_code": "not_found"})


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": str(exc), "error_code": "conflict"})


@app.exception_handler(OverflowError)
async def too_large_handler(request: Request, exc: OverflowError):
    return JSONResponse(status_code=413, content={"detail": str(exc), "error_code": "too_large"})


# ─── API Routers ─────────────────────────────────────────────────────
app.include_router(account_router)
app.include_router(dashboard_router)
app.include_router(cards_router)
app.include_router(expenses_router)
app.include_router(invoices_router)
app.include_router(payments_router)
app.include_router(onboarding_router)
app.include_router(drafts_router)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def deep_health():
    """Health check including database connectivity."""
    db_ok = False
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
    finally:
        db.close()

    return HealthResponse(
        status="healthy" if db_ok else "degraded",
        database="connected" if db_ok else "disconnected",
        version=settings.APP_VERSION,
        uptime_seconds=round(time.time() - BOOT_TIME, 1),
    )


# ─── Stored uploads ──────────────────────────────────────────────────
os.makedirs(settings.STORAGE_DIR, exist_ok=True)
app.mount("/storage", StaticFiles(directory=settings.STORAGE_DIR), name="storage")
