# app/main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import time
import psutil

from app.core.config import settings
from app.core.database import test_connection, init_db
from app.core.exceptions import DependencyError, StaffDeskError
from app.core.logging import configure_logging
from app.core.rate_limiter import limiter
from app.core.seeding_logic import seed_all

# Routers
from app.api.endpoints import (
    auth as auth_router,
    account as account_router,
    users as users_router,
    divisions as divisions_router,
    leaves as leaves_router,
    programs as programs_router,
    notifications as notifications_router,
    logs as logs_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
configure_logging()

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="StaffDesk Backend",
    version="1.0.0",
    description="Leave applications, advanced programs and the staff directory.",
)

START_TIME = time.time()

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ------------------------------------------------------------
# TYPED ERRORS → JSON
# ------------------------------------------------------------
@app.exception_handler(StaffDeskError)
async def staffdesk_error_handler(request: Request, exc: StaffDeskError):
    if isinstance(exc, DependencyError):
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ------------------------------------------------------------
# METRICS API
# ------------------------------------------------------------
@app.get("/api/metrics", tags=["System"])
async def metrics():
    uptime_seconds = int(time.time() - START_TIME)
    cpu_usage = psutil.cpu_percent(interval=None)
    ram_usage = psutil.virtual_memory().percent
    try:
        disk_usage = psutil.disk_usage('/').percent
    except OSError:
        disk_usage = 0

    # Database health & latency
    db_start = time.time()
    db_latency = 0
    try:
        await test_connection()
        current_db_status = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except Exception as e:
        logger.error(f"Metrics DB check failed: {e}")
        current_db_status = "Error"

    return {
        "status": "Online",
        "version": app.version,
        "cpu": cpu_usage,
        "ram": ram_usage,
        "disk": disk_usage,
        "uptime": uptime_seconds,
        "database": current_db_status,
        "db_latency": db_latency,
    }


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "*"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(auth_router.router)
app.include_router(account_router.router)
app.include_router(users_router.router)
app.include_router(divisions_router.router)
app.include_router(leaves_router.router)
app.include_router(programs_router.router)
app.include_router(notifications_router.router)
app.include_router(logs_router.router)


# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting StaffDesk Backend...")

    try:
        await test_connection()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Startup aborted: Database connection failed.")
        return

    await init_db()
    logger.success("Database tables ready.")

    await seed_all()
    logger.success("Backend startup completed successfully.")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "StaffDesk Backend",
        "version": app.version,
        "environment": settings.ENV,
    }
