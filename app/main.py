# app/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import sys
import time
import psutil

# Import your core modules
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.core.session_store import session_store
from app.core.storage import STATIC_DIR, clear_downloads, ensure_storage_dirs
from app.services.pdf_service import resolve_wkhtmltopdf_path

# Routers
from app.api.endpoints import (
    applications as applications_router,
    form as form_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.DEBUG,
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="TRGC Faculty Recruitment Backend",
    version="1.0.0",
    description="Multi-step faculty application form: validation, PDF assembly and submission.",
)

# Global variables for metrics
START_TIME = time.time()

# ------------------------------------------------------------
# RATE LIMITING
# ------------------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ------------------------------------------------------------
# STATIC FILES (applicant download copies)
# ------------------------------------------------------------
ensure_storage_dirs()
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# ------------------------------------------------------------
# METRICS API
# ------------------------------------------------------------
@app.get("/api/metrics", tags=["System"])
async def metrics():
    uptime_seconds = int(time.time() - START_TIME)
    cpu_usage = psutil.cpu_percent(interval=None)
    ram_usage = psutil.virtual_memory().percent
    try:
        disk_usage = psutil.disk_usage(STATIC_DIR).percent
    except OSError:
        disk_usage = 0
    session_store.purge_expired()

    return {
        "status": "Online",
        "version": app.version,
        "cpu": cpu_usage,
        "ram": ram_usage,
        "disk": disk_usage,
        "uptime": uptime_seconds,
        "active_sessions": len(session_store),
        "submission_endpoint_configured": bool(settings.SUBMISSION_SCRIPT_URL),
    }


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "*"],
)

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(applications_router.router)
app.include_router(form_router.router)

# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting TRGC Faculty Recruitment Backend...")
    logger.info(f"wkhtmltopdf: {resolve_wkhtmltopdf_path()}")
    clear_downloads()

    if not settings.SUBMISSION_SCRIPT_URL:
        logger.warning("SUBMISSION_SCRIPT_URL is not set. Applications will be saved but not transmitted.")

    logger.success("Backend startup completed successfully.\n")


# ------------------------------------------------------------
# ROOT HEALTH CHECK
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "TRGC Faculty Recruitment Backend",
        "version": app.version,
        "message": "Backend running successfully",
    }
