import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import models so every table is registered with SQLAlchemy Base
from . import config, models  # noqa: F401
from .database import Base, engine
from .domain.auth.router import router as auth_router
from .domain.centers.router import router as centers_router
from .domain.contact.router import router as contact_router
from .domain.donations.router import router as donations_router
from .domain.matching.router import router as match_router
from .domain.requests.router import router as requests_router
from .domain.stats.router import router as stats_router
from .domain.users.router import router as users_router
from .security_headers import SecurityHeadersMiddleware
from .security_logger import log_security_event

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🩸 BloodConnect API starting up...")

    missing = config.validate_environment()
    if missing:
        if config.IS_PRODUCTION:
            logger.critical(f"❌ Missing required settings: {', '.join(missing)}")
            raise RuntimeError(f"Missing required settings: {', '.join(missing)}")
        logger.warning(f"⚠️ Missing settings (ok for development): {', '.join(missing)}")

    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("✅ Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"❌ Failed to create database tables: {e}")

    from .rate_limiter import get_redis_client

    if get_redis_client() is not None:
        logger.info("✅ Redis connection established")
    else:
        logger.info("ℹ️ Rate limiting uses in-memory counters")

    yield
    logger.info("BloodConnect API shutting down...")


app = FastAPI(title="BloodConnect API", version="1.0.0", lifespan=lifespan)


def _error_field(loc) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in ("body", "query", "path", "header"):
        parts = parts[1:]
    return ".".join(parts)


def _error_message(msg: str) -> str:
    return msg.removeprefix("Value error, ")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Validation failures are client errors: 400 with one entry per bad field"""
    errors = [
        {"field": _error_field(error.get("loc", ())), "message": _error_message(error.get("msg", ""))}
        for error in exc.errors()
    ]
    logger.warning(f"Validation error for {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"message": "Validation failed", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Server error"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    duration_ms = (time.time() - start) * 1000
    logger.info(f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms")
    return response


@app.middleware("http")
async def limit_request_size(request: Request, call_next):
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > config.MAX_REQUEST_SIZE:
        log_security_event(
            "payload_too_large", path=request.url.path, size=int(content_length)
        )
        return JSONResponse(status_code=413, content={"message": "Request entity too large"})
    return await call_next(request)


if config.SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(auth_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(requests_router, prefix="/api")
app.include_router(donations_router, prefix="/api")
app.include_router(match_router, prefix="/api")
app.include_router(stats_router, prefix="/api")
app.include_router(contact_router, prefix="/api")
app.include_router(centers_router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "message": "BloodConnect API is running"}
