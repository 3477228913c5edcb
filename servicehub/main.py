import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

# Import all models to ensure they're registered with SQLAlchemy Base
from . import (
    models,  # noqa: F401
    models_availability,  # noqa: F401
    models_invoice,  # noqa: F401
)
from .config import ALLOWED_ORIGINS, SECURITY_HEADERS_ENABLED
from .database import Base, engine
from .domain.admin import router as admin_router
from .domain.availability import router as availability_router
from .domain.bookings import router as bookings_router
from .domain.businesses import router as businesses_router
from .domain.invoices import router as invoices_router
from .domain.ledger import router as ledger_router
from .domain.notifications import router as notifications_router
from .domain.pricing import router as pricing_router
from .domain.quotes import router as quotes_router
from .domain.reviews import router as reviews_router
from .errors import ServiceError, StoreFailure
from .security_headers import SecurityHeadersMiddleware

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
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except SQLAlchemyError as e:
        # Another worker may have created the tables first
        if "already exists" not in str(e):
            logger.error(f"Failed to create database tables: {e}")
            raise
        logger.info("Database tables already exist (created by another worker)")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="ServiceHub API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    """Database errors are logged in full but reach the client as a generic store error"""
    logger.error(f"❌ Database error on {request.method} {request.url.path}: {exc}")
    error = StoreFailure()
    return JSONResponse(status_code=error.status_code, content=error.to_content())


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={"error": "Not authenticated", "code": "unauthenticated"},
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={
            "error": "Request validation failed",
            "code": "invalid",
            "details": jsonable_errors(exc),
        },
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(businesses_router)
app.include_router(pricing_router)
app.include_router(availability_router)
app.include_router(bookings_router)
app.include_router(quotes_router)
app.include_router(invoices_router)
app.include_router(reviews_router)
app.include_router(ledger_router)
app.include_router(admin_router)
app.include_router(notifications_router)


@app.get("/")
def root():
    return {"message": "ServiceHub API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
