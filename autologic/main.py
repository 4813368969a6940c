import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import models  # noqa: F401  (registers tables on Base)
from .config import ALLOWED_ORIGINS, ENVIRONMENT, SECURITY_HEADERS_ENABLED, SHOP_NAME
from .database import Base, engine
from .domain.admin.router import router as admin_router
from .domain.auth.router import router as auth_router
from .domain.blog.router import router as blog_router
from .domain.bookings.router import router as bookings_router
from .domain.contacts.router import router as contacts_router
from .domain.projects.router import router as projects_router
from .domain.reviews.router import router as reviews_router
from .domain.services.router import router as services_router
from .domain.uploads.router import router as uploads_router
from .domain.users.router import router as users_router
from .errors import register_exception_handlers
from .rate_limiter import RateLimitMiddleware, get_redis_client
from .security_headers import SecurityHeadersMiddleware
from .shared.timeutils import utcnow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("passlib").setLevel(logging.ERROR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    if get_redis_client() is not None:
        logger.info("Redis connection established")
    else:
        logger.warning("Redis unavailable - rate limiting will use in-memory windows only")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title=f"{SHOP_NAME} API", version="1.0.0", lifespan=lifespan)

register_exception_handlers(app)


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
        SecurityHeadersMiddleware, exclude_paths=["/api/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

app.add_middleware(RateLimitMiddleware)

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
api = APIRouter(prefix="/api")
api.include_router(auth_router)
api.include_router(users_router)
api.include_router(services_router)
api.include_router(bookings_router)
api.include_router(reviews_router)
api.include_router(projects_router)
api.include_router(blog_router)
api.include_router(contacts_router)
api.include_router(uploads_router)
api.include_router(admin_router)


@api.get("/health")
def health():
    return {
        "status": "success",
        "message": f"{SHOP_NAME} API is running",
        "environment": ENVIRONMENT,
        "timestamp": utcnow().isoformat(),
    }


app.include_router(api)


@app.get("/")
def root():
    return {"message": f"{SHOP_NAME} API is running"}
