import asyncio
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from interntrack.core.database import session_manager, aget_db

from interntrack.api.v1.endpoints.analytics import router as analytics_router

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
import logging
from contextlib import asynccontextmanager
from interntrack.core.config import settings
from interntrack.core.exceptions import (
    InternTrackAPIException,
    integrity_error_handler,
    interntrack_exception_handler,
    unhandled_exception_handler,
)
from interntrack.core.limiter import limiter
from interntrack.services.GitHubClient import GitHubClient
from interntrack.services.NLPService import FeedbackAnalyzer, ensure_nltk_resources

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Async context manager for app lifespan events"""

    try:
        logger.info("🚀 Starting InternTrack analytics application...")

        logger.info("🔌 Initializing database connection pool...")
        await session_manager.init()
        logger.info("✅ Database connection pool ready")

        logger.info("🧠 Preparing NLP resources...")
        await asyncio.to_thread(ensure_nltk_resources, settings.NLP_DOWNLOAD_RESOURCES)
        app.state.feedback_analyzer = FeedbackAnalyzer()
        logger.info("✅ Feedback analyzer ready")

        app.state.github_client = GitHubClient(token=settings.github_token)
        logger.info(f"✅ GitHub client ready, monitoring {len(settings.MONITORED_REPOS)} repositories")

    except Exception as e:
        logger.critical(f"🔥 Application startup failed: {str(e)}")
        raise

    try:
        logger.info("🏁 InternTrack application startup complete")
        yield
    finally:
        try:
            logger.info("🛑 Beginning application shutdown...")

            github_client = getattr(app.state, "github_client", None)
            if github_client is not None:
                await github_client.aclose()
                logger.info("✅ GitHub client closed")

            logger.info("🔌 Closing database connections...")
            await session_manager.close()
            logger.info("✅ Database connections closed cleanly")
        except Exception as e:
            logger.error(f"⚠️ Error during shutdown: {str(e)}")
            raise
        finally:
            logger.info("👋 Application shutdown complete")


app = FastAPI(
    title="InternTrack API",
    description="Analytics API for InternTrack - Internship Management Platform",
    version="1.0.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_exception_handler(InternTrackAPIException, interntrack_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Request: {request.method} {request.url}")
    logger.info(f"Origin: {request.headers.get('origin')}")
    response = await call_next(request)
    logger.info(f"Response status: {response.status_code}")
    return response


# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.error(f"Validation Error: {exc.errors()}")
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors()},
    )


@app.get("/", tags=["Health Check"])
async def health_check(db: AsyncSession = Depends(aget_db)):
    try:
        await db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "service": "InternTrack API",
            "database": "connected",
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "service": "InternTrack API",
            "database": "disconnected",
            "error": str(e)
        }


app.include_router(analytics_router, prefix="/api/v1", tags=["Analytics"])

logger.info(f"✅ Loaded {len(app.routes)} routes")
