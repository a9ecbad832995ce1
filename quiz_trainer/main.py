"""
Quiz Trainer API - Main Application
Quiz tree management, LLM quiz generation, quiz runs and history
FILE: quiz_trainer/main.py
"""
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import time

from quiz_trainer.core.config import Settings, get_settings
from quiz_trainer.db.file_store import init_data_dir
from quiz_trainer.services.llm_client import health_check as llm_health_check
from quiz_trainer.api.categories import router as categories_router
from quiz_trainer.api.generate import router as generate_router
from quiz_trainer.api.history import router as history_router
from quiz_trainer.api.quizzes import router as quizzes_router
from quiz_trainer.api.sessions import router as sessions_router
from quiz_trainer.api.users import router as users_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info("🚀 Starting Quiz Trainer API...")
    settings = get_settings()

    try:
        init_data_dir(settings)
    except Exception as e:
        logger.error(f"❌ Startup error: {e}")
        raise

    llm_status = llm_health_check(settings)
    if not llm_status.get("configured"):
        logger.warning(f"⚠ LLM provider '{llm_status['provider']}' has no API key, generation will fail")

    yield

    logger.info("🛑 Shutting down Quiz Trainer API...")


app = FastAPI(
    title="Quiz Trainer API",
    description="""
    Quiz learning backend with a file-based quiz tree.

    ## Features
    - **Quiz Tree**: Categories, subcategories and quiz documents stored as JSON files
    - **Generation**: Create quizzes from text, uploaded files or web pages via an LLM
    - **Quiz Runs**: Shuffled questions and answers, immediate or summary feedback
    - **History**: Completed sessions per user

    ## Endpoints
    - **Quizzes**: `/api/quizzes`, `/api/quiz/{category}/{subcategory}/{filename}`
    - **Management**: `/api/categories`, `/api/save-quiz`, `/api/quiz-management`
    - **Generation**: `/api/generate-quiz`, `/api/scrape`
    - **Quiz Runs**: `/api/sessions/*`
    - **History**: `/api/history/*`
    - **Users**: `/api/users`, `/api/login`
    - **Health**: `/health` - Overall service health check
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time to response headers"""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000  # Convert to ms
    response.headers["X-Process-Time-Ms"] = str(round(process_time, 2))
    return response


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    logger.info(f"📨 {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(
        f"📤 {request.method} {request.url.path} - "
        f"Status: {response.status_code}"
    )
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Unexpected errors become a generic 500"""
    logger.error(f"❌ Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


# ==================== INCLUDE ROUTERS ====================

app.include_router(quizzes_router, prefix="/api")
app.include_router(categories_router, prefix="/api")
app.include_router(generate_router, prefix="/api")
app.include_router(sessions_router, prefix="/api")
app.include_router(history_router, prefix="/api")
app.include_router(users_router, prefix="/api")


# ==================== ROOT ENDPOINTS ====================

@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Quiz Trainer API",
        "version": "1.0.0",
        "status": "operational",
        "endpoints": {
            "docs": "/docs",
            "redoc": "/redoc",
            "quizzes": "/api/quizzes",
            "generate": "/api/generate-quiz",
            "sessions": "/api/sessions",
            "history": "/api/history",
            "users": "/api/users",
            "health": "/health"
        }
    }


@app.get("/health", tags=["Health"])
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check for the data directory and the LLM provider

    The LLM only affects generation, so a missing API key reports
    "degraded" without failing the check.

    Returns:
        Health status for all components
    """
    health_status = {
        "status": "healthy",
        "timestamp": time.time(),
        "components": {}
    }

    overall_healthy = True

    data_path = settings.data_path
    if data_path.is_dir():
        health_status["components"]["storage"] = {
            "status": "healthy",
            "path": str(data_path.resolve())
        }
    else:
        overall_healthy = False
        health_status["components"]["storage"] = {
            "status": "unhealthy",
            "message": f"Data directory missing: {data_path}"
        }
        logger.error(f"❌ Storage health check failed: {data_path} missing")

    llm_status = llm_health_check(settings)
    health_status["components"]["llm"] = llm_status

    if not overall_healthy:
        health_status["status"] = "unhealthy"
    elif not llm_status.get("configured"):
        health_status["status"] = "degraded"

    health_status["api"] = {
        "title": app.title,
        "version": app.version,
        "status": "operational"
    }

    status_code = 200 if overall_healthy else 503

    return JSONResponse(
        status_code=status_code,
        content=health_status
    )


# ==================== RUN APPLICATION ====================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "quiz_trainer.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
        log_level="info"
    )
