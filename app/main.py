from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os

# Import core components
from app.core.logging_config import setup_logging
from app.core.settings import settings
from app.middleware.logging import LoggingMiddleware

# Import configuration
from app.config import init_firebase

# Import route modules
from app.routes import coaching, evaluations, health, notifications, objectives, projects
from app.exceptions import LifecycleError, UnauthorizedException

# Set up logging first
logger = setup_logging()

# Allow exposing the interactive docs in development or when explicitly enabled
_docs_enabled = settings.is_development or os.getenv("SHOW_DOCS", "").lower() in ("1", "true", "yes")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    logger.info("=" * 50)
    logger.info("Performance & Development API starting up")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"CORS origins: {settings.cors_origins}")
    logger.info(f"SQL Debug: {'enabled' if settings.sql_debug else 'disabled'}")
    logger.info(f"Coaching gap threshold: {settings.coaching_gap_threshold}")

    from app.services.email import get_sendgrid_client
    email_status = "configured" if get_sendgrid_client() else "not configured (logging only)"
    logger.info(f"SendGrid Email: {email_status}")
    logger.info("=" * 50)

    yield
    # Shutdown logic
    logger.info("Performance & Development API shutting down gracefully")

app = FastAPI(
    title="Performance & Development API",
    description="Project objectives, self and referent evaluations, coaching reviews",
    version="1.0.0",
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
    lifespan=lifespan,
)

# Add middleware in correct order (last added = first executed)
app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

# Initialize Firebase (skip in test environment)
if not settings.is_test:
    init_firebase()

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(objectives.router, prefix="/assignments", tags=["Objectives"])
app.include_router(evaluations.self_evaluation_router, prefix="/objective-sets", tags=["Self-evaluation"])
app.include_router(evaluations.router, prefix="/evaluations", tags=["Evaluations"])
app.include_router(coaching.router, prefix="/coaching", tags=["Coaching"])
app.include_router(projects.router, prefix="/projects", tags=["Projects"])
app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])


# Exception handlers
@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(f"[{correlation_id}] Unauthorized access attempt on {request.url.path}")
    return JSONResponse(
        status_code=401,
        content={"detail": exc.detail, "correlation_id": correlation_id}
    )

@app.exception_handler(LifecycleError)
async def lifecycle_exception_handler(request: Request, exc: LifecycleError):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.warning(
        f"[{correlation_id}] {type(exc).__name__} on {request.url.path}: {exc.detail}"
    )
    content = {
        "detail": exc.detail,
        "error": type(exc).__name__,
        "correlation_id": correlation_id,
    }
    objective_ids = getattr(exc, "objective_ids", None)
    if objective_ids:
        content["objective_ids"] = objective_ids
    return JSONResponse(status_code=exc.status_code, content=content)

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    correlation_id = getattr(request.state, 'correlation_id', 'unknown')
    logger.error(f"[{correlation_id}] Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    if settings.is_development:
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error": str(exc),
                "correlation_id": correlation_id,
                "type": type(exc).__name__
            }
        )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id
        }
    )
