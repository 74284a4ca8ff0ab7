"""
BrushQuest - Main Application

Backend for a toothbrushing companion app for children: AI-generated story
worlds narrated while kids brush, plus the admin API that builds them.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from pydantic import ValidationError as PydanticValidationError
import uvicorn
from contextlib import asynccontextmanager
from pathlib import Path
import logging
import sys
import os
import tempfile
import traceback
from datetime import datetime

from brushquest.config import get_settings
from brushquest.services.errors import BrushQuestError
from brushquest.services.database import DatabaseService
from brushquest.services.logger import init_logger
from brushquest.services.providers import Providers
from brushquest.services.jobs import JobRegistry
from brushquest.services.media import MediaService
from brushquest.services.story_pipeline import StoryPipeline
from brushquest.services.collectibles import CollectibleService
from brushquest.services.pets import PetService
from brushquest.api import routers
from brushquest.api.dependencies import set_services

# Configure logging to both file and console
# Use /tmp for Azure App Service (read-only filesystem) or local logs for development
if os.environ.get('WEBSITE_SITE_NAME'):  # Running on Azure App Service
    log_dir = Path(tempfile.gettempdir()) / "brushquest_logs"
else:
    log_dir = Path("logs")
log_dir.mkdir(exist_ok=True)
log_file = log_dir / f"brushquest_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

# Create formatters
file_formatter = logging.Formatter(
    '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
console_formatter = logging.Formatter('%(message)s')

# File handler (detailed logs)
file_handler = logging.FileHandler(log_file, encoding='utf-8')
file_handler.setLevel(logging.DEBUG)
file_handler.setFormatter(file_formatter)

# Console handler (user-friendly output)
console_handler = logging.StreamHandler(sys.stdout)
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(console_formatter)

# Configure root logger
logging.basicConfig(
    level=logging.DEBUG,
    handlers=[file_handler, console_handler]
)

logger = logging.getLogger(__name__)
logger.info(f"📝 Logging to: {log_file}")


# Global services
database_service: DatabaseService = None
job_registry: JobRegistry = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle management for the application.

    Initializes services on startup, waits for background jobs on shutdown.
    """
    # Startup
    global database_service, job_registry

    settings = get_settings()

    print("🪥 Initializing BrushQuest...")

    # Initialize logger with settings
    app_logger = init_logger(settings=settings)

    # Show debug status
    debug_flags = []
    if settings.debug_storage:
        debug_flags.append("Storage")
    if settings.debug_api_calls:
        debug_flags.append("API Calls")

    if debug_flags:
        print(f"🐛 Debug logging enabled: {', '.join(debug_flags)}")
        print(f"📊 Debug logs: {settings.debug_log_dir}/")

    # Azure SQL is optional at startup; routes that need it fail with a 500
    if settings.azure_sql_server:
        print("📊 Connecting to Azure SQL Database...")
        database_service = DatabaseService(
            server=settings.azure_sql_server,
            database=settings.azure_sql_database,
            username=settings.azure_sql_username,
            password=settings.azure_sql_password,
            logger=app_logger
        )
        database_service.initialize()
        print("✅ Azure SQL connected")
    else:
        print("⚠️  AZURE_SQL_SERVER not set - database routes are unavailable")

    # Provider clients are built lazily on first use
    providers = Providers(settings, app_logger=app_logger)

    print("🔍 Validating environment variables...")
    for key, ready in (
        ("GEMINI_API_KEY", providers.has_text),
        ("ELEVENLABS_API_KEY", bool(settings.elevenlabs_api_key)),
        ("AZURE_BLOB_CONNECTION_STRING", bool(settings.azure_blob_connection_string)),
    ):
        print(f"{'✅' if ready else '❌'} {key}{'' if ready else ' is missing'}")

    job_registry = JobRegistry(app_logger=app_logger)
    media = MediaService(providers, db=database_service, settings=settings, app_logger=app_logger)

    set_services(
        settings=settings,
        db=database_service,
        providers=providers,
        jobs=job_registry,
        media=media,
        pipeline=StoryPipeline(providers, database_service, job_registry, media, app_logger=app_logger),
        collectibles=CollectibleService(providers, database_service),
        pets=PetService(providers, database_service),
    )

    print(f"🪥 BrushQuest ready on port {settings.port}!")
    print(f"📚 API Documentation: http://localhost:{settings.port}/docs")

    yield

    # Shutdown
    print("👋 Shutting down BrushQuest...")
    await job_registry.drain()


# Create FastAPI app
app = FastAPI(
    title="BrushQuest",
    description="""
    Story-driven toothbrushing for children.

    Features:
    - AI world, pitch and story generation (story bible, chapters, storyboard)
    - Scene illustrations, avatars, reference sheets and expression sprites
    - Narration, name audio and background music
    - Child profiles, pets and collectible stickers
    """,
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
# Configure allowed origins from environment variable (default: "*" for all origins)
# For production with specific frontends: CORS_ALLOWED_ORIGINS=https://brushquest.app
_settings = get_settings()
_cors_origins = (
    ["*"] if _settings.cors_allowed_origins == "*"
    else [origin.strip() for origin in _settings.cors_allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BrushQuestError)
async def brushquest_exception_handler(request: Request, exc: BrushQuestError):
    """Known errors carry their own status; the client sees the message"""
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {type(exc).__name__}: {exc.message}")
    else:
        logger.info(f"⚠️ {request.method} {request.url.path}: {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Validation error handler - log details for debugging
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    error_details = []
    for error in errors:
        input_val = error.get('input', 'N/A')
        # Truncate long inputs for readability
        if isinstance(input_val, str) and len(input_val) > 100:
            input_val = input_val[:100] + "..."
        error_details.append(f"{error['loc']}: {error['msg']} (input: {input_val})")

    full_msg = " | ".join(error_details)
    logger.error(f"❌ Validation Error on {request.url.path}: {full_msg}")

    return JSONResponse(status_code=400, content={"error": f"Invalid request: {full_msg}"})


@app.exception_handler(PydanticValidationError)
async def model_validation_exception_handler(request: Request, exc: PydanticValidationError):
    """Bodies validated inside a handler (dispatch on type/entity)"""
    details = " | ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
    logger.error(f"❌ Validation Error on {request.url.path}: {details}")
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {details}"})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return JSONResponse(status_code=405, content={"error": "Method not allowed"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


# Global exception handler - catch unhandled exceptions to prevent crashes
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch all unhandled exceptions to prevent server crashes.
    Logs the error and returns a friendly error message.
    """
    error_id = datetime.now().strftime('%Y%m%d_%H%M%S_%f')

    # Log full traceback
    logger.error(f"❌ UNHANDLED EXCEPTION [{error_id}]")
    logger.error(f"   Path: {request.url.path}")
    logger.error(f"   Method: {request.method}")
    logger.error(f"   Error: {type(exc).__name__}: {exc}")
    logger.error(f"   Traceback:\n{''.join(traceback.format_exception(type(exc), exc, exc.__traceback__))}")

    # NOTE: Never expose exception details to clients; use error_id to find them in the logs
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please try again."
        }
    )


# Include routes
for router in routers:
    app.include_router(router)


def main():
    """Run the application"""
    settings = get_settings()
    uvicorn.run(
        "brushquest.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
