from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
from typing import Optional

from coursehub.core.config import Settings, settings as default_settings
from coursehub.core.database import build_engine, build_session_factory, create_db_and_tables
from coursehub.core.exceptions import CourseHubError
from coursehub.core.firebase_config import initialize_firebase_app
from coursehub.routes import api_router_v1, media_router
from coursehub.services.content_store import ContentStore

# Configure logging
logging.basicConfig(level=default_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Builds the application. Engine, session factory and settings live on
    `app.state`, so separate apps (e.g. per test) never share a database.
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="API for CourseHub: courses, lessons, quizzes and student progress tracking.",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL)
    app.state.session_factory = build_session_factory(app.state.engine)

    # --- Event Handlers ---
    @app.on_event("startup")
    def startup_event():
        logger.info("Application startup...")
        if settings.GOOGLE_APPLICATION_CREDENTIALS:
            try:
                initialize_firebase_app(settings.GOOGLE_APPLICATION_CREDENTIALS)
            except Exception as e:
                # Authenticated routes answer 500 until credentials are fixed
                logger.error(f"Critical error during Firebase initialization on startup: {e}", exc_info=True)
        else:
            logger.warning("GOOGLE_APPLICATION_CREDENTIALS not set; token verification will fail.")

        if settings.CREATE_TABLES_ON_STARTUP:
            logger.info("Creating database tables if they don't exist (dev mode)...")
            create_db_and_tables(app.state.engine)

        ContentStore(settings.UPLOADS_DIR).ensure_directories()

    @app.on_event("shutdown")
    def shutdown_event():
        logger.info("Application shutdown...")
        app.state.engine.dispose()

    # --- Middleware ---
    logger.info(f"Allowed CORS origins: {settings.CORS_ALLOWED_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        # Range responses are read by cross-origin media players
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length", "Content-Type"],
    )

    # --- Error Handlers ---
    @app.exception_handler(CourseHubError)
    async def coursehub_exception_handler(request: Request, exc: CourseHubError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} for request {request.method} {request.url}: {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception for request {request.method} {request.url}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An unexpected internal server error occurred."},
        )

    # --- API Routers ---
    app.include_router(api_router_v1)
    app.include_router(media_router)

    @app.get("/", tags=["Root"])
    def read_root():
        return {"message": f"Welcome to the {settings.PROJECT_NAME}! Navigate to /docs for API documentation."}

    return app


app = create_app()

# --- Main execution (for development) ---
if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "8000"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting Uvicorn server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=default_settings.LOG_LEVEL.lower())
