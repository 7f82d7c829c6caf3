from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shortlink_app.config import settings
from shortlink_app.logging_config import setup_logging
from shortlink_app.database.connection import engine, Base
from shortlink_app.api import api_router, redirect_router
from shortlink_app.api.errors import register_exception_handlers
from shortlink_app.api.middleware import (
    BodySizeLimitMiddleware,
    LoggingMiddleware,
    SecurityHeadersMiddleware,
)
from shortlink_app.api.rate_limit import limiter

# Import models to ensure they're registered with Base
from shortlink_app import models  # noqa: F401

logger = setup_logging(
    level=settings.log_level,
    log_file=settings.log_file,
    json_format=settings.log_json,
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="URL shortening backend: accounts, short links and click analytics",
    debug=settings.debug
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_request_body_bytes)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(LoggingMiddleware)


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(api_router, prefix="/api")
# Catch-all /{code} must be registered last
app.include_router(redirect_router)

logger.info("%s %s started (%s)", settings.app_name, settings.app_version, settings.environment)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.host, port=settings.port)
