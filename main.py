from fastapi import FastAPI

from shortlink_app.config import settings
from shortlink_app.database.connection import engine, Base
from shortlink_app.logging_config import setup_logging
from shortlink_app.api.v1 import create, redirect

# Import models to ensure they're registered with Base
from shortlink_app.models import Link, LogEntry  # noqa: F401

setup_logging(settings.log_level)

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Short links with optional expiry and access passwords",
    debug=settings.debug
)


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
# /create before the catch-all /{slug}
app.include_router(create.router)
app.include_router(redirect.router)
