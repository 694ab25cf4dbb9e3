"""
FastAPI application entry point for the SAMIT portal.

This is the main app that:
- Initializes FastAPI with CORS and the edge access middleware
- Turns portal errors into redirects or JSON responses
- Registers all routers
- Provides health check endpoint
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from samit import database
from samit.config import settings
from samit.errors import AuthorizationError, DependencyError, PortalError
from samit.middleware import AccessMiddleware
# Import API routers
from samit.api import admin, apply, auth, dashboard, organization, public

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    
    On shutdown: Close database connections gracefully
    """
    logger.info("🚀 Starting SAMIT portal API...")
    logger.info(f"📊 Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}")
    logger.info(f"🔧 Debug mode: {settings.debug}")
    
    yield
    
    logger.info("👋 Shutting down SAMIT portal API...")
    await database.engine.dispose()


app = FastAPI(
    title="SAMIT Portal API",
    description="Job board and Japanese language school portal",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure CORS
# Set ALLOWED_ORIGINS environment variable with comma-separated domains
allowed_origins = [settings.get_site_url()]
if settings.allowed_origins:
    allowed_origins.extend(origin.strip() for origin in settings.allowed_origins.split(','))

app.add_middleware(AccessMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    return RedirectResponse(exc.redirect_to, status_code=303)


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Unhandled database error on {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": DependencyError.default_message})


# Health check endpoint
@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "SAMIT Portal API",
        "version": "1.0.0",
    }


# Root endpoint
@app.get("/")
async def root():
    """API root with basic info and the public client settings."""
    return {
        "message": "SAMIT Portal API",
        "version": "1.0.0",
        "site_url": settings.get_site_url(),
        "anon_key": settings.site_anon_key,
        "docs": "/docs",
        "health": "/health",
    }


# Register routers
app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(auth.session_router, tags=["auth"])
app.include_router(public.router, tags=["public"])
app.include_router(dashboard.router, tags=["dashboard"])
app.include_router(apply.router, tags=["apply"])
app.include_router(organization.router, tags=["organization"])
app.include_router(admin.router, tags=["admin"])
