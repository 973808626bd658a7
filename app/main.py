import logging
from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.db.session import Base, engine
from app.models import company, branch, zone, contract, user, lookup, ticket, file  # noqa: F401  register mappers
from app.api.api_v1.endpoints import tickets as tickets_router
from app.api.api_v1.endpoints import company_data as company_data_router
from app.api.api_v1.endpoints import files as files_router

# Setup logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create all database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description="Multi-tenant facility maintenance ticketing API",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

register_exception_handlers(app)

# Setup CORS
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).strip() for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
        max_age=600,
    )

# Include routers
app.include_router(tickets_router.router, prefix="/api/v1")
app.include_router(company_data_router.router, prefix="/api/v1")
app.include_router(files_router.router, prefix="/api/v1")


# Root endpoints
@app.get("/", tags=["Root"])
async def root():
    """Welcome endpoint"""
    return {
        "message": "Welcome to the Facility Maintenance Ticketing API",
        "docs": "/api/docs",
        "version": settings.PROJECT_VERSION,
    }


@app.get("/api/v1/health", tags=["Root"])
async def health():
    """Liveness check"""
    return {
        "success": True,
        "message": "API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
