import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from excel_analytics.core.config import settings
from excel_analytics.core.database import engine, Base
from excel_analytics.core.exceptions import AnalyticsError
from excel_analytics.core.logging_config import configure_logging
from excel_analytics.core.scheduler import start_scheduler, stop_scheduler
from excel_analytics.api.routes import admin, analysis, auth, uploads

configure_logging()
logger = logging.getLogger(__name__)

# Create tables that don't exist yet; the route imports above have
# registered every model on Base.metadata
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: Start background scheduler for the orphaned workbook sweep
    Shutdown: Stop background scheduler
    """
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Excel Analytics API",
    description="Upload Excel workbooks and build charts from their columns",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AnalyticsError)
async def analytics_error_handler(request: Request, exc: AnalyticsError):
    """Report domain errors as {"detail": message} with their own status"""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# All routes are prefixed with /api
app.include_router(auth.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")
app.include_router(analysis.router, prefix="/api")
app.include_router(admin.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {"message": "Excel Analytics API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {"status": "healthy"}
