"""
Main Application - Sales Analytics API

FastAPI application serving aggregate sales reports to the dashboard
frontend, plus the dashboard's static files.
"""

# ============================================================================
# IMPORTS
# ============================================================================
import logging
from pathlib import Path
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .config import config, setup_logging
from .database_adapter import get_database_adapter, DatabaseError
from .reports import reports_router, ReportQueryError

setup_logging()

# Global state
app_state = {
    "db_adapter": None,
    "sales_table": config.database.sales_table
}

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    app_state["db_adapter"] = get_database_adapter(config.database)
    app_state["sales_table"] = config.database.sales_table
    logger.info(
        f"Sales Analytics API ready on http://{config.web.host}:{config.web.port} "
        f"({config.database.db_type} backend, table '{config.database.sales_table}')"
    )

    yield

    # Shutdown
    logger.info("Shutting down application...")
    app_state["db_adapter"] = None


# Create FastAPI app
app = FastAPI(
    title="Sales Analytics API",
    description="Aggregate revenue, order and customer analytics for the sales dashboard",
    version="1.0.0",
    lifespan=lifespan
)


# Add request logging middleware with error handling
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with status and duration"""
    start_time = datetime.now()
    query_string = f"?{request.url.query}" if request.url.query else ""
    is_api = request.url.path.startswith("/api/")

    if is_api:
        logger.info(f"Request: {request.method} {request.url.path}{query_string}")

    try:
        response = await call_next(request)
    except Exception as e:
        duration = (datetime.now() - start_time).total_seconds()
        logger.error(
            f"EXCEPTION in {request.method} {request.url.path}{query_string} - "
            f"Duration: {duration:.3f}s - {type(e).__name__}: {e}",
            exc_info=True
        )
        raise

    duration = (datetime.now() - start_time).total_seconds()
    if response.status_code >= 500:
        logger.error(
            f"SERVER ERROR: {request.method} {request.url.path}{query_string} - "
            f"Status: {response.status_code} - Duration: {duration:.3f}s - "
            f"Client: {request.client.host if request.client else 'unknown'}"
        )
    elif response.status_code >= 400:
        logger.warning(
            f"CLIENT ERROR: {request.method} {request.url.path}{query_string} - "
            f"Status: {response.status_code} - Duration: {duration:.3f}s"
        )
    elif is_api:
        logger.info(f"Response: {request.method} {request.url.path} - Status: {response.status_code} - Duration: {duration:.3f}s")

    return response


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.web.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# ROUTES
# ============================================================================

app.include_router(reports_router)


@app.get("/api/health")
def health_check():
    """Report whether the database answers a trivial query"""
    adapter = app_state.get("db_adapter")
    if adapter is None:
        return {"status": "unhealthy", "database": "not initialized"}
    try:
        adapter.fetchone("SELECT 1 AS ok")
    except DatabaseError as e:
        logger.warning(f"Health check failed: {e}")
        return {"status": "unhealthy", "database": "unreachable"}
    return {"status": "healthy", "database": config.database.db_type}


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(ReportQueryError)
async def report_query_exception_handler(request: Request, exc: ReportQueryError):
    """Report queries that fail surface as a 500 with a message body"""
    return JSONResponse(
        status_code=500,
        content={"message": exc.message}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler for unhandled errors"""
    logger.error(
        f"Unhandled Exception: {request.method} {request.url.path}\n"
        f"  Exception Type: {type(exc).__name__}\n"
        f"  Message: {str(exc)}",
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={"message": "An unexpected error occurred"}
    )


# ============================================================================
# STATIC DASHBOARD
# ============================================================================

# Mounted last so that /api routes take precedence
if config.web.static_dir and Path(config.web.static_dir).is_dir():
    app.mount("/", StaticFiles(directory=config.web.static_dir, html=True), name="static")
