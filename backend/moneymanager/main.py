from fastapi import FastAPI, APIRouter, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from moneymanager.config import settings
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from moneymanager.api import (
    auth,
    categories,
    dashboard,
    exports,
    filters,
    ledger,
)
from moneymanager.services.exceptions import MoneyManagerError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    logger.info("Starting Money Manager API")
    from moneymanager.database.connection import init_db, close_db
    init_db(settings.DATABASE_URL)

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        from moneymanager.services.scheduler import NotificationScheduler
        scheduler = NotificationScheduler()
        scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down...")
    if scheduler is not None:
        scheduler.stop()
    close_db()


app = FastAPI(
    title="Money Manager API",
    description="API for tracking personal incomes, expenses and categories",
    version=APP_VERSION,
    lifespan=lifespan
)

# Security: rate limiter lives with the credential routes it protects
app.state.limiter = auth.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(MoneyManagerError)
async def money_manager_error_handler(request: Request, exc: MoneyManagerError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix=settings.API_PREFIX)


@api_router.get("/status")
@api_router.get("/about")
async def status():
    return {"status": "Application is running", "version": APP_VERSION}


api_router.include_router(auth.router)
api_router.include_router(categories.router)
api_router.include_router(ledger.incomes_router)
api_router.include_router(ledger.expenses_router)
api_router.include_router(filters.router)
api_router.include_router(dashboard.router)
api_router.include_router(exports.router)

app.include_router(api_router)

# Initialize Prometheus metrics instrumentation
Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    return {
        "message": "Money Manager API",
        "version": APP_VERSION,
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "moneymanager.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True
    )
