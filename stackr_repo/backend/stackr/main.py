import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from .api.v0.routers import api_router
from .core.config import settings
from .core.exceptions import InvalidAmount, NotFound
from .core.log_config import configure_logging
from .db.__init__db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    #startup
    configure_logging()
    init_db()
    logger.info("Database initialized")
    yield

    #shutdown
    logger.info("Shutting down Stackr backend...")


app = FastAPI(lifespan=lifespan, title="Stackr Finance Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)


app.include_router(api_router)


@app.get("/")
async def root():
    return {
        "message": "Stackr Finance API - Savings Challenges",
        "version": "1.0.0",
        "status": "healthy",
        "docs": "/docs",
        "endpoints": {
            "templates": "/api/v0/challenges/templates",
            "suggestions": "/api/v0/challenges/suggestions",
            "challenges": "/api/v0/users/{user_id}/challenges",
        }
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "database": "connected",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(InvalidAmount)
async def invalid_amount_handler(request: Request, exc: InvalidAmount):
    return JSONResponse(status_code=400, content={"detail": exc.message})


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": str(exc) if settings.DEBUG else "An error occurred"
        }
    )
