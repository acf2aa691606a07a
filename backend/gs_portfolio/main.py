import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gs_portfolio import __version__
from gs_portfolio.core.config import settings
from gs_portfolio.core.database import Base, engine
from gs_portfolio.core.minio_client import initialize_minio_bucket
from gs_portfolio.monitoring.setup import setup_monitoring
from gs_portfolio.routes import admin, pages, public
from gs_portfolio.schemas.common import error_envelope

logger = logging.getLogger("gs-portfolio")

@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        async with engine.begin() as conn:
            logger.info("Creating database tables: %s", ", ".join(Base.metadata.tables))
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Database initialization failed: %s", e)
        raise

    try:
        initialize_minio_bucket()
        logger.info("MinIO initialized")
    except Exception as e:
        logger.error("MinIO initialization failed: %s", e)
        raise

    yield

    await engine.dispose()
    logger.info("Application shutdown complete")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Content-Disposition", "Content-Length"],
)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors and errors[0].get("type") == "json_invalid":
        detail = "Malformed request body"
    elif errors:
        field = ".".join(str(p) for p in errors[0].get("loc", ()) if p not in ("path", "query", "body"))
        detail = f"Invalid value for '{field}'" if field else "Malformed request body"
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=400, content=error_envelope(detail))

app.include_router(public, prefix="/api")
app.include_router(admin, prefix="/api")
app.include_router(pages)

setup_monitoring(app)

@app.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info",
        timeout_keep_alive=60,
    )
