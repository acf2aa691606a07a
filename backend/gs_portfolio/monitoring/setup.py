import logging
import time

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.types import ASGIApp

from gs_portfolio.schemas.common import error_envelope

logger = logging.getLogger("gs-portfolio")

uploads_total = Counter("gs_uploads_total", "GS files uploaded")
upload_bytes_total = Counter("gs_upload_bytes_total", "Bytes of GS files and thumbnails uploaded")
deletes_total = Counter("gs_deletes_total", "GS files deleted")
login_attempts = Counter("admin_login_attempts_total", "Admin login attempts", ["result"])
expired_sessions_deleted = Counter("admin_expired_sessions_deleted_total", "Expired admin sessions swept")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self' 'unsafe-inline'; "
        "style-src 'self' 'unsafe-inline'; img-src 'self' data:"
    ),
}


def report_upload(file_bytes: int, thumbnail_bytes: int = 0) -> None:
    uploads_total.inc()
    upload_bytes_total.inc(file_bytes + thumbnail_bytes)


def report_delete() -> None:
    deletes_total.inc()


def report_login(success: bool) -> None:
    login_attempts.labels(result="success" if success else "failure").inc()


def report_session_sweep(deleted: int) -> None:
    if deleted:
        expired_sessions_deleted.inc(deleted)


def setup_monitoring(app: ASGIApp):
    Instrumentator(
        excluded_handlers=["/api/metrics", "/health"],
    ).instrument(app).expose(app, endpoint="/api/metrics", include_in_schema=False)

    @app.middleware("http")
    async def monitor_requests(request: Request, call_next):
        start_time = time.time()
        response = None
        try:
            response = await call_next(request)
        except HTTPException as e:
            logger.warning("HTTP exception: %s %s -> %s", request.method, request.url.path, e.detail)
            response = JSONResponse(status_code=e.status_code, content=error_envelope(str(e.detail)))
        except Exception as e:
            logger.exception("Unhandled error: %s %s -> %s", request.method, request.url.path, e)
            response = JSONResponse(status_code=500, content=error_envelope("Internal Server Error"))
        finally:
            process_time = time.time() - start_time
            logger.info("method=%s path=%s status=%s duration=%.4fs",
                        request.method, request.url.path,
                        getattr(response, "status_code", "?"), process_time)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
