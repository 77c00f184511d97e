# backend/app/core/middleware.py
import logging
import traceback

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import settings

logger = logging.getLogger(__name__)


def internal_error_body(request: Request, exc: Exception) -> dict:
    """Beklenmeyen hata gövdesi; prod dışında mesaj ve stack de döner."""
    body = {"ok": False, "error_code": "INTERNAL_ERROR", "detail": "Internal Server Error"}
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        body["request_id"] = request_id
    if settings.ENV != "prod":
        body["detail"] = f"{type(exc).__name__}: {exc}"
        body["stack"] = traceback.format_exc()
    return body


class ErrorMiddleware(BaseHTTPMiddleware):
    """Router'ların eşlemediği her hatayı 500 INTERNAL_ERROR gövdesine çevirir."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"[ERROR] {request.method} {request.url.path} işlenemedi: {e}", exc_info=True)
            return JSONResponse(internal_error_body(request, e), status_code=500)
