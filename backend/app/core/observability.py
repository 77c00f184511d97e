# backend/app/core/observability.py
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .config import settings
from .logging_config import bind_request_context, clear_request_context, get_logger
from .middleware import internal_error_body

logger = get_logger("analytics.observability")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    İstek kimliği ve erişim logu.

    Gelen X-Request-ID korunur, yoksa üretilir; istek boyunca tüm log
    satırlarına bağlanır ve yanıta geri yazılır.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = req_id
        bind_request_context(req_id, path=request.url.path)

        if settings.REQUEST_LOG_ENABLED:
            client_ip = request.client.host if request.client else "unknown"
            logger.info("request_in", method=request.method, client=client_ip)

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception("request_failed", error=type(e).__name__)
            response = JSONResponse(internal_error_body(request, e), status_code=500)

        if settings.ADD_REQUEST_ID_HEADER:
            response.headers[REQUEST_ID_HEADER] = req_id
        if settings.REQUEST_LOG_ENABLED:
            logger.info(
                "request_out",
                method=request.method,
                status=response.status_code,
                duration_ms=int((time.perf_counter() - start) * 1000),
            )
        clear_request_context()
        return response
