import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .metrics import REQUEST_ERRORS
from .logging_setup import set_request_id

logger = logging.getLogger(__name__)


class RequestIdAndTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(req_id)
        start = time.perf_counter()
        status_code = None
        route_label = request.url.path.rsplit("/", 1)[-1] or request.url.path
        try:
            response = await call_next(request)
            status_code = int(getattr(response, "status_code", 200))
            response.headers["X-Request-ID"] = req_id
            return response
        except Exception:
            # Count unhandled exceptions as 5xx
            REQUEST_ERRORS.labels(route=route_label).inc()
            raise
        finally:
            dur_ms = 1000.0 * (time.perf_counter() - start)
            logger.info("request", extra={"path": request.url.path, "status": status_code, "lat_ms": round(dur_ms, 2)})
            if status_code and status_code >= 500:
                REQUEST_ERRORS.labels(route=route_label).inc()
            set_request_id(None)
