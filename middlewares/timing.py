import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

# requests slower than this are logged; most of the time is spent upstream
SLOW_REQUEST_MS = 2000


class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        if latency_ms >= SLOW_REQUEST_MS:
            logger.warning(f"slow request {request.method} {request.url.path}: {latency_ms}ms")
        return response
