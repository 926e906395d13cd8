"""
services/upstream.py

Base HTTP client shared by every upstream REST service the console talks to.

- One client per service (academic, attendance, incidents, events, grades,
  institutions, users, students, files). Each subclass only declares paths.
- Failures always surface as UpstreamError; callers never see raw httpx errors.
- No caching, no retries: every call goes to the service and a failure is
  reported to the console user, who retries by hand.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Failed call to an upstream service"""

    def __init__(self, service: str, status_code: int, message: str):
        super().__init__(f"[{service}] {message}")
        self.service = service
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    # prefer the service's own message, then the raw body
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    text = response.text.strip()
    return text or f"HTTP {response.status_code}"


class UpstreamClient:
    """Synchronous httpx client bound to one service base URL"""

    service = "upstream"

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # tests inject httpx.MockTransport here
        self.transport = transport

    def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """Common request handling: returns parsed JSON, None for empty bodies"""
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{self.service} {method} {url}")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()
        except httpx.TimeoutException:
            logger.warning(f"{self.service} timeout: {method} {url}")
            raise UpstreamError(self.service, 504, f"{self.service} service timed out")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = _error_message(e.response)
            logger.warning(f"{self.service} HTTP {status}: {method} {url} -> {message}")
            raise UpstreamError(self.service, status, message)
        except httpx.HTTPError as e:
            logger.error(f"{self.service} unreachable: {method} {url} ({e})")
            raise UpstreamError(self.service, 503, f"{self.service} service unavailable")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # some endpoints answer with plain text ("deleted", ids, ...)
            return response.text

    # ===============================================================
    # verbs
    # ===============================================================

    def get(self, endpoint: str = "", **kwargs) -> Any:
        return self._make_request("GET", endpoint, **kwargs)

    def post(self, endpoint: str = "", **kwargs) -> Any:
        return self._make_request("POST", endpoint, **kwargs)

    def put(self, endpoint: str = "", **kwargs) -> Any:
        return self._make_request("PUT", endpoint, **kwargs)

    def patch(self, endpoint: str = "", **kwargs) -> Any:
        return self._make_request("PATCH", endpoint, **kwargs)

    def delete(self, endpoint: str = "", **kwargs) -> Any:
        return self._make_request("DELETE", endpoint, **kwargs)

    # ===============================================================
    # envelope helpers
    # ===============================================================

    def unwrap(self, payload: Any) -> Any:
        """
        Strip the {success, message, data} envelope some services use.
        - success == False raises even though the HTTP status was 2xx
        - bare payloads pass through untouched
        """
        if isinstance(payload, dict) and ("success" in payload or "data" in payload):
            if payload.get("success") is False:
                raise UpstreamError(
                    self.service, 400, payload.get("message") or "request rejected"
                )
            return payload.get("data")
        return payload

    def unwrap_list(self, payload: Any) -> List[Dict[str, Any]]:
        data = self.unwrap(payload)
        if data is None:
            return []
        if isinstance(data, dict):
            # paged responses: {"content": [...]}
            for key in ("content", "items", "data"):
                if isinstance(data.get(key), list):
                    return data[key]
            return [data]
        return list(data)


async def gather(*calls: Callable[[], Any]) -> List[Any]:
    """Run independent blocking calls in worker threads, results in call order"""
    loop = asyncio.get_running_loop()
    return list(await asyncio.gather(*[loop.run_in_executor(None, c) for c in calls]))


async def run_blocking(fn, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))


def safe_list(label: str, call: Callable[[], List[Any]]) -> List[Any]:
    """Reference-data loads degrade to an empty list instead of failing the page"""
    try:
        return call()
    except UpstreamError as e:
        logger.warning(f"{label} reference load failed: {e.message}")
        return []
