from __future__ import annotations
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp

from async_mdc.core.config import settings
from async_mdc.core.logging import get_logger
from async_mdc.core.mdc import MDC, get_mdc

log = get_logger(__name__)


class MDCMiddleware(BaseHTTPMiddleware):
    """
    Open a fresh context scope for every request.

    The store is seeded with request_id (taken from the request id header or
    generated), method and path; handlers further down may get/set freely.
    The request id is echoed back on the response.
    """

    def __init__(self, app: ASGIApp, mdc: Optional[MDC] = None, header: Optional[str] = None) -> None:
        super().__init__(app)
        self.mdc = mdc or get_mdc()
        self.header = header or settings.REQUEST_ID_HEADER

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(self.header) or uuid.uuid4().hex
        store = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        response = await self.mdc.run(store, call_next, request)
        response.headers[self.header] = request_id
        log.debug("request done status=%s", response.status_code, extra={"request_id": request_id})
        return response
