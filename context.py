import logging
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

request_context: ContextVar[Optional[Request]] = ContextVar("request_context", default=None)


class RequestPathFilter(logging.Filter):
    """Tag log records with the method and path of the request being served"""

    def filter(self, record: logging.LogRecord) -> bool:
        request = request_context.get()
        record.request_path = f"{request.method} {request.url.path}" if request else "-"
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Expose the current request to code that doesn't receive it as a parameter"""

    async def dispatch(self, request: Request, call_next):
        token = request_context.set(request)
        try:
            return await call_next(request)
        finally:
            request_context.reset(token)
