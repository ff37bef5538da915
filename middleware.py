from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from contextvars import ContextVar

import logging
import re
import time
import uuid

# Request ID of the evaluation currently being served
request_id_context: ContextVar[str] = ContextVar("request_id", default="N/A")

REQUEST_ID_HEADER = "X-Request-ID"

# Forwarded IDs end up in logs and response headers
FORWARDED_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

logger = logging.getLogger(__name__)


def resolve_request_id(forwarded: str | None) -> str:
    if forwarded and FORWARDED_ID_PATTERN.match(forwarded):
        return forwarded
    return str(uuid.uuid4())[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    @classmethod
    def request_id_context(cls):
        return request_id_context

    async def dispatch(self, request: Request, call_next):
        # Callers (e.g. the run lifecycle service) may forward their own ID so
        # an evaluation can be traced across services.
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        token = request_id_context.set(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

        except Exception:
            # Log with the request ID intact, then let FastAPI produce the 500
            logger.exception("Unhandled error during %s %s", request.method, request.url.path)
            raise

        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.debug("%s %s finished in %.1fms", request.method, request.url.path, elapsed_ms)
            # Reset the context variable when the request is done
            request_id_context.reset(token)

        return response
