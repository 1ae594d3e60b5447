"""Audit logging middleware — records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.db.base import async_session_factory
from app.domain.audit import AuditTrail

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def infer_entity(path: str) -> tuple[str, str | None]:
    """Map a request path to ``(entity_type, entity_id)``.

    ``/vendors`` → ("vendor", None); ``/bank-accounts/u1`` → ("bank_account", "u1").
    """
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        return "unknown", None
    if len(parts) >= 2:
        collection, entity_id = parts[-2], parts[-1]
    else:
        collection, entity_id = parts[-1], None
    return collection.replace("-", "_").rstrip("s"), entity_id


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written asynchronously AFTER the response is produced so
    it never adds latency to the request. Failures in audit logging are logged
    and never raise to the caller.
    """

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._pending: set[asyncio.Task] = set()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if request.method in _WRITE_METHODS:
            # Fire-and-forget: don't await here so the response is not delayed
            task = asyncio.create_task(
                self._record(request, response.status_code, duration_ms)
            )
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return response

    async def _record(
        self, request: Request, status_code: int, duration_ms: int
    ) -> None:
        """Persist an audit row. Errors are logged, not raised."""
        try:
            entity_type, entity_id = infer_entity(request.url.path)
            async with async_session_factory() as session:
                session.add(
                    AuditTrail(
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=f"{request.method}:{status_code}",
                        entity_type=entity_type,
                        entity_id=entity_id[:64] if entity_id else None,
                        description=f"{request.method} {request.url.path} → {status_code} ({duration_ms}ms)",
                    )
                )
                await session.commit()
        except Exception as exc:  # pragma: no cover
            logger.error("Audit write failed: %s", exc)
