"""
Per-client request rate limiting.

Counters live in a `limits` storage backend (in process memory by default,
any `limits` storage URI such as redis:// otherwise), keyed by
"<client address>:<wall-clock minute>". The window is therefore aligned to
the clock rather than truly sliding: a burst straddling a minute boundary
lands in two buckets. With the memory backend, several API processes each
count on their own, multiplying the effective limit.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from flask import abort, request
from limits.storage import Storage, storage_from_string

logger = logging.getLogger(__name__)

WINDOW_SIZE = 59
DEV_REQUEST_LIMIT = 15
PROD_REQUEST_LIMIT = 50
DEFAULT_STORAGE_URI = "memory://"


class RateLimiter:
    """
    Flask extension: counts requests per client and window, rejecting with
    429 once `limit` requests have been served in the current window.

        limiter = RateLimiter(limit=15)
        limiter.init_app(app)
    """

    def __init__(
        self,
        limit: int = DEV_REQUEST_LIMIT,
        window: int = WINDOW_SIZE,
        storage: Optional[Storage] = None,
        storage_uri: str = DEFAULT_STORAGE_URI,
        clock: Callable[[], float] = time.time,
    ):
        self.limit = limit
        self.window = window
        self.clock = clock
        self.storage = storage if storage is not None else storage_from_string(storage_uri)

    def init_app(self, app) -> None:
        app.extensions["rate_limiter"] = self
        app.before_request(self.check_request)

    def key_for(self, client: str) -> str:
        minute = datetime.fromtimestamp(self.clock()).minute
        return f"{client}:{minute}"

    def hit(self, client: str) -> bool:
        """
        Register one request from `client`. Returns False when the request
        must be rejected. Storage failures let the request through.

        The increment is atomic in the storage backend; the counter's expiry
        is set by the first hit of the window and later hits keep it.
        """
        try:
            count = self.storage.incr(self.key_for(client), self.window)
        except Exception:
            logger.exception("Rate limiter storage failure for %s; allowing request", client)
            return True
        return count <= self.limit

    def check_request(self):
        client = request.remote_addr or "unknown"
        if not self.hit(client):
            logger.warning("Rate limit exceeded for %s on %s %s", client, request.method, request.path)
            abort(429, description="Too Many Requests")
