import threading
import time
from datetime import datetime
from unittest import mock

import pytest
from limits.storage import MemoryStorage

from utils.rate_limiter import RateLimiter

from conftest import FakeClock

# 12:00:00 local time, so a whole minute fits before the bucket changes
START = datetime(2026, 3, 1, 12, 0, 0).timestamp()


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def limiter(clock):
    return RateLimiter(limit=15, window=59, storage=MemoryStorage(), clock=clock)


class TestRateLimiter:
    def test_default_storage_is_in_memory(self):
        assert isinstance(RateLimiter().storage, MemoryStorage)

    def test_allows_limit_then_rejects(self, limiter):
        results = [limiter.hit("10.0.0.1") for _ in range(16)]
        assert results[:15] == [True] * 15
        assert results[15] is False

    def test_clients_are_counted_separately(self, limiter):
        for _ in range(15):
            limiter.hit("10.0.0.1")
        assert limiter.hit("10.0.0.1") is False
        assert limiter.hit("10.0.0.2") is True

    def test_new_minute_starts_a_new_bucket(self, limiter, clock):
        for _ in range(15):
            limiter.hit("10.0.0.1")
        assert limiter.hit("10.0.0.1") is False

        clock.advance(60)
        assert limiter.hit("10.0.0.1") is True

    def test_hits_do_not_extend_the_window(self, limiter):
        limiter.hit("10.0.0.1")
        key = limiter.key_for("10.0.0.1")
        expiry = limiter.storage.get_expiry(key)

        time.sleep(0.05)
        limiter.hit("10.0.0.1")
        assert limiter.storage.get_expiry(key) == expiry
        assert limiter.storage.get(key) == 2

    def test_key_uses_wall_clock_minute(self, limiter, clock):
        clock.advance(5 * 60)
        assert limiter.key_for("1.2.3.4") == "1.2.3.4:5"

    def test_concurrent_hits_never_exceed_limit(self, limiter):
        threads_count = 40
        barrier = threading.Barrier(threads_count)
        allowed = []
        allowed_lock = threading.Lock()

        def worker():
            barrier.wait()
            result = limiter.hit("10.0.0.9")
            with allowed_lock:
                allowed.append(result)

        threads = [threading.Thread(target=worker) for _ in range(threads_count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)

        assert len(allowed) == threads_count
        assert sum(allowed) == 15

    def test_storage_failure_fails_open(self, limiter):
        with mock.patch.object(limiter.storage, "incr", side_effect=RuntimeError("boom")):
            assert all(limiter.hit("10.0.0.1") for _ in range(20))


class TestRateLimiterMiddleware:
    def test_app_uses_configured_storage(self, app):
        assert isinstance(app.extensions["rate_limiter"].storage, MemoryStorage)

    def test_sixteenth_request_in_a_minute_is_rejected(self, app, client, clock):
        limiter = app.extensions["rate_limiter"]
        limiter.limit = 15
        limiter.clock = clock
        limiter.storage = MemoryStorage()

        for _ in range(15):
            assert client.get("/ping").status_code == 200

        resp = client.get("/ping")
        assert resp.status_code == 429
        assert resp.get_json()["error"] == "TOO_MANY_REQUESTS"

        clock.advance(60)
        assert client.get("/ping").status_code == 200
