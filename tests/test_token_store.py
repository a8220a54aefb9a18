from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest

from models import storage
from models.refresh_token import UserRefreshToken
from utils.principal import UserPrincipal
from utils.security import TokenCodec, utcnow
from utils.token_store import LOCK_STRIPES, InvalidRefreshToken, PrincipalNotFound

from conftest import FakeClock


def _refresh_token(codec, user_id):
    return codec.generate_token_pair(UserPrincipal(id=user_id)).refresh_token


class TestSaveToken:
    def test_saves_record_with_expiry_from_claims(self, codec, user_store, user):
        token = _refresh_token(codec, user.id)
        record = user_store.save_token(user.id, token)

        claims = codec.validate_refresh_token(token)
        expected = datetime.fromtimestamp(claims["exp"], tz=timezone.utc).replace(tzinfo=None)
        assert record.expiry_date == expected
        assert record.principal_id == user.id
        assert user_store.find_token(token).id == record.id

    def test_cap_evicts_oldest(self, codec, user_store, user):
        user_store.clock = FakeClock(utcnow())
        tokens = []
        for _ in range(7):
            token = _refresh_token(codec, user.id)
            user_store.save_token(user.id, token)
            tokens.append(token)
            user_store.clock.advance(timedelta(seconds=1))

        assert user_store.count_tokens(user.id) == 6
        assert user_store.find_token(tokens[0]) is None
        for token in tokens[1:]:
            assert user_store.find_token(token) is not None

    def test_cap_never_exceeded_over_many_saves(self, codec, user_store, user):
        user_store.clock = FakeClock(utcnow())
        for _ in range(10):
            user_store.save_token(user.id, _refresh_token(codec, user.id))
            user_store.clock.advance(timedelta(milliseconds=5))
            assert user_store.count_tokens(user.id) <= 6

    def test_invalid_token_is_not_stored(self, user_store, user):
        with pytest.raises(InvalidRefreshToken):
            user_store.save_token(user.id, "not-a-token")
        assert user_store.count_tokens(user.id) == 0

    def test_expired_token_is_not_stored(self, app, user_store, user):
        past = utcnow() - timedelta(days=30)
        stale = TokenCodec(
            app.config["JWT_ACCESS_SECRET"],
            app.config["JWT_REFRESH_SECRET"],
            issuer=app.config["JWT_ISSUER"],
            clock=lambda: past,
        )
        with pytest.raises(InvalidRefreshToken):
            user_store.save_token(user.id, _refresh_token(stale, user.id))

    def test_unknown_principal(self, codec, user_store):
        with pytest.raises(PrincipalNotFound):
            user_store.save_token("missing-user", _refresh_token(codec, "missing-user"))


class TestFindAndRemove:
    def test_find_unknown_returns_none(self, user_store):
        assert user_store.find_token("nope") is None
        assert user_store.find_token("") is None

    def test_remove_is_idempotent(self, codec, user_store, user):
        token = _refresh_token(codec, user.id)
        user_store.save_token(user.id, token)

        user_store.remove_token(token)
        assert user_store.find_token(token) is None
        user_store.remove_token(token)
        user_store.remove_token("never-stored")
        assert user_store.count_tokens(user.id) == 0

    def test_consume_succeeds_only_once(self, codec, user_store, user):
        token = _refresh_token(codec, user.id)
        user_store.save_token(user.id, token)

        assert user_store.consume_token(token) is True
        assert user_store.consume_token(token) is False
        assert user_store.consume_token("") is False
        assert user_store.find_token(token) is None


class TestLocks:
    def test_lock_pool_is_fixed(self, user_store):
        pool = user_store._locks
        for i in range(1000):
            user_store._lock_for(f"principal-{i}")
        assert user_store._locks is pool
        assert len(pool) == LOCK_STRIPES

    def test_same_principal_same_lock(self, user_store):
        assert user_store._lock_for("abc") is user_store._lock_for("abc")


class TestCleanup:
    def _record(self, user, expiry, token):
        record = UserRefreshToken(token=token, principal_id=user.id, expiry_date=expiry)
        storage.new(record)
        storage.save()
        return record

    def test_removes_only_records_past_retention(self, user_store, user):
        now = utcnow()
        user_store.clock = lambda: now
        self._record(user, now - timedelta(days=20), "long-gone")
        self._record(user, now - timedelta(days=2), "recently-expired")
        self._record(user, now + timedelta(days=5), "live")

        assert user_store.cleanup() == 1
        assert user_store.find_token("long-gone") is None
        assert user_store.find_token("recently-expired") is not None
        assert user_store.find_token("live") is not None

    def test_zero_retention_removes_every_expired_record(self, user_store, user):
        now = utcnow()
        user_store.clock = lambda: now
        user_store.retention = timedelta(0)
        self._record(user, now - timedelta(seconds=1), "expired")
        self._record(user, now + timedelta(days=1), "live")

        assert user_store.cleanup() == 1
        assert user_store.find_token("live") is not None

    def test_failure_is_swallowed(self, user_store):
        with mock.patch.object(user_store, "_query", side_effect=RuntimeError("db down")):
            assert user_store.cleanup() == 0
