"""
Server-side persistence of refresh tokens.

Each principal kind (users, members) gets its own RefreshTokenStore bound to
its record model. The store enforces:
- at most `max_tokens` records per principal (oldest evicted first)
- expiry derived from the token's `exp` claim
- a periodic cleanup of expired records (see utils.maintenance)

The count -> evict -> insert sequence runs under one of a fixed set of locks,
picked by hashing the principal id. The locks are process-local: several API
processes sharing one database can still race and briefly leave a principal
above the cap.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from models import storage as default_storage
from utils.security import TokenCodec, utcnow

logger = logging.getLogger(__name__)

MAX_TOKENS_PER_PRINCIPAL = 6
DEFAULT_TOKEN_TTL = timedelta(days=14)
DEFAULT_RETENTION = timedelta(days=14)
LOCK_STRIPES = 64


class TokenStoreError(Exception):
    """Base class for refresh token store failures."""


class InvalidRefreshToken(TokenStoreError):
    """The token failed signature/expiry validation and was not stored."""


class PrincipalNotFound(TokenStoreError):
    """The principal owning the token does not exist."""


class RefreshTokenStore:
    def __init__(
        self,
        codec: TokenCodec,
        record_model,
        principal_model,
        *,
        storage=None,
        max_tokens: int = MAX_TOKENS_PER_PRINCIPAL,
        default_ttl: timedelta = DEFAULT_TOKEN_TTL,
        retention: timedelta = DEFAULT_RETENTION,
        clock: Callable[[], datetime] = utcnow,
    ):
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")
        self.codec = codec
        self.record_model = record_model
        self.principal_model = principal_model
        self.storage = storage or default_storage
        self.max_tokens = max_tokens
        self.default_ttl = default_ttl
        self.retention = retention
        self.clock = clock
        # fixed pool of locks; unrelated principals may share one
        self._locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))

    def __repr__(self):
        return f"<RefreshTokenStore {self.record_model.__tablename__} max={self.max_tokens}>"

    def _lock_for(self, principal_id: str) -> threading.Lock:
        return self._locks[hash(principal_id) % len(self._locks)]

    def _query(self):
        return self.storage.get_session().query(self.record_model)

    def _expiry_from_claims(self, claims: dict, now: datetime) -> datetime:
        exp = claims.get("exp")
        if exp is None:
            return now + self.default_ttl
        # exp is seconds since the epoch
        return datetime.fromtimestamp(int(exp), tz=timezone.utc).replace(tzinfo=None)

    def count_tokens(self, principal_id: str) -> int:
        model = self.record_model
        return self._query().filter(model.principal_id == principal_id).count()

    def save_token(self, principal_id: str, refresh_token: str):
        """
        Validate and persist a refresh token for a principal.

        Raises InvalidRefreshToken if the codec rejects the token and
        PrincipalNotFound if the owner doesn't exist. When the principal is
        already at the cap, the oldest records (by created_at) are deleted
        first so the cap still holds after the insert.
        """
        claims = self.codec.validate_refresh_token(refresh_token)
        if claims is None:
            raise InvalidRefreshToken("refresh token is invalid or expired")

        principal = self.storage.get(self.principal_model, principal_id)
        if principal is None:
            raise PrincipalNotFound(f"{self.principal_model.__name__} {principal_id} not found")

        model = self.record_model
        with self._lock_for(principal.id):
            now = self.clock()
            existing = self.count_tokens(principal.id)
            if existing >= self.max_tokens:
                overflow = existing - self.max_tokens + 1
                oldest = (
                    self._query()
                    .filter(model.principal_id == principal.id)
                    .order_by(model.created_at.asc(), model.id.asc())
                    .limit(overflow)
                    .all()
                )
                for record in oldest:
                    self.storage.delete(record)
                logger.info(
                    "Evicted %d refresh token(s) from %s %s",
                    len(oldest), self.principal_model.__name__, principal.id,
                )

            record = model(
                token=refresh_token,
                principal_id=principal.id,
                expiry_date=self._expiry_from_claims(claims, now),
                created_at=now,
                updated_at=now,
            )
            self.storage.new(record)
            self.storage.save()
        return record

    def find_token(self, refresh_token: str):
        """Return the record holding exactly this token, or None."""
        if not refresh_token:
            return None
        model = self.record_model
        return self._query().filter(model.token == refresh_token).first()

    def consume_token(self, refresh_token: str) -> bool:
        """
        Delete the record for this token in a single conditional DELETE.
        Returns True only for the caller whose statement removed the row, so
        of two concurrent consumers of the same token exactly one wins.
        """
        if not refresh_token:
            return False
        model = self.record_model
        deleted = self._query().filter(model.token == refresh_token).delete(synchronize_session=False)
        self.storage.save()
        return deleted > 0

    def remove_token(self, refresh_token: str) -> None:
        """Delete the record for this token; unknown tokens are ignored."""
        self.consume_token(refresh_token)

    def cleanup(self) -> int:
        """
        Delete records whose expiry_date is older than now - retention.
        Never raises; returns the number of deleted records (0 on failure).
        """
        model = self.record_model
        cutoff = self.clock() - self.retention
        try:
            deleted = (
                self._query()
                .filter(model.expiry_date < cutoff)
                .delete(synchronize_session=False)
            )
            self.storage.save()
        except Exception:
            logger.exception("Refresh token cleanup failed for %s", model.__tablename__)
            try:
                self.storage.rollback()
            except Exception:
                logger.exception("Rollback after cleanup failure failed")
            return 0
        if deleted:
            logger.info("Removed %d expired record(s) from %s", deleted, model.__tablename__)
        return deleted
