"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT access/refresh token signing and verification via PyJWT (TokenCodec)
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

from utils.principal import Principal, TokenPair, principal_from_claims

ph = PasswordHasher()

DEFAULT_ISSUER = "gastronomy-api"
ACCESS_TOKEN_TTL = timedelta(minutes=30)
REFRESH_TOKEN_TTL = timedelta(days=14)


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column is stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TokenCodec:
    """
    Signs and verifies the two kinds of session tokens.

    Access and refresh tokens are built from the same principal claims but
    signed with different secrets, so one can never be accepted as the other.
    Validation never raises: any failure (malformed, bad signature, expired,
    wrong issuer, wrong type) comes back as None.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        *,
        issuer: str = DEFAULT_ISSUER,
        algorithm: str = "HS256",
        access_ttl: timedelta = ACCESS_TOKEN_TTL,
        refresh_ttl: timedelta = REFRESH_TOKEN_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh secrets must differ")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.issuer = issuer
        self.algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.clock = clock

    @classmethod
    def from_config(cls, config) -> "TokenCodec":
        return cls(
            config["JWT_ACCESS_SECRET"],
            config["JWT_REFRESH_SECRET"],
            issuer=config.get("JWT_ISSUER", DEFAULT_ISSUER),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            access_ttl=config.get("ACCESS_TOKEN_EXPIRES", ACCESS_TOKEN_TTL),
            refresh_ttl=config.get("REFRESH_TOKEN_EXPIRES", REFRESH_TOKEN_TTL),
        )

    def _sign(self, principal: Principal, secret: str, ttl: timedelta, token_type: str) -> str:
        now = self.clock()
        payload = dict(principal.to_claims())
        payload.update(
            {
                "iss": self.issuer,
                "iat": int(now.replace(tzinfo=timezone.utc).timestamp()),
                "exp": int((now + ttl).replace(tzinfo=timezone.utc).timestamp()),
                "type": token_type,
                "jti": generate_jti(),
            }
        )
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _verify(self, token: str, secret: str, token_type: str) -> Optional[Dict[str, Any]]:
        if not token or not isinstance(token, str):
            return None
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "iss", "sub"]},
            )
        except jwt.PyJWTError:
            return None
        if decoded.get("type") != token_type:
            return None
        return decoded

    def generate_token_pair(self, principal: Principal) -> TokenPair:
        return TokenPair(
            access_token=self.generate_access_token(principal),
            refresh_token=self._sign(principal, self.refresh_secret, self.refresh_ttl, "refresh"),
        )

    def generate_access_token(self, principal: Principal) -> str:
        return self._sign(principal, self.access_secret, self.access_ttl, "access")

    def validate_access_token(self, token: str) -> Optional[Principal]:
        decoded = self._verify(token, self.access_secret, "access")
        if decoded is None:
            return None
        return principal_from_claims(decoded)

    def validate_refresh_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Returns the decoded refresh claims (including the `exp` epoch seconds)
        or None. Claims that don't describe a principal are rejected too.
        """
        decoded = self._verify(token, self.refresh_secret, "refresh")
        if decoded is None or principal_from_claims(decoded) is None:
            return None
        return decoded
