"""
Session flows shared by the user and member blueprints:
- start_session: issue a token pair and persist its refresh token
- rotate_session: exchange a stored refresh token for a fresh pair
- end_session: forget a refresh token (logout)

Services are looked up on the current app (see api.create_app), so tests can
swap them for doubles.
"""
from __future__ import annotations

from flask import current_app

from models.member import Member
from models.user import User
from utils.principal import MemberPrincipal, Principal, TokenPair, UserPrincipal, principal_from_claims
from utils.security import TokenCodec
from utils.token_store import RefreshTokenStore


class SessionError(Exception):
    """The presented refresh token cannot be used to continue a session."""


def get_codec() -> TokenCodec:
    return current_app.extensions["token_codec"]


def get_token_store(kind: str) -> RefreshTokenStore:
    return current_app.extensions["token_stores"][kind]


def principal_for(account) -> Principal:
    if isinstance(account, User):
        return UserPrincipal(id=account.id)
    if isinstance(account, Member):
        return MemberPrincipal(id=account.id, role=account.role)
    raise TypeError(f"no principal for {type(account).__name__}")


def start_session(account) -> TokenPair:
    principal = principal_for(account)
    pair = get_codec().generate_token_pair(principal)
    get_token_store(principal.kind).save_token(principal.id, pair.refresh_token)
    return pair


def rotate_session(refresh_token: str, kind: str) -> TokenPair:
    """
    Remove the stored record for `refresh_token` and issue a new pair.

    The token must both verify and be present in the store; a token that
    was already rotated or logged out fails here.
    """
    store = get_token_store(kind)
    claims = get_codec().validate_refresh_token(refresh_token)
    record = store.find_token(refresh_token)
    if claims is None or record is None:
        raise SessionError("Invalid or expired refresh token")

    presented = principal_from_claims(claims)
    if presented is None or presented.kind != kind or presented.id != record.principal_id:
        raise SessionError("Refresh token does not match its owner")

    principal_id = record.principal_id
    if not store.consume_token(refresh_token):
        # another refresh spent this token between the lookup and now
        raise SessionError("Invalid or expired refresh token")

    # Rebuild from the database so a member's current role is used
    account = store.storage.get(store.principal_model, principal_id)
    if account is None:
        raise SessionError("Account no longer exists")
    return start_session(account)


def end_session(refresh_token: str, kind: str) -> None:
    get_token_store(kind).remove_token(refresh_token)
