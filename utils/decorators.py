from __future__ import annotations

from functools import wraps
from typing import Iterable, Union

from flask import request, g, abort, current_app

from utils.principal import MemberPrincipal, Principal, Role, UserPrincipal


def bearer_token() -> str:
    """Extract the token from `Authorization: Bearer <token>`, or ''."""
    auth = request.headers.get("Authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme != "Bearer":
        return ""
    return token.strip()


def authenticate(fn):
    """
    Require a valid access token. The decoded principal is put on
    `g.principal`. Stateless: the database is never consulted.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = bearer_token()
        if not token:
            abort(401, description="Not Authorized")
        principal = current_app.extensions["token_codec"].validate_access_token(token)
        if principal is None:
            abort(401, description="Not Authorized")
        g.principal = principal
        return fn(*args, **kwargs)

    return wrapper


def role_satisfies(principal: Principal, role: Role) -> bool:
    """
    Role hierarchy used by `authorize`:
    - User       -> any user principal
    - Creator    -> members with role Creator or Supervisor
    - Supervisor -> members with role Supervisor only
    """
    role = Role(role)
    if role is Role.USER:
        return isinstance(principal, UserPrincipal)
    if not isinstance(principal, MemberPrincipal):
        return False
    if role is Role.SUPERVISOR:
        return principal.role is Role.SUPERVISOR
    if role is Role.CREATOR:
        return principal.role in (Role.CREATOR, Role.SUPERVISOR)
    return False


def authorize(roles: Union[Role, Iterable[Role], None] = None):
    """
    Allow access if the principal satisfies ANY of the required roles.
    No roles means any authenticated principal is allowed.
    """
    if roles is None:
        required = ()
    elif isinstance(roles, (Role, str)):
        required = (Role(roles),)
    else:
        required = tuple(Role(r) for r in roles)

    def decorator(fn):
        @wraps(fn)
        @authenticate
        def wrapper(*args, **kwargs):
            if required and not any(role_satisfies(g.principal, r) for r in required):
                abort(403, description="Forbidden")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
