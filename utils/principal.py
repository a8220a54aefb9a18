"""
Principal types carried inside access/refresh tokens.

A principal is either a plain user or a staff member with a role:
- UserPrincipal(id)
- MemberPrincipal(id, role)  role is Role.SUPERVISOR or Role.CREATOR

Claims layout inside a JWT:
    {"sub": "<id>", "kind": "user" | "member", "role": "User" | "Creator" | "Supervisor"}
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Optional, Union


class Role(str, enum.Enum):
    SUPERVISOR = "Supervisor"
    CREATOR = "Creator"
    USER = "User"


MEMBER_ROLES = (Role.SUPERVISOR, Role.CREATOR)


@dataclass(frozen=True)
class UserPrincipal:
    id: str
    kind = "user"

    @property
    def role(self) -> Role:
        return Role.USER

    def to_claims(self) -> Dict[str, Any]:
        return {"sub": str(self.id), "kind": self.kind, "role": Role.USER.value}


@dataclass(frozen=True)
class MemberPrincipal:
    id: str
    role: Role
    kind = "member"

    def to_claims(self) -> Dict[str, Any]:
        return {"sub": str(self.id), "kind": self.kind, "role": Role(self.role).value}


Principal = Union[UserPrincipal, MemberPrincipal]


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


def principal_from_claims(claims: Dict[str, Any]) -> Optional[Principal]:
    """Rebuild a Principal from decoded claims; None if they don't describe one."""
    sub = claims.get("sub")
    if not isinstance(sub, str) or not sub:
        return None
    kind = claims.get("kind")
    if kind == UserPrincipal.kind:
        return UserPrincipal(id=sub)
    if kind == MemberPrincipal.kind:
        try:
            role = Role(claims.get("role"))
        except ValueError:
            return None
        if role not in MEMBER_ROLES:
            return None
        return MemberPrincipal(id=sub, role=role)
    return None
