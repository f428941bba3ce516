"""
Identity and role model of an authenticated caller.

A token carries one or more roles. Roles form a small closed set; only the
VEN role is parameterised, by the id of the VEN it is scoped to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from vtn.core.errors import Unauthorized


class RoleKind(str, Enum):
    BUSINESS = "BUSINESS"
    USER_MANAGER = "USER_MANAGER"
    VEN_MANAGER = "VEN_MANAGER"
    VEN = "VEN"


@dataclass(frozen=True)
class AuthRole:
    kind: RoleKind
    ven_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind == RoleKind.VEN and not self.ven_id:
            raise ValueError("VEN role requires a ven id")
        if self.kind != RoleKind.VEN and self.ven_id is not None:
            raise ValueError(f"{self.kind.value} role does not take a ven id")

    @classmethod
    def business(cls) -> "AuthRole":
        return cls(RoleKind.BUSINESS)

    @classmethod
    def user_manager(cls) -> "AuthRole":
        return cls(RoleKind.USER_MANAGER)

    @classmethod
    def ven_manager(cls) -> "AuthRole":
        return cls(RoleKind.VEN_MANAGER)

    @classmethod
    def ven(cls, ven_id: str) -> "AuthRole":
        return cls(RoleKind.VEN, ven_id)

    def to_claim(self) -> dict[str, str]:
        claim = {"role": self.kind.value}
        if self.ven_id is not None:
            claim["id"] = self.ven_id
        return claim

    @classmethod
    def from_claim(cls, claim: Any) -> "AuthRole":
        if not isinstance(claim, dict) or "role" not in claim:
            raise ValueError(f"Malformed role claim: {claim!r}")
        try:
            kind = RoleKind(claim["role"])
        except ValueError:
            raise ValueError(f"Unknown role: {claim['role']!r}")
        return cls(kind, claim.get("id"))


@dataclass(frozen=True)
class Identity:
    """The role set of the caller of the current request."""

    subject: str
    roles: tuple[AuthRole, ...] = field(default_factory=tuple)

    def __init__(self, subject: str, roles: Iterable[AuthRole] = ()):
        object.__setattr__(self, "subject", subject)
        object.__setattr__(self, "roles", tuple(roles))

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "Identity":
        """Build an identity from already verified token claims."""
        subject = claims.get("sub")
        if not subject:
            raise Unauthorized("Token missing subject")

        raw_roles = claims.get("roles")
        if not isinstance(raw_roles, list) or not raw_roles:
            raise Unauthorized("Token carries no roles")

        try:
            roles = [AuthRole.from_claim(claim) for claim in raw_roles]
        except ValueError as exc:
            raise Unauthorized(str(exc))

        return cls(str(subject), roles)

    def role_claims(self) -> list[dict[str, str]]:
        return [role.to_claim() for role in self.roles]

    def has_role(self, kind: RoleKind) -> bool:
        return any(role.kind == kind for role in self.roles)

    def held_ven_ids(self) -> frozenset[str]:
        return frozenset(role.ven_id for role in self.roles if role.kind == RoleKind.VEN)

    def is_business(self) -> bool:
        return self.has_role(RoleKind.BUSINESS)

    def is_user_manager(self) -> bool:
        return self.has_role(RoleKind.USER_MANAGER)

    def is_ven_manager(self) -> bool:
        return self.has_role(RoleKind.VEN_MANAGER)

    def is_ven(self) -> bool:
        return self.has_role(RoleKind.VEN)
