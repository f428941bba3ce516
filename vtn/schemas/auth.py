"""
Authentication Schemas
Token exchange and client credential management
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from vtn.core.identity import AuthRole, RoleKind


class RoleClaim(BaseModel):
    """Role as carried in tokens and credential records"""
    role: RoleKind = Field(..., description="Role kind")
    id: Optional[str] = Field(None, description="VEN id for VEN roles")

    def to_role(self) -> AuthRole:
        return AuthRole(RoleKind(self.role), self.id)

    @classmethod
    def from_role(cls, role: AuthRole) -> "RoleClaim":
        return cls(role=role.kind, id=role.ven_id)


class TokenRequest(BaseModel):
    """Client credentials grant"""
    grant_type: str = Field("client_credentials", description="OAuth2 grant type")
    client_id: str = Field(..., min_length=1, description="Client id")
    client_secret: str = Field(..., min_length=1, description="Client secret")

    @field_validator("grant_type")
    @classmethod
    def validate_grant_type(cls, v: str) -> str:
        if v != "client_credentials":
            raise ValueError("Only the client_credentials grant is supported")
        return v


class TokenResponse(BaseModel):
    """Issued bearer token"""
    access_token: str = Field(..., description="Bearer token")
    token_type: str = Field("Bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class CredentialCreate(BaseModel):
    """Request for registering a client credential"""
    client_id: str = Field(..., min_length=1, max_length=128, pattern=r"^[a-zA-Z0-9_.-]*$", description="Client id")
    client_secret: str = Field(..., min_length=8, max_length=72, description="Client secret")
    roles: List[RoleClaim] = Field(..., min_length=1, description="Roles granted to the client")

    @field_validator("roles")
    @classmethod
    def validate_roles(cls, v: List[RoleClaim]) -> List[RoleClaim]:
        for claim in v:
            # Raises for VEN roles without id and ids on other roles
            claim.to_role()
        return v


class Credential(BaseModel):
    """Stored client credential, without its secret"""
    client_id: str
    roles: List[RoleClaim]
    created_date_time: datetime
