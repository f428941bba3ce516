"""
Authentication Endpoints
Client credentials token exchange and credential management
"""

from typing import Any, List

from fastapi import APIRouter, Depends, status
import structlog

from vtn.core.deps import get_auth_source, get_identity, get_token_manager
from vtn.core.errors import Unauthorized
from vtn.core.identity import Identity
from vtn.core.security import TokenManager
from vtn.data_source.base import AuthSource
from vtn.schemas.auth import Credential, CredentialCreate, TokenRequest, TokenResponse

logger = structlog.get_logger()
router = APIRouter()


@router.post("/token", response_model=TokenResponse)
async def issue_token(
    token_request: TokenRequest,
    auth_source: AuthSource = Depends(get_auth_source),
    token_manager: TokenManager = Depends(get_token_manager),
) -> Any:
    """
    Exchange client credentials for a bearer token

    Returns:
        Access token carrying the roles of the client
    """
    roles = await auth_source.check_credentials(token_request.client_id, token_request.client_secret)
    if roles is None:
        logger.warning("Token request with invalid credentials", client_id=token_request.client_id)
        raise Unauthorized("Invalid client credentials")

    access_token = token_manager.create_token(token_request.client_id, roles)
    logger.info("Access token issued", client_id=token_request.client_id)

    return TokenResponse(
        access_token=access_token,
        expires_in=token_manager.expire_minutes * 60,
    )


@router.get("/credentials", response_model=List[Credential])
async def list_credentials(
    identity: Identity = Depends(get_identity),
    auth_source: AuthSource = Depends(get_auth_source),
) -> Any:
    return await auth_source.list_credentials(identity)


@router.post("/credentials", response_model=Credential, status_code=status.HTTP_201_CREATED)
async def add_credential(
    credential_in: CredentialCreate,
    identity: Identity = Depends(get_identity),
    auth_source: AuthSource = Depends(get_auth_source),
) -> Any:
    """Register a client with the roles it is granted."""
    roles = [claim.to_role() for claim in credential_in.roles]
    return await auth_source.add_credential(
        credential_in.client_id, credential_in.client_secret, roles, identity
    )


@router.delete("/credentials/{client_id}", response_model=Credential)
async def remove_credential(
    client_id: str,
    identity: Identity = Depends(get_identity),
    auth_source: AuthSource = Depends(get_auth_source),
) -> Any:
    return await auth_source.remove_credential(client_id, identity)
