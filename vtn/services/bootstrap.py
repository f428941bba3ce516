"""
Bootstrap credential creation service.
"""

from __future__ import annotations

import structlog

from vtn.core.config import settings
from vtn.core.errors import Conflict
from vtn.core.identity import AuthRole, Identity
from vtn.data_source.base import AuthSource

logger = structlog.get_logger()

# Roles of the bootstrap client; VEN roles are granted per VEN later on
BOOTSTRAP_ROLES = (AuthRole.business(), AuthRole.user_manager(), AuthRole.ven_manager())


async def ensure_bootstrap_credential_exists(auth_source: AuthSource) -> None:
    client_id = settings.BOOTSTRAP_CLIENT_ID
    client_secret = settings.BOOTSTRAP_CLIENT_SECRET
    if not client_id or not client_secret:
        logger.debug("No bootstrap credential configured")
        return

    system = Identity("bootstrap", [AuthRole.user_manager()])
    try:
        await auth_source.add_credential(client_id, client_secret, list(BOOTSTRAP_ROLES), system)
    except Conflict:
        logger.info("Bootstrap credential already exists", client_id=client_id)
        return

    logger.info("Bootstrap credential created", client_id=client_id)
