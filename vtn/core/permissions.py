"""
Permission evaluation for every data-access operation.

Decisions are pure functions of the identity, the entity kind, the action and,
for VEN-owned entities, the id of the owning VEN. They are evaluated on every
call and never cached.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

import structlog

from vtn.core.errors import Forbidden
from vtn.core.identity import Identity

logger = structlog.get_logger()


class EntityKind(str, Enum):
    PROGRAM = "program"
    EVENT = "event"
    REPORT = "report"
    VEN = "ven"
    RESOURCE = "resource"
    CREDENTIAL = "credential"


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def can_write_ven_scoped(identity: Identity, ven_id: Optional[str]) -> bool:
    """VEN managers may touch any VEN; a VEN user only the VENs it holds."""
    if identity.is_ven_manager():
        return True
    return ven_id is not None and identity.is_ven() and ven_id in identity.held_ven_ids()


def can_read_ven(identity: Identity, ven_id: Optional[str]) -> bool:
    if identity.is_ven_manager() or identity.is_business():
        return True
    return ven_id is not None and ven_id in identity.held_ven_ids()


def _program_or_event(identity: Identity, action: Action) -> bool:
    if action == Action.READ:
        return True
    return identity.is_business()


def _report(identity: Identity, action: Action) -> bool:
    if action == Action.READ:
        return True
    if action == Action.DELETE:
        # Any business role may delete reports, not only the reporting VEN.
        return identity.is_business()
    return identity.is_ven()


def is_allowed(
    identity: Identity,
    kind: EntityKind,
    action: Action,
    ven_id: Optional[str] = None,
) -> bool:
    """
    Decide whether ``identity`` may perform ``action`` on an entity of ``kind``.

    ``ven_id`` is the VEN the target belongs to (Resource) or is (Ven); it is
    ignored for the other kinds.
    """
    if kind in (EntityKind.PROGRAM, EntityKind.EVENT):
        return _program_or_event(identity, action)
    if kind == EntityKind.REPORT:
        return _report(identity, action)
    if kind == EntityKind.VEN:
        if action == Action.READ:
            return can_read_ven(identity, ven_id)
        return identity.is_ven_manager()
    if kind == EntityKind.RESOURCE:
        # Reads follow the write rule; there is no read-only grant on resources.
        return can_write_ven_scoped(identity, ven_id)
    if kind == EntityKind.CREDENTIAL:
        return identity.is_user_manager()
    raise ValueError(f"Unknown entity kind: {kind!r}")


def authorize(
    identity: Identity,
    kind: EntityKind,
    action: Action,
    ven_id: Optional[str] = None,
) -> None:
    """Raise ``Forbidden`` unless :func:`is_allowed` grants the action."""
    if is_allowed(identity, kind, action, ven_id):
        return

    logger.warning(
        "Permission denied",
        subject=identity.subject,
        kind=kind.value,
        action=action.value,
        ven_id=ven_id,
    )
    raise Forbidden(f"User not authorized to {action.value} this {kind.value}")
