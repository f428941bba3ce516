from vtn.repositories.credential import credential_repository
from vtn.repositories.entities import (
    event_repository,
    program_repository,
    report_repository,
    resource_repository,
    ven_repository,
)

__all__ = [
    "credential_repository",
    "event_repository",
    "program_repository",
    "report_repository",
    "resource_repository",
    "ven_repository",
]
