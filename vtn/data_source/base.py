"""
Access interfaces a storage backend implements.

There is one interface per entity kind plus one for client credentials. Every
operation receives the caller's identity explicitly and is responsible for
both the existence lookup and the permission check, so results (list counts
included) already reflect what the caller may see.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from vtn.core.identity import AuthRole, Identity
from vtn.schemas.auth import Credential
from vtn.schemas.event import Event, EventContent, EventQuery
from vtn.schemas.program import Program, ProgramContent, ProgramQuery
from vtn.schemas.report import Report, ReportContent, ReportQuery
from vtn.schemas.resource import Resource, ResourceContent, ResourceQuery
from vtn.schemas.ven import Ven, VenContent, VenQuery


class ProgramCrud(ABC):
    @abstractmethod
    async def list(self, query: ProgramQuery, identity: Identity) -> List[Program]:
        raise NotImplementedError

    @abstractmethod
    async def get(self, program_id: str, identity: Identity) -> Program:
        raise NotImplementedError

    @abstractmethod
    async def create(self, content: ProgramContent, identity: Identity) -> Program:
        raise NotImplementedError

    @abstractmethod
    async def update(self, program_id: str, content: ProgramContent, identity: Identity) -> Program:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, program_id: str, identity: Identity) -> Program:
        raise NotImplementedError


class EventCrud(ABC):
    @abstractmethod
    async def list(self, query: EventQuery, identity: Identity) -> List[Event]:
        raise NotImplementedError

    @abstractmethod
    async def get(self, event_id: str, identity: Identity) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def create(self, content: EventContent, identity: Identity) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def update(self, event_id: str, content: EventContent, identity: Identity) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, event_id: str, identity: Identity) -> Event:
        raise NotImplementedError


class ReportCrud(ABC):
    @abstractmethod
    async def list(self, query: ReportQuery, identity: Identity) -> List[Report]:
        raise NotImplementedError

    @abstractmethod
    async def get(self, report_id: str, identity: Identity) -> Report:
        raise NotImplementedError

    @abstractmethod
    async def create(self, content: ReportContent, identity: Identity) -> Report:
        raise NotImplementedError

    @abstractmethod
    async def update(self, report_id: str, content: ReportContent, identity: Identity) -> Report:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, report_id: str, identity: Identity) -> Report:
        raise NotImplementedError


class VenCrud(ABC):
    @abstractmethod
    async def list(self, query: VenQuery, identity: Identity) -> List[Ven]:
        raise NotImplementedError

    @abstractmethod
    async def get(self, ven_id: str, identity: Identity) -> Ven:
        raise NotImplementedError

    @abstractmethod
    async def create(self, content: VenContent, identity: Identity) -> Ven:
        raise NotImplementedError

    @abstractmethod
    async def update(self, ven_id: str, content: VenContent, identity: Identity) -> Ven:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, ven_id: str, identity: Identity) -> Ven:
        raise NotImplementedError


class ResourceCrud(ABC):
    """Resources are always addressed through the VEN owning them."""

    @abstractmethod
    async def list(self, ven_id: str, query: ResourceQuery, identity: Identity) -> List[Resource]:
        raise NotImplementedError

    @abstractmethod
    async def get(self, ven_id: str, resource_id: str, identity: Identity) -> Resource:
        raise NotImplementedError

    @abstractmethod
    async def create(self, ven_id: str, content: ResourceContent, identity: Identity) -> Resource:
        raise NotImplementedError

    @abstractmethod
    async def update(
        self, ven_id: str, resource_id: str, content: ResourceContent, identity: Identity
    ) -> Resource:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, ven_id: str, resource_id: str, identity: Identity) -> Resource:
        raise NotImplementedError


class AuthSource(ABC):
    """Client credential store."""

    @abstractmethod
    async def check_credentials(self, client_id: str, client_secret: str) -> Optional[List[AuthRole]]:
        """Return the roles of the client, or None if the credentials do not match."""
        raise NotImplementedError

    @abstractmethod
    async def list_credentials(self, identity: Identity) -> List[Credential]:
        raise NotImplementedError

    @abstractmethod
    async def add_credential(
        self, client_id: str, client_secret: str, roles: List[AuthRole], identity: Identity
    ) -> Credential:
        raise NotImplementedError

    @abstractmethod
    async def remove_credential(self, client_id: str, identity: Identity) -> Credential:
        raise NotImplementedError


class DataSource(ABC):
    """Aggregate store handing out the narrow per-kind interfaces."""

    @property
    @abstractmethod
    def programs(self) -> ProgramCrud:
        raise NotImplementedError

    @property
    @abstractmethod
    def events(self) -> EventCrud:
        raise NotImplementedError

    @property
    @abstractmethod
    def reports(self) -> ReportCrud:
        raise NotImplementedError

    @property
    @abstractmethod
    def vens(self) -> VenCrud:
        raise NotImplementedError

    @property
    @abstractmethod
    def resources(self) -> ResourceCrud:
        raise NotImplementedError

    @property
    @abstractmethod
    def auth(self) -> AuthSource:
        raise NotImplementedError

    async def close(self) -> None:
        """Release backend resources"""
