"""
FastAPI Dependencies
Authentication, storage access and list query parsing
"""

from typing import Annotated, Any, Dict, List, Optional

from fastapi import Depends, Path, Query, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import structlog

from vtn.core.errors import Unauthorized
from vtn.core.identity import Identity
from vtn.core.security import TokenManager
from vtn.data_source.base import (
    AuthSource,
    DataSource,
    EventCrud,
    ProgramCrud,
    ReportCrud,
    ResourceCrud,
    VenCrud,
)
from vtn.schemas.base import ID_MAX_LENGTH, ID_PATTERN, parse_query
from vtn.schemas.event import EventQuery
from vtn.schemas.program import ProgramQuery
from vtn.schemas.report import ReportQuery
from vtn.schemas.resource import ResourceQuery
from vtn.schemas.ven import VenQuery

logger = structlog.get_logger()

# Security scheme
security = HTTPBearer(auto_error=False)

# Path parameter addressing a single entity
ObjectId = Annotated[
    str,
    Path(min_length=1, max_length=ID_MAX_LENGTH, pattern=ID_PATTERN, description="URL safe VTN assigned object ID"),
]


def get_data_source(request: Request) -> DataSource:
    """Backend selected at startup"""
    return request.app.state.data_source


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.token_manager


def get_programs(data_source: DataSource = Depends(get_data_source)) -> ProgramCrud:
    return data_source.programs


def get_events(data_source: DataSource = Depends(get_data_source)) -> EventCrud:
    return data_source.events


def get_reports(data_source: DataSource = Depends(get_data_source)) -> ReportCrud:
    return data_source.reports


def get_vens(data_source: DataSource = Depends(get_data_source)) -> VenCrud:
    return data_source.vens


def get_resources(data_source: DataSource = Depends(get_data_source)) -> ResourceCrud:
    return data_source.resources


def get_auth_source(data_source: DataSource = Depends(get_data_source)) -> AuthSource:
    return data_source.auth


async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    token_manager: TokenManager = Depends(get_token_manager),
) -> Identity:
    """
    Get the identity of the caller from the bearer token

    Raises:
        Unauthorized: If the token is missing or invalid
    """
    if not credentials:
        logger.warning("Missing authentication credentials")
        raise Unauthorized("Not authenticated")

    return token_manager.decode(credentials.credentials)


# List query parameters. Bounds are checked by the query models so that every
# violation is reported the same way.


def page_params(
    skip: Optional[int] = Query(None, description="Number of records to skip for pagination"),
    limit: Optional[int] = Query(None, description="Maximum number of records to return"),
) -> Dict[str, Any]:
    return {"skip": skip, "limit": limit}


def target_params(
    page: Dict[str, Any] = Depends(page_params),
    target_type: Optional[str] = Query(None, alias="targetType", description="Targeting type, e.g. GROUP"),
    target_values: Optional[List[str]] = Query(None, alias="targetValues", description="Target values"),
) -> Dict[str, Any]:
    return {**page, "targetType": target_type, "targetValues": target_values}


def get_program_query(params: Dict[str, Any] = Depends(target_params)) -> ProgramQuery:
    return parse_query(ProgramQuery, params)


def get_event_query(
    params: Dict[str, Any] = Depends(target_params),
    program_id: Optional[str] = Query(None, alias="programID", description="Only events of this program"),
) -> EventQuery:
    return parse_query(EventQuery, {**params, "programID": program_id})


def get_report_query(
    page: Dict[str, Any] = Depends(page_params),
    program_id: Optional[str] = Query(None, alias="programID", description="Only reports of this program"),
    event_id: Optional[str] = Query(None, alias="eventID", description="Only reports of this event"),
    client_name: Optional[str] = Query(None, alias="clientName", description="Only reports of this client"),
) -> ReportQuery:
    return parse_query(
        ReportQuery,
        {**page, "programID": program_id, "eventID": event_id, "clientName": client_name},
    )


def get_ven_query(params: Dict[str, Any] = Depends(target_params)) -> VenQuery:
    return parse_query(VenQuery, params)


def get_resource_query(params: Dict[str, Any] = Depends(target_params)) -> ResourceQuery:
    return parse_query(ResourceQuery, params)
