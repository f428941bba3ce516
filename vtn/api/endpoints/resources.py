"""
Resource Endpoints
CRUD for the resources of a VEN, nested under /vens/{venID}/resources
"""

from typing import Annotated, Any, List

from fastapi import APIRouter, Depends, Path, status

from vtn.core.deps import ObjectId, get_identity, get_resource_query, get_resources
from vtn.core.identity import Identity
from vtn.data_source.base import ResourceCrud
from vtn.schemas.base import ID_MAX_LENGTH, ID_PATTERN
from vtn.schemas.resource import Resource, ResourceContent, ResourceQuery

router = APIRouter()

VenId = Annotated[
    str,
    Path(
        alias="venID",
        min_length=1,
        max_length=ID_MAX_LENGTH,
        pattern=ID_PATTERN,
        description="ID of the VEN owning the resources",
    ),
]


@router.get("", response_model=List[Resource], response_model_exclude_none=True)
async def list_resources(
    ven_id: VenId,
    query: ResourceQuery = Depends(get_resource_query),
    identity: Identity = Depends(get_identity),
    resources: ResourceCrud = Depends(get_resources),
) -> Any:
    """List the resources of a VEN, optionally filtered by target."""
    return await resources.list(ven_id, query, identity)


@router.post("", response_model=Resource, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_resource(
    ven_id: VenId,
    content: ResourceContent,
    identity: Identity = Depends(get_identity),
    resources: ResourceCrud = Depends(get_resources),
) -> Any:
    """Create a resource owned by the VEN."""
    return await resources.create(ven_id, content, identity)


@router.get("/{resource_id}", response_model=Resource, response_model_exclude_none=True)
async def get_resource(
    ven_id: VenId,
    resource_id: ObjectId,
    identity: Identity = Depends(get_identity),
    resources: ResourceCrud = Depends(get_resources),
) -> Any:
    return await resources.get(ven_id, resource_id, identity)


@router.put("/{resource_id}", response_model=Resource, response_model_exclude_none=True)
async def update_resource(
    ven_id: VenId,
    resource_id: ObjectId,
    content: ResourceContent,
    identity: Identity = Depends(get_identity),
    resources: ResourceCrud = Depends(get_resources),
) -> Any:
    return await resources.update(ven_id, resource_id, content, identity)


@router.delete("/{resource_id}", response_model=Resource, response_model_exclude_none=True)
async def delete_resource(
    ven_id: VenId,
    resource_id: ObjectId,
    identity: Identity = Depends(get_identity),
    resources: ResourceCrud = Depends(get_resources),
) -> Any:
    return await resources.delete(ven_id, resource_id, identity)
