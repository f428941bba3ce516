"""
Report Endpoints
Report CRUD
"""

from typing import Any, List

from fastapi import APIRouter, Depends, status

from vtn.core.deps import ObjectId, get_identity, get_report_query, get_reports
from vtn.core.identity import Identity
from vtn.data_source.base import ReportCrud
from vtn.schemas.report import Report, ReportContent, ReportQuery

router = APIRouter()


@router.get("", response_model=List[Report], response_model_exclude_none=True)
async def list_reports(
    query: ReportQuery = Depends(get_report_query),
    identity: Identity = Depends(get_identity),
    reports: ReportCrud = Depends(get_reports),
) -> Any:
    """List reports, optionally filtered by program, event and client."""
    return await reports.list(query, identity)


@router.post("", response_model=Report, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def create_report(
    content: ReportContent,
    identity: Identity = Depends(get_identity),
    reports: ReportCrud = Depends(get_reports),
) -> Any:
    """Submit a report for an event."""
    return await reports.create(content, identity)


@router.get("/{report_id}", response_model=Report, response_model_exclude_none=True)
async def get_report(
    report_id: ObjectId,
    identity: Identity = Depends(get_identity),
    reports: ReportCrud = Depends(get_reports),
) -> Any:
    return await reports.get(report_id, identity)


@router.put("/{report_id}", response_model=Report, response_model_exclude_none=True)
async def update_report(
    report_id: ObjectId,
    content: ReportContent,
    identity: Identity = Depends(get_identity),
    reports: ReportCrud = Depends(get_reports),
) -> Any:
    """Replace the content of a report."""
    return await reports.update(report_id, content, identity)


@router.delete("/{report_id}", response_model=Report, response_model_exclude_none=True)
async def delete_report(
    report_id: ObjectId,
    identity: Identity = Depends(get_identity),
    reports: ReportCrud = Depends(get_reports),
) -> Any:
    """Delete a report."""
    return await reports.delete(report_id, identity)
