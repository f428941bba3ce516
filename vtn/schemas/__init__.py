from vtn.schemas.base import ListQuery, Problem, TargetQuery, parse_query
from vtn.schemas.event import Event, EventContent, EventQuery
from vtn.schemas.program import Program, ProgramContent, ProgramQuery
from vtn.schemas.report import Report, ReportContent, ReportQuery
from vtn.schemas.resource import Resource, ResourceContent, ResourceQuery
from vtn.schemas.target import TargetEntry, TargetLabel
from vtn.schemas.ven import Ven, VenContent, VenQuery

__all__ = [
    "Event",
    "EventContent",
    "EventQuery",
    "ListQuery",
    "Problem",
    "Program",
    "ProgramContent",
    "ProgramQuery",
    "Report",
    "ReportContent",
    "ReportQuery",
    "Resource",
    "ResourceContent",
    "ResourceQuery",
    "TargetEntry",
    "TargetLabel",
    "TargetQuery",
    "Ven",
    "VenContent",
    "VenQuery",
    "parse_query",
]
