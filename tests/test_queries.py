"""
Tests for list query validation, target matching and content validation
"""

import pytest
from pydantic import ValidationError

from vtn.core.errors import ValidationFailed
from vtn.schemas import (
    EventContent,
    EventQuery,
    ProgramContent,
    ProgramQuery,
    ReportContent,
    ReportQuery,
    Resource,
    ResourceContent,
    ResourceQuery,
    VenContent,
    VenQuery,
    parse_query,
)

TARGET_QUERIES = [ProgramQuery, EventQuery, VenQuery, ResourceQuery]


class TestPagination:
    def test_defaults(self):
        query = parse_query(ProgramQuery, {})
        assert query.skip == 0
        assert query.limit == 50

    def test_unset_parameters_use_defaults(self):
        query = parse_query(ReportQuery, {"skip": None, "limit": None, "programID": None})
        assert (query.skip, query.limit, query.program_id) == (0, 50, None)

    @pytest.mark.parametrize("limit", [1, 25, 50])
    def test_limit_in_range(self, limit):
        assert parse_query(VenQuery, {"limit": limit}).limit == limit

    @pytest.mark.parametrize("limit", [0, -1, 51, 1000])
    def test_limit_out_of_range(self, limit):
        with pytest.raises(ValidationFailed):
            parse_query(VenQuery, {"limit": limit})

    def test_negative_skip(self):
        with pytest.raises(ValidationFailed):
            parse_query(ReportQuery, {"skip": -1})

    def test_unknown_parameter(self):
        with pytest.raises(ValidationFailed):
            parse_query(ProgramQuery, {"offset": 3})


class TestTargetPair:
    @pytest.mark.parametrize("query_cls", TARGET_QUERIES)
    def test_type_without_values(self, query_cls):
        with pytest.raises(ValidationFailed) as exc_info:
            parse_query(query_cls, {"targetType": "GROUP"})
        assert "targetType and targetValues" in exc_info.value.detail

    @pytest.mark.parametrize("query_cls", TARGET_QUERIES)
    def test_values_without_type(self, query_cls):
        with pytest.raises(ValidationFailed):
            parse_query(query_cls, {"targetValues": ["group-1"]})

    @pytest.mark.parametrize("query_cls", TARGET_QUERIES)
    def test_both_set(self, query_cls):
        query = parse_query(query_cls, {"targetType": "GROUP", "targetValues": ["group-1"]})
        assert query.target_type == "GROUP"
        assert query.target_values == ["group-1"]

    def test_empty_type_rejected(self):
        with pytest.raises(ValidationFailed):
            parse_query(ProgramQuery, {"targetType": "", "targetValues": ["x"]})


class TestTargetMatching:
    def test_name_label_matches_own_name(self):
        content = ProgramContent(program_name="summer")
        query = ProgramQuery(target_type="PROGRAM_NAME", target_values=["summer", "winter"])
        assert query.matches(content)
        assert not ProgramQuery(target_type="PROGRAM_NAME", target_values=["winter"]).matches(content)

    def test_other_labels_match_target_entries(self):
        content = VenContent(ven_name="ven", targets=[{"type": "GROUP", "values": ["a", "b"]}])
        assert VenQuery(target_type="GROUP", target_values=["b", "c"]).matches(content)
        assert not VenQuery(target_type="GROUP", target_values=["c"]).matches(content)
        assert not VenQuery(target_type="SERVICE_AREA", target_values=["a"]).matches(content)

    def test_name_label_of_other_kind_uses_targets(self):
        content = ResourceContent(
            resource_name="meter",
            targets=[{"type": "VEN_NAME", "values": ["ven-a"]}],
        )
        assert ResourceQuery(target_type="VEN_NAME", target_values=["ven-a"]).matches(content)
        assert ResourceQuery(target_type="RESOURCE_NAME", target_values=["meter"]).matches(content)

    def test_no_filter_matches_everything(self):
        assert VenQuery().matches(VenContent(ven_name="ven"))

    def test_event_query_filters_program(self):
        content = EventContent(program_id="p-1", event_name="peak")
        assert EventQuery(program_id="p-1").matches(content)
        assert not EventQuery(program_id="p-2").matches(content)
        assert EventQuery(target_type="EVENT_NAME", target_values=["peak"]).matches(content)

    def test_report_query_filters(self):
        query = ReportQuery(program_id="p-1", client_name="ven-a")
        assert query.matches(_report("p-1", "e-1", "ven-a"))
        assert not query.matches(_report("p-1", "e-1", "ven-b"))
        assert not query.matches(_report("p-2", "e-1", "ven-a"))


def _report(program_id, event_id, client_name):
    return ReportContent(program_id=program_id, event_id=event_id, client_name=client_name)


class TestNameLength:
    @pytest.mark.parametrize("length", [0, 129, 150])
    def test_resource_name_out_of_range(self, length):
        with pytest.raises(ValidationError) as exc_info:
            ResourceContent(resource_name="x" * length)
        assert "1..=128" in str(exc_info.value)

    @pytest.mark.parametrize("length", [1, 128])
    def test_resource_name_in_range(self, length):
        assert len(ResourceContent(resource_name="x" * length).resource_name) == length

    @pytest.mark.parametrize("content_cls, field", [
        (ProgramContent, "programName"),
        (VenContent, "venName"),
    ])
    def test_other_names(self, content_cls, field):
        with pytest.raises(ValidationError) as exc_info:
            content_cls.model_validate({field: "x" * 150})
        assert "outside of allowed range 1..=128" in str(exc_info.value)

    def test_whitespace_counts_towards_length(self):
        with pytest.raises(ValidationError) as exc_info:
            ResourceContent(resource_name="x" * 128 + " ")
        assert "length 129" in str(exc_info.value)

    def test_blank_name_has_its_raw_length(self):
        assert ResourceContent(resource_name="   ").resource_name == "   "


class TestContent:
    def test_camel_case_aliases(self):
        content = ProgramContent.model_validate({"programName": "p", "retailerName": "r"})
        assert content.retailer_name == "r"
        assert content.model_dump(by_alias=True)["retailerName"] == "r"

    def test_unknown_fields_are_kept(self):
        content = EventContent.model_validate({"programID": "p-1", "customField": {"a": 1}})
        assert content.model_dump(by_alias=True)["customField"] == {"a": 1}

    def test_event_requires_program(self):
        with pytest.raises(ValidationError):
            EventContent.model_validate({"eventName": "peak"})

    def test_negative_priority_rejected(self):
        with pytest.raises(ValidationError):
            EventContent.model_validate({"programID": "p-1", "priority": -1})

    def test_string_fields_are_kept_verbatim(self):
        content = ProgramContent.model_validate({"programName": "  summer  ", "retailerName": " r "})
        assert content.program_name == "  summer  "
        assert content.retailer_name == " r "


class TestServerKeys:
    def test_server_keys_include_wire_names(self):
        assert Resource.server_keys() >= {"id", "createdDateTime", "modificationDateTime", "venID", "ven_id"}

    def test_stored_content_drops_shadowing_keys(self):
        content = ResourceContent.model_validate(
            {"resourceName": "meter", "venID": "somebody-else", "id": "forged", "note": "kept"}
        )
        stored = Resource.stored_content(content)
        assert stored.model_extra == {"note": "kept"}
        assert content.model_extra["venID"] == "somebody-else"
