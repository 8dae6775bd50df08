"""
Unit tests for CAML query construction.
"""

import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import pytest

from done_export.core.models import ExportConfig
from done_export.core.query import build_list_query, build_view_xml


@pytest.fixture
def now():
    return datetime(2025, 11, 17, 8, 30, 15, 123456, tzinfo=timezone.utc)


class TestBuildListQuery:
    """Tests for build_list_query"""

    def test_query_targets_configured_list(self, export_config, now):
        query = build_list_query(export_config, now=now)

        assert query.list_title == "UserStories"
        assert query.view_fields == ["ID", "Status", "DoneDate"]
        assert query.threshold == datetime(2025, 10, 18, 8, 30, 15, 123456, tzinfo=timezone.utc)

    def test_where_clause(self, export_config, now):
        view = ET.fromstring(build_list_query(export_config, now=now).view_xml)

        both = view.find("./Query/Where/And")
        assert both is not None

        eq = both.find("Eq")
        assert eq.find("FieldRef").get("Name") == "Status"
        assert eq.find("Value").get("Type") == "Text"
        assert eq.find("Value").text == "Done"

        leq = both.find("Leq")
        assert leq.find("FieldRef").get("Name") == "DoneDate"
        assert leq.find("Value").get("Type") == "DateTime"
        assert leq.find("Value").get("IncludeTimeValue") == "TRUE"
        assert leq.find("Value").text == "2025-10-18T08:30:15.123Z"

    def test_sorted_ascending_by_done_date(self, export_config, now):
        view = ET.fromstring(build_list_query(export_config, now=now).view_xml)

        order = view.findall("./Query/OrderBy/FieldRef")
        assert [(f.get("Name"), f.get("Ascending")) for f in order] == [("DoneDate", "TRUE")]

    def test_projection_and_paging(self, export_config, now):
        view = ET.fromstring(build_list_query(export_config, now=now).view_xml)

        assert [f.get("Name") for f in view.findall("./ViewFields/FieldRef")] == ["ID", "Status", "DoneDate"]
        row_limit = view.find("RowLimit")
        assert row_limit.get("Paged") == "TRUE"
        assert row_limit.text == "500"

    def test_zero_day_threshold_is_now(self, export_config, now):
        config = export_config.model_copy(update={"older_than_days": 0})
        assert build_list_query(config, now=now).threshold == now

    def test_done_value_with_markup_stays_well_formed(self, now):
        config = ExportConfig(
            list_title="Tasks",
            status_field="Status",
            done_value='Done <& "closed">',
            done_date_field="Closed",
            select_fields="ID",
            target_folder_url="/Shared Documents",
        )

        view = ET.fromstring(build_list_query(config, now=now).view_xml)

        assert view.find("./Query/Where/And/Eq/Value").text == 'Done <& "closed">'


class TestBuildViewXml:
    """Tests for the raw view renderer"""

    def test_renders_single_view_element(self, now):
        xml = build_view_xml("Status", "Done", "DoneDate", now, ["ID"], 100)

        assert xml.startswith("<View>")
        assert xml.endswith("</View>")
        assert ET.fromstring(xml).find("RowLimit").text == "100"
