"""
CAML query construction for the done-items export.

Builds the <View> document sent to RenderListDataAsStream:

    <View>
      <ViewFields>...</ViewFields>
      <Query>
        <Where>
          <And>
            <Eq><FieldRef Name="{status}"/><Value Type="Text">{done}</Value></Eq>
            <Leq><FieldRef Name="{date}"/><Value IncludeTimeValue="TRUE" Type="DateTime">{threshold}</Value></Leq>
          </And>
        </Where>
        <OrderBy><FieldRef Name="{date}" Ascending="TRUE"/></OrderBy>
      </Query>
      <RowLimit Paged="TRUE">{page_size}</RowLimit>
    </View>

Filtering and sorting happen on the server, the client only pages.
"""

import xml.etree.ElementTree as ET
from datetime import datetime

from done_export.core.models import ExportConfig, ListQuery
from done_export.core.timestamps import threshold_date, to_iso_utc


def _field_ref(parent: ET.Element, name: str, **attrs: str) -> ET.Element:
    return ET.SubElement(parent, "FieldRef", {"Name": name, **attrs})


def _comparison(parent: ET.Element, operator: str, field: str, value: str, value_attrs: dict) -> None:
    element = ET.SubElement(parent, operator)
    _field_ref(element, field)
    value_element = ET.SubElement(element, "Value", value_attrs)
    value_element.text = value


def build_view_xml(
    status_field: str,
    done_value: str,
    done_date_field: str,
    threshold: datetime,
    view_fields: list[str],
    page_size: int,
) -> str:
    """
    Render the CAML view for "status equals done and done date at or before threshold".

    Args:
        status_field: Internal name of the status field
        done_value: Status value of completed items
        done_date_field: Internal name of the completion date field
        threshold: Cut-off instant
        view_fields: Projected fields
        page_size: Rows per page

    Returns:
        The <View> element serialized as a string
    """
    view = ET.Element("View")

    fields = ET.SubElement(view, "ViewFields")
    for name in view_fields:
        _field_ref(fields, name)

    query = ET.SubElement(view, "Query")
    where = ET.SubElement(query, "Where")
    both = ET.SubElement(where, "And")
    _comparison(both, "Eq", status_field, done_value, {"Type": "Text"})
    _comparison(
        both,
        "Leq",
        done_date_field,
        to_iso_utc(threshold),
        {"IncludeTimeValue": "TRUE", "Type": "DateTime"},
    )

    order_by = ET.SubElement(query, "OrderBy")
    _field_ref(order_by, done_date_field, Ascending="TRUE")

    row_limit = ET.SubElement(view, "RowLimit", {"Paged": "TRUE"})
    row_limit.text = str(page_size)

    return ET.tostring(view, encoding="unicode")


def build_list_query(config: ExportConfig, now: datetime | None = None) -> ListQuery:
    """
    Translate an export configuration into a list query.

    Field existence is not checked; an unknown field makes the server
    reject the query when it runs.

    Args:
        config: Export configuration
        now: Reference time (defaults to the current UTC time)

    Returns:
        ListQuery ready for ListItemReader
    """
    threshold = threshold_date(config.older_than_days, now)

    view_xml = build_view_xml(
        status_field=config.status_field,
        done_value=config.done_value,
        done_date_field=config.done_date_field,
        threshold=threshold,
        view_fields=config.select_fields,
        page_size=config.page_size,
    )

    return ListQuery(
        list_title=config.list_title,
        view_xml=view_xml,
        view_fields=list(config.select_fields),
        threshold=threshold,
    )
