"""
ListQuery model representing a server-side list query (ephemeral).
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ListQuery(BaseModel):
    """
    A filtered, sorted and projected query against one list.

    Attributes:
        list_title: Title of the list the query runs against
        view_xml: CAML <View> document sent to RenderListDataAsStream
        view_fields: Projected fields, in column order
        threshold: Items with a completion date at or before this instant match
    """

    list_title: str = Field(..., min_length=1)
    view_xml: str
    view_fields: list[str]
    threshold: datetime

    class Config:
        frozen = True
