"""
Server-side list query construction.
"""

from .caml_builder import build_list_query, build_view_xml

__all__ = [
    "build_list_query",
    "build_view_xml",
]
