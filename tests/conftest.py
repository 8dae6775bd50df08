"""
Pytest configuration and fixtures for done-export tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import asyncio
import os
from datetime import datetime, timezone
from typing import Any

import pytest
from dotenv import dotenv_values

from done_export.core.models import ExportConfig
from done_export.export.writers import file_url
from done_export.sharepoint.context import SharePointContext


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests across several components (HTTP is mocked)"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that drive the CLI"
    )


# =======================
# FAKE SHAREPOINT
# =======================

class FakeSharePoint(SharePointContext):
    """
    In-memory list and document library.

    Rows are served in pages of page_size with NextHref tokens like the
    real RenderListDataAsStream endpoint. Filtering is not emulated: the
    configured rows are what "matched" on the server.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        page_size: int = 100,
        query_error: Exception | None = None,
        upload_error: Exception | None = None,
    ):
        self.rows = rows or []
        self.page_size = page_size
        self.query_error = query_error
        self.upload_error = upload_error
        self.query_calls: list[dict[str, Any]] = []
        self.upload_calls: list[dict[str, Any]] = []
        self.files: dict[str, bytes] = {}
        self.upload_gate: asyncio.Event | None = None
        self.upload_started: asyncio.Event | None = None
        self.closed = False

    async def render_list_data_as_stream(self, list_title, view_xml, paging=None):
        self.query_calls.append({"list_title": list_title, "view_xml": view_xml, "paging": paging})
        if self.query_error is not None:
            raise self.query_error

        start = 0
        if paging:
            start = int(paging.split("PageFirstRow=")[1].split("&")[0]) - 1

        end = start + self.page_size
        page: dict[str, Any] = {"Row": self.rows[start:end], "FirstRow": start + 1}
        if end < len(self.rows):
            page["NextHref"] = f"?Paged=TRUE&p_ID={end}&PageFirstRow={end + 1}&View=fake"
        return page

    async def add_file(self, folder_url, file_name, content, content_type, overwrite=True):
        self.upload_calls.append({
            "folder_url": folder_url,
            "file_name": file_name,
            "content": content,
            "content_type": content_type,
            "overwrite": overwrite,
        })
        if self.upload_started is not None:
            self.upload_started.set()
        if self.upload_gate is not None:
            await self.upload_gate.wait()
        if self.upload_error is not None:
            raise self.upload_error

        url = file_url(folder_url, file_name)
        if url in self.files and not overwrite:
            raise FileExistsError(url)
        self.files[url] = content
        return {"Name": file_name, "ServerRelativeUrl": url, "Length": str(len(content))}

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_sharepoint() -> FakeSharePoint:
    """Empty fake site; tests fill in rows and failures"""
    return FakeSharePoint()


@pytest.fixture
def fake_sharepoint_factory():
    """Build fake sites with specific rows, page sizes or failures"""
    return FakeSharePoint


# =======================
# EXPORT FIXTURES
# =======================

@pytest.fixture
def fixed_now() -> datetime:
    """Reference time used as 'now' in export runs"""
    return datetime(2025, 11, 17, 8, 30, 15, 123456, tzinfo=timezone.utc)


@pytest.fixture
def export_config() -> ExportConfig:
    """Export configuration for a small story list"""
    return ExportConfig(
        list_title="UserStories",
        status_field="Status",
        done_value="Done",
        done_date_field="DoneDate",
        select_fields="ID,Status,DoneDate",
        older_than_days=30,
        target_folder_url="/sites/Agile/Shared Documents/Exports",
        file_prefix="UserStories_Archive",
    )


@pytest.fixture
def story_rows() -> list[dict[str, Any]]:
    """Raw rows as returned by RenderListDataAsStream (with metadata fields)"""
    return [
        {
            "ID": 1,
            "Status": "Done",
            "DoneDate": "2023-01-01T00:00:00Z",
            "FileRef": "/sites/Agile/Lists/UserStories/1_.000",
            "FSObjType": "0",
        },
        {
            "ID": 2,
            "Status": "Done",
            "DoneDate": "2023-02-14T09:15:30Z",
            "FileRef": "/sites/Agile/Lists/UserStories/2_.000",
            "FSObjType": "0",
        },
    ]


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def test_env_vars(monkeypatch):
    """
    Set test environment variables from config/test.env for one test
    """
    env_path = os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "config",
        "test.env"
    )

    if os.path.exists(env_path):
        for key, value in dotenv_values(env_path).items():
            if value is not None:
                monkeypatch.setenv(key, value)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove SharePoint settings inherited from the outer environment"""
    for name in (
        "SHAREPOINT_SITE_URL",
        "SHAREPOINT_ACCESS_TOKEN",
        "SHAREPOINT_TIMEOUT",
        "SHAREPOINT_VERIFY_SSL",
    ):
        monkeypatch.delenv(name, raising=False)
