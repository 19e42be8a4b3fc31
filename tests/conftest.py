import json
from urllib.parse import quote

import pytest
import requests

from inventory_sync import settings
from inventory_sync.transport import SheetSourceConfig

SHEET_ID = "sheet-123"


def make_response(status_code: int = 200, json_body=None, text: str = "", reason: str = "") -> requests.Response:
    """Builds a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.encoding = "utf-8"
    body = json.dumps(json_body) if json_body is not None else text
    response._content = body.encode("utf-8")
    return response


def metadata_url(sheet_id: str = SHEET_ID) -> str:
    return f"{settings.SHEETS_API_URL}/{sheet_id}"


def values_url(title: str, sheet_id: str = SHEET_ID) -> str:
    return f"{metadata_url(sheet_id)}/values/{quote(a1_range(title), safe='')}"


def a1_range(title: str) -> str:
    return "'" + title.replace("'", "''") + "'"


def csv_url(sheet_id: str = SHEET_ID) -> str:
    return settings.CSV_EXPORT_URL.format(sheet_id=sheet_id)


def metadata_body(*titles: str) -> dict:
    return {"sheets": [{"properties": {"title": title}} for title in titles]}


class FakeSession:
    """Stands in for requests.Session: answers GETs from a url -> response map."""

    def __init__(self, responses: dict):
        self.responses = responses
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append(
            {"url": url, "params": dict(params or {}), "headers": dict(headers or {}), "timeout": timeout}
        )
        result = self.responses[url]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def csv_config():
    return SheetSourceConfig(sheet_id=SHEET_ID, sheet_gid="42", csv_tab_name="Main Hub")


@pytest.fixture
def api_config():
    return SheetSourceConfig(sheet_id=SHEET_ID, api_key="test-key")


@pytest.fixture
def lagos_rows():
    return [
        ["S/N", "Product", "1/5 Inbound", "1/5 Balance"],
        ["1", "Widget A", "10", "40"],
        ["2", "Widget B", "-", "15"],
    ]
