"""
Fetches raw tabs from Google Sheets.

Two modes, picked only from the credentials in the config:
- SheetsApiTransport: an API key or access token is set; every data tab is
  read through the Sheets v4 API.
- CsvExportTransport: no credential; one tab is downloaded from the public
  CSV export.
There is no fallback from one mode to the other.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import requests
from pydantic import BaseModel, Field, field_validator

from . import settings
from .errors import (
    AccessDeniedError,
    CredentialError,
    SheetNotFoundError,
    SheetSyncError,
    SheetTransportError,
)
from .parsers import BranchStrategy, parse_csv
from .schemas import RawTab

logger = logging.getLogger(__name__)


class SheetSourceConfig(BaseModel):
    """Where to read the sheet from and with which credentials."""

    sheet_id: str = Field(..., min_length=1)
    sheet_gid: str = "0"
    csv_tab_name: str = settings.CSV_TAB_NAME
    api_key: Optional[str] = None
    access_token: Optional[str] = None
    timeout: float = Field(default=settings.REQUEST_TIMEOUT, gt=0)
    ignored_tabs: list[str] = Field(default_factory=lambda: list(settings.IGNORED_TABS))

    @field_validator("sheet_id", "sheet_gid", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("api_key", "access_token")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key or self.access_token)

    @classmethod
    def from_settings(cls, **overrides) -> "SheetSourceConfig":
        """Builds a config from the environment-backed settings; keyword overrides win."""
        values = {
            "sheet_id": settings.SHEET_ID,
            "sheet_gid": settings.SHEET_GID,
            "csv_tab_name": settings.CSV_TAB_NAME,
            "api_key": settings.GOOGLE_API_KEY,
            "access_token": settings.GOOGLE_ACCESS_TOKEN,
            "timeout": settings.REQUEST_TIMEOUT,
        }
        values.update(overrides)
        return cls(**values)


def looks_like_html(body: str) -> bool:
    head = body.lstrip("\ufeff \t\r\n")[:64].lower()
    return head.startswith("<!doctype html") or head.startswith("<html")


def _error_detail(response: requests.Response) -> str:
    """Pulls Google's error message out of a JSON error body, if there is one."""
    try:
        payload = response.json()
    except ValueError:
        return ""
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        return str(payload["error"].get("message", ""))
    return ""


def classify_api_error(response: requests.Response, sheet_id: str) -> SheetSyncError:
    status = response.status_code
    detail = _error_detail(response)

    if status == 401:
        return CredentialError(
            "Google rejected the API key or access token (401). "
            "Check the key in your settings or sign in again.",
            status_code=status,
        )
    if status == 403:
        return AccessDeniedError(
            "The spreadsheet exists but this account cannot see it (403). "
            "Share the sheet with the account, or enable the Sheets API for the key.",
            status_code=status,
        )
    if status == 404:
        return SheetNotFoundError(
            f"Spreadsheet '{sheet_id}' was not found (404). Check the SHEET_ID.",
            status_code=status,
        )
    return SheetTransportError(
        f"Google Sheets request failed ({status}): {detail or response.reason or 'no details'}",
        status_code=status,
    )


class SheetTransport(ABC):
    mode: str = ""
    branch_strategy: BranchStrategy = BranchStrategy.TAB_NAME

    def __init__(self, config: SheetSourceConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def _get(self, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.get(url, timeout=self.config.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise SheetTransportError(
                f"Could not reach Google Sheets: {e}. Check your network connection and retry."
            ) from e

    @abstractmethod
    def fetch_tabs(self) -> list[RawTab]:
        """Returns every data tab of the sheet as a raw matrix."""
        pass


class SheetsApiTransport(SheetTransport):
    """Authenticated, multi-tab fetch through the Sheets v4 API."""

    mode = "api"
    branch_strategy = BranchStrategy.TAB_NAME

    def __init__(self, config: SheetSourceConfig, session: Optional[requests.Session] = None):
        if not config.has_credentials:
            raise CredentialError(
                "The Sheets API needs an API key or an access token. "
                "Set GOOGLE_API_KEY or GOOGLE_ACCESS_TOKEN."
            )
        super().__init__(config, session)
        self.base_url = f"{settings.SHEETS_API_URL}/{config.sheet_id}"

    def _auth(self) -> tuple[dict[str, str], dict[str, str]]:
        params = {"key": self.config.api_key} if self.config.api_key else {}
        headers = (
            {"Authorization": f"Bearer {self.config.access_token}"}
            if self.config.access_token
            else {}
        )
        return params, headers

    def list_tabs(self) -> list[str]:
        params, headers = self._auth()
        params["fields"] = "sheets.properties.title"
        response = self._get(self.base_url, params=params, headers=headers)
        if not response.ok:
            raise classify_api_error(response, self.config.sheet_id)

        try:
            payload = response.json()
        except ValueError as e:
            raise SheetTransportError("Google Sheets returned unreadable metadata. Retry later.") from e

        sheets = payload.get("sheets", []) if isinstance(payload, dict) else None
        if not isinstance(sheets, list):
            raise SheetTransportError("Google Sheets returned unexpected metadata. Retry later.")

        return [
            str((sheet.get("properties") or {}).get("title", ""))
            for sheet in sheets
            if isinstance(sheet, dict)
        ]

    def fetch_tab(self, title: str) -> RawTab:
        # A1 notation: the tab name is single-quoted, embedded quotes are doubled.
        tab_range = "'" + title.replace("'", "''") + "'"
        params, headers = self._auth()
        response = self._get(
            f"{self.base_url}/values/{quote(tab_range, safe='')}", params=params, headers=headers
        )
        if not response.ok:
            raise classify_api_error(response, self.config.sheet_id)

        payload = response.json()
        if not isinstance(payload, dict):
            raise SheetTransportError(f"Tab '{title}' returned an unexpected value range.")

        # An empty tab comes back without "values" (or with null).
        values = payload.get("values") or []
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise SheetTransportError(f"Tab '{title}' returned an unexpected value range.")

        rows = [["" if cell is None else str(cell) for cell in row] for row in values]
        return RawTab(name=title, rows=rows)

    def fetch_tabs(self) -> list[RawTab]:
        ignored = {name.strip().lower() for name in self.config.ignored_tabs}
        titles = [title for title in self.list_tabs() if title.strip().lower() not in ignored]
        logger.info(f"  > Found {len(titles)} data tab(s): {', '.join(titles) or 'none'}")

        tabs = []
        for title in titles:
            try:
                tabs.append(self.fetch_tab(title))
            except (SheetSyncError, ValueError) as e:
                logger.warning(f"  > ⚠️  Could not read tab '{title}': {e}. Skipping.")
        return tabs


class CsvExportTransport(SheetTransport):
    """Unauthenticated fetch of a single tab through the public CSV export."""

    mode = "csv"
    branch_strategy = BranchStrategy.HEADER_TEXT

    def fetch_tabs(self) -> list[RawTab]:
        url = settings.CSV_EXPORT_URL.format(sheet_id=self.config.sheet_id)
        response = self._get(url, params={"format": "csv", "gid": self.config.sheet_gid})
        if not response.ok:
            raise SheetTransportError(
                f"Could not download the sheet export ({response.status_code}). "
                "Check your connection and the SHEET_ID / SHEET_GID.",
                status_code=response.status_code,
            )

        body = response.text
        if looks_like_html(body):
            raise AccessDeniedError(
                "The sheet answered with a web page instead of CSV, so it is not public. "
                "Set sharing to 'Anyone with the link can view' or configure an API key."
            )

        return [RawTab(name=self.config.csv_tab_name, rows=parse_csv(body))]


def select_transport(
    config: SheetSourceConfig, session: Optional[requests.Session] = None
) -> SheetTransport:
    """Any credential selects the API; otherwise the public CSV export is used."""
    if config.has_credentials:
        return SheetsApiTransport(config, session)
    return CsvExportTransport(config, session)
