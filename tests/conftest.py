"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from pathlib import Path

# Set environment variables BEFORE any imports that might use them
os.environ["APP_ENV"] = "development"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["GOOGLE_SHEETS_SPREADSHEET_ID"] = ""
os.environ["GOOGLE_SHEETS_SHEET_NAME"] = ""
os.environ["GOOGLE_SHEETS_CREDENTIALS_JSON"] = ""
os.environ["CARD_STORE_PATH"] = ""

import httplib2
import pytest
from googleapiclient.errors import HttpError

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import AppConfig, SheetsConfig
from models.card import CardRecord, NormalizedFields
from services.card_store import InMemoryCardStore

LONG_DESCRIPTION = (
    "Great card from the 2020 Topps flagship set featuring Mike Trout of the Los Angeles "
    "Angels. Professionally graded by PSA with a strong 9 grade, sharp corners, clean "
    "surfaces and well centered borders. A must-have for any serious collector of modern "
    "baseball cards. Ships securely in a team bag and top loader with tracking."
)


def make_http_error(status: int) -> HttpError:
    """Build a googleapiclient HttpError with the given HTTP status."""
    return HttpError(httplib2.Response({"status": status}), b"error")


# =============================================================================
# FAKE GOOGLE SHEETS SERVICE
# =============================================================================

class FakeRequest:
    def __init__(self, fn):
        self._fn = fn

    def execute(self):
        return self._fn()


class _FakeValues:
    def __init__(self, svc: "FakeSheetsService"):
        self.svc = svc

    def get(self, spreadsheetId, range):
        def run():
            self.svc.calls.append(("values.get", range))
            if self.svc.fail_on == "values.get":
                raise make_http_error(500)
            if not self.svc.rows:
                return {"range": range}
            return {"range": range, "values": [list(r) for r in self.svc.rows]}
        return FakeRequest(run)

    def update(self, spreadsheetId, range, valueInputOption, body):
        def run():
            self.svc.calls.append(("values.update", range))
            if self.svc.fail_on == "values.update":
                raise make_http_error(403)
            self.svc.updates.append((range, body["values"][0]))
            return {"updatedRange": range}
        return FakeRequest(run)


class _FakeSpreadsheets:
    def __init__(self, svc: "FakeSheetsService"):
        self.svc = svc

    def get(self, spreadsheetId):
        def run():
            self.svc.calls.append(("get", spreadsheetId))
            if self.svc.not_found:
                raise make_http_error(404)
            return {
                "spreadsheetId": spreadsheetId,
                "sheets": [{"properties": {"title": t}} for t in self.svc.tabs],
            }
        return FakeRequest(run)

    def batchUpdate(self, spreadsheetId, body):
        def run():
            self.svc.calls.append(("batchUpdate", spreadsheetId))
            for req in body["requests"]:
                self.svc.tabs.append(req["addSheet"]["properties"]["title"])
            self.svc.batch_updates.append(body)
            return {"replies": [{}]}
        return FakeRequest(run)

    def values(self):
        return _FakeValues(self.svc)


class FakeSheetsService:
    """In-memory stand-in for the Sheets v4 resource (single tab of rows)."""

    def __init__(self, rows=None, tabs=("Cards",), not_found=False, fail_on=None):
        self.rows = [list(r) for r in (rows or [])]
        self.tabs = list(tabs)
        self.not_found = not_found
        self.fail_on = fail_on
        self.updates = []
        self.batch_updates = []
        self.calls = []

    def spreadsheets(self):
        return _FakeSpreadsheets(self)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def make_card():
    """Factory for CardRecord objects with sensible normalized fields."""
    def _make(card_id="card-1", auto_title=None, auto_description=None, **normalized):
        fields = {
            "year": "2020",
            "set": "Topps",
            "card_number": "42",
            "title": "2020 Topps #42 Mike Trout PSA 9",
            "player_first_name": "Mike",
            "player_last_name": "Trout",
            "grading_company": "PSA",
            "grade": "9",
            "cert": "12345678",
            "caption": "Mike Trout 2020 Topps",
        }
        fields.update(normalized)
        return CardRecord(
            id=card_id,
            normalized=NormalizedFields(**fields),
            auto_title=auto_title,
            auto_description=auto_description,
        )
    return _make


@pytest.fixture
def long_description():
    return LONG_DESCRIPTION


@pytest.fixture
def store():
    return InMemoryCardStore()


@pytest.fixture
def make_sheets_service():
    """Factory for FakeSheetsService instances (rows, tabs, not_found, fail_on)."""
    return FakeSheetsService


@pytest.fixture
def http_error():
    return make_http_error


@pytest.fixture
def sheets_service():
    return FakeSheetsService()


@pytest.fixture
def app_config():
    return AppConfig(sheets=SheetsConfig(spreadsheet_id="", sheet_name=""))


@pytest.fixture
def client(store, sheets_service, app_config):
    """Test client wired to the in-memory store and the fake Sheets service."""
    from fastapi.testclient import TestClient

    from api import deps
    from api.main import app

    app.dependency_overrides[deps.get_card_store] = lambda: store
    app.dependency_overrides[deps.get_app_config] = lambda: app_config
    app.dependency_overrides[deps.get_sheets_service_factory] = lambda: (lambda config: sheets_service)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
