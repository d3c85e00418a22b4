"""
Pytest configuration and fixtures for sheet editor tests.
"""

import io
import os
from datetime import datetime

import pytest

# Point the app at an in-memory database before api.config is imported
os.environ['DATABASE_URL'] = os.getenv('TEST_DATABASE_URL', 'sqlite://')
os.environ['LOG_FILE'] = ''

import openpyxl
from fastapi.testclient import TestClient

from api.dependencies import engine as app_engine, SessionLocal
from api.main import app
from backend.models.schema import Base, Sheet
from client.api_client import ApiError
from client.row_validator import RowValidator


@pytest.fixture(scope='function')
def engine():
    """Fresh schema for every test."""
    Base.metadata.create_all(app_engine)
    yield app_engine
    Base.metadata.drop_all(app_engine)


@pytest.fixture(scope='function')
def session(engine):
    """Create a new database session for a test."""
    sess = SessionLocal()
    yield sess
    sess.close()


@pytest.fixture
def client(engine):
    """HTTP client against the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_workbook():
    """
    Build .xlsx bytes from an ordered mapping of sheet name -> rows.
    """
    def build(sheets):
        wb = openpyxl.Workbook()
        wb.remove(wb.active)
        for name, rows in sheets.items():
            ws = wb.create_sheet(title=name)
            for row in rows:
                ws.append(row)
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return build


@pytest.fixture
def jan_feb_workbook(make_workbook):
    """Two-sheet workbook used by the end-to-end scenario."""
    return make_workbook({
        'Jan': [['Name', 'Amt', 'Date'], ['A', 10, '2024-01-05']],
        'Feb': [['Name', 'Amt', 'Date'], ['B', 7, '2024-02-11'], ['C', 3, '2024-02-12']],
    })


@pytest.fixture
def add_sheet(session):
    """Insert a sheet document directly."""
    def add(name, rows):
        sheet = Sheet(name=name, rows=rows)
        session.add(sheet)
        session.commit()
        return sheet

    return add


@pytest.fixture
def fixed_now():
    return datetime(2026, 10, 19, 9, 30)


@pytest.fixture
def validator(fixed_now):
    """Validator whose current month is October 2026."""
    return RowValidator(clock=lambda: fixed_now)


class FakeSheetsApi:
    """In-memory stand-in for SheetsApiClient."""

    def __init__(self, sheets=None):
        self.sheets = {name: [list(r) for r in rows] for name, rows in (sheets or {}).items()}
        self.calls = []
        self.fail_on = set()

    def _maybe_fail(self, operation):
        self.calls.append(operation)
        if operation in self.fail_on:
            raise ApiError(f"{operation} failed", status_code=500)

    def upload(self, file_path, progress_callback=None):
        self._maybe_fail('upload')
        if progress_callback:
            for percent in (25, 50, 100):
                progress_callback(percent)
        return list(self.sheets)

    def get_sheet(self, name):
        self._maybe_fail('get_sheet')
        if name not in self.sheets:
            raise ApiError("Sheet not found", status_code=404)
        return {'name': name, 'rows': [list(r) for r in self.sheets[name]]}

    def append_row(self, name, row):
        self._maybe_fail('append_row')
        self.sheets[name].append(list(row))
        return {'message': 'Row added successfully'}

    def replace_row(self, name, index, row):
        self._maybe_fail('replace_row')
        self.sheets[name][index] = list(row)
        return {'message': 'Row updated successfully'}

    def delete_row(self, name, index):
        self._maybe_fail('delete_row')
        del self.sheets[name][index]
        return {'message': 'Row deleted successfully'}


@pytest.fixture
def make_fake_api():
    """
    Build an in-memory API that mirrors the server's positional row
    semantics and fails any operation named in its fail_on set.
    """
    return FakeSheetsApi
