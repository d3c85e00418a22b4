"""
Tests for workbook parsing and cell normalisation.
"""

from datetime import date, datetime, time
from pathlib import Path

import pytest
import xlrd

from services.errors import ProcessingError
from services.workbook_parser import (
    FORMAT_XLS, FORMAT_XLSX, XLS_MAGIC, WorkbookParser, detect_format, normalize_cell, trim_grid
)


LEDGER_XLS = Path(__file__).parent / 'fixtures' / 'ledger.xls'


class TestDetectFormat:
    """Test magic-byte format detection."""

    def test_zip_container_is_xlsx(self):
        assert detect_format(b'PK\x03\x04rest') == FORMAT_XLSX

    def test_ole2_container_is_xls(self):
        assert detect_format(XLS_MAGIC + b'rest') == FORMAT_XLS

    @pytest.mark.parametrize('content', [b'', b'Name,Amt\nA,1\n', b'%PDF-1.7'])
    def test_other_bytes_are_rejected(self, content):
        with pytest.raises(ProcessingError):
            detect_format(content)


class TestNormalizeCell:
    """Test conversion of parsed values to stored values."""

    def test_midnight_datetime_becomes_date_string(self):
        assert normalize_cell(datetime(2024, 1, 5)) == '2024-01-05'

    def test_datetime_with_time_keeps_time(self):
        assert normalize_cell(datetime(2024, 1, 5, 13, 45)) == '2024-01-05T13:45:00'

    def test_date_and_time(self):
        assert normalize_cell(date(2024, 2, 29)) == '2024-02-29'
        assert normalize_cell(time(8, 30)) == '08:30:00'

    def test_integral_float_becomes_int(self):
        assert normalize_cell(10.0) == 10
        assert isinstance(normalize_cell(10.0), int)
        assert normalize_cell(10.5) == 10.5

    def test_other_values_pass_through(self):
        assert normalize_cell('text') == 'text'
        assert normalize_cell(True) is True
        assert normalize_cell(None) is None


class TestTrimGrid:
    """Test row and grid trimming."""

    def test_trailing_cells_and_rows_are_dropped(self):
        grid = [['a', None, 'b', None, None], [None, None], ['c'], [None], []]

        assert trim_grid(grid) == [['a', None, 'b'], [], ['c']]

    def test_empty_grid(self):
        assert trim_grid([[None, None]]) == []


class TestWorkbookParserXlsx:
    """Test .xlsx parsing with real workbooks."""

    def test_sheets_in_workbook_order(self, make_workbook):
        content = make_workbook({
            'Zeta': [['z']],
            'Alpha': [['a']],
            'Mid': [['m']],
        })

        sheets = WorkbookParser().parse(content)

        assert [name for name, _ in sheets] == ['Zeta', 'Alpha', 'Mid']

    def test_rows_taken_as_is(self, make_workbook):
        content = make_workbook({
            'Jan': [
                ['Name', 'Amt', 'Date'],
                ['A', 10, datetime(2024, 1, 5)],
                ['B', 2.5, '2024-01-06'],
            ]
        })

        [(name, rows)] = WorkbookParser().parse(content)

        assert name == 'Jan'
        assert rows == [
            ['Name', 'Amt', 'Date'],
            ['A', 10, '2024-01-05'],
            ['B', 2.5, '2024-01-06'],
        ]

    def test_ragged_rows_and_interior_blank_rows(self, make_workbook):
        content = make_workbook({
            'S': [['h1', 'h2', 'h3'], ['only'], [], ['x', None, 'z']]
        })

        [(_, rows)] = WorkbookParser().parse(content)

        assert rows == [['h1', 'h2', 'h3'], ['only'], [], ['x', None, 'z']]

    def test_empty_worksheet(self, make_workbook):
        [(name, rows)] = WorkbookParser().parse(make_workbook({'Blank': []}))

        assert name == 'Blank'
        assert rows == []

    def test_corrupt_archive_wraps_cause(self):
        with pytest.raises(ProcessingError) as exc_info:
            WorkbookParser().parse(b'PK\x03\x04' + b'\x00' * 32)

        assert exc_info.value.cause is not None
        assert 'cause' in exc_info.value.detail


class TestWorkbookParserXlsFile:
    """Test .xls parsing with a real BIFF8 workbook."""

    def test_ledger_fixture(self):
        content = LEDGER_XLS.read_bytes()
        assert detect_format(content) == FORMAT_XLS

        sheets = WorkbookParser().parse(content)

        assert sheets == [
            ('Jan', [['Name', 'Amt', 'Date'], ['A', 10, '2024-01-05'], ['B', 2.5, True]]),
            ('Feb', []),
        ]


class _FakeXlsCell:
    def __init__(self, ctype, value):
        self.ctype = ctype
        self.value = value


class _FakeXlsSheet:
    def __init__(self, name, grid):
        self.name = name
        self._grid = grid
        self.nrows = len(grid)
        self.ncols = max((len(r) for r in grid), default=0)

    def cell(self, r, c):
        row = self._grid[r]
        if c >= len(row):
            return _FakeXlsCell(xlrd.XL_CELL_EMPTY, '')
        return row[c]


class _FakeXlsBook:
    datemode = 0

    def __init__(self, sheets):
        self._sheets = sheets

    def sheets(self):
        return self._sheets


class TestWorkbookParserXls:
    """Test the legacy .xls path with xlrd's workbook API stubbed."""

    def test_cells_mapped_to_plain_values(self, monkeypatch):
        text, number, date_cell = xlrd.XL_CELL_TEXT, xlrd.XL_CELL_NUMBER, xlrd.XL_CELL_DATE
        book = _FakeXlsBook([
            _FakeXlsSheet('Jan', [
                [_FakeXlsCell(text, 'Name'), _FakeXlsCell(text, 'Amt'), _FakeXlsCell(text, 'Date')],
                # 45296 is 2024-01-05 in the 1900 date system
                [_FakeXlsCell(text, 'A'), _FakeXlsCell(number, 10.0), _FakeXlsCell(date_cell, 45296.0)],
                [_FakeXlsCell(xlrd.XL_CELL_BOOLEAN, 1), _FakeXlsCell(xlrd.XL_CELL_BLANK, '')],
            ]),
            _FakeXlsSheet('Feb', []),
        ])
        captured = {}

        def fake_open_workbook(file_contents=None, **kwargs):
            captured['content'] = file_contents
            return book

        monkeypatch.setattr(xlrd, 'open_workbook', fake_open_workbook)
        content = XLS_MAGIC + b'payload'

        sheets = WorkbookParser().parse(content)

        assert captured['content'] == content
        assert sheets == [
            ('Jan', [['Name', 'Amt', 'Date'], ['A', 10, '2024-01-05'], [True]]),
            ('Feb', []),
        ]

    def test_xlrd_failure_becomes_processing_error(self, monkeypatch):
        def broken(**kwargs):
            raise xlrd.XLRDError('Unsupported format, or corrupt file')

        monkeypatch.setattr(xlrd, 'open_workbook', broken)

        with pytest.raises(ProcessingError) as exc_info:
            WorkbookParser().parse(XLS_MAGIC + b'junk')

        assert isinstance(exc_info.value.cause, xlrd.XLRDError)
