"""
Tests for the requests-based API client, with the HTTP session stubbed.
"""

import pytest
import requests

from client.api_client import ApiError, SheetsApiClient, _ProgressBody


class FakeResponse:
    def __init__(self, status_code, body=None, text=''):
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("No JSON")
        return self._body


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.exc:
            raise self.exc
        return self.response


class TestSheetsApiClient:
    """Test URL building, payloads and error mapping."""

    def test_get_sheet_quotes_name(self):
        session = FakeSession(FakeResponse(200, {'name': 'Q1 / Q2', 'rows': []}))
        client = SheetsApiClient('http://api.local/', session=session)

        assert client.get_sheet('Q1 / Q2')['name'] == 'Q1 / Q2'
        method, url, _ = session.requests[0]
        assert method == 'GET'
        assert url == 'http://api.local/sheets/Q1%20%2F%20Q2'

    def test_row_operations(self):
        session = FakeSession(FakeResponse(200, {'message': 'ok'}))
        client = SheetsApiClient('http://api.local', session=session)

        client.append_row('Jan', ['A', 1])
        client.replace_row('Jan', 2, ['B', 2])
        client.delete_row('Jan', 3)

        assert [(m, u, k.get('json')) for m, u, k in session.requests] == [
            ('POST', 'http://api.local/sheets/Jan/rows', {'row': ['A', 1]}),
            ('PATCH', 'http://api.local/sheets/Jan/rows/2', {'row': ['B', 2]}),
            ('DELETE', 'http://api.local/sheets/Jan/rows/3', None),
        ]

    def test_error_payload_becomes_api_error(self):
        session = FakeSession(FakeResponse(404, {'error': 'Sheet not found'}))
        client = SheetsApiClient('http://api.local', session=session)

        with pytest.raises(ApiError) as exc_info:
            client.get_sheet('Nope')

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == 'Sheet not found'

    def test_non_json_error(self):
        session = FakeSession(FakeResponse(502, None, text='Bad Gateway'))
        client = SheetsApiClient('http://api.local', session=session)

        with pytest.raises(ApiError) as exc_info:
            client.delete_row('Jan', 1)

        assert exc_info.value.message == 'Bad Gateway'

    def test_transport_error(self):
        session = FakeSession(exc=requests.exceptions.ConnectionError('refused'))
        client = SheetsApiClient('http://api.local', session=session)

        with pytest.raises(ApiError) as exc_info:
            client.get_sheet('Jan')

        assert exc_info.value.status_code is None
        assert 'refused' in exc_info.value.message

    def test_upload_sends_multipart_file(self, tmp_path):
        path = tmp_path / 'book.xlsx'
        path.write_bytes(b'PK\x03\x04data')
        session = FakeSession(FakeResponse(201, {'message': 'ok', 'sheets': ['Jan', 'Feb']}))
        client = SheetsApiClient('http://api.local', session=session)

        assert client.upload(str(path)) == ['Jan', 'Feb']

        method, url, kwargs = session.requests[0]
        assert (method, url) == ('POST', 'http://api.local/upload')
        assert kwargs['headers']['Content-Type'].startswith('multipart/form-data; boundary=')
        assert b'name="file"; filename="book.xlsx"' in kwargs['data']
        assert b'PK\x03\x04data' in kwargs['data']


class TestProgressBody:
    """Test upload progress reporting."""

    def test_reports_progress_per_block(self):
        seen = []
        body = _ProgressBody(b"x" * 100, seen.append)

        chunks = []
        while True:
            chunk = body.read(30)
            if not chunk:
                break
            chunks.append(chunk)

        assert len(body) == 100
        assert b''.join(chunks) == b'x' * 100
        assert seen[:4] == [30, 60, 90, 100]

    def test_read_without_size_returns_the_rest(self):
        seen = []
        body = _ProgressBody(b"x" * 100, seen.append)

        assert body.read(40) == b'x' * 40
        assert body.read() == b'x' * 60
        assert body.read() == b''
        assert seen[:2] == [40, 100]
