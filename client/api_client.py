"""
HTTP client for the sheet editor API.

Thin wrapper over ``requests``: one method per endpoint, non-2xx responses
and transport failures raised as :class:`ApiError`.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import requests
from urllib3 import encode_multipart_formdata

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30
XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

ProgressCallback = Callable[[int], None]


class ApiError(Exception):
    """Request failed; ``status_code`` is None for transport errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class _ProgressBody:
    """
    File-like request body that reports upload progress as it is read.

    The transport pulls the body in blocks; each read updates the callback
    with the percentage of bytes handed over so far. A read with no size
    returns everything left.
    """

    def __init__(self, data: bytes, callback: ProgressCallback):
        self._data = data
        self._callback = callback
        self._sent = 0

    def __len__(self):
        return len(self._data)

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            size = len(self._data) - self._sent
        chunk = self._data[self._sent:self._sent + size]
        self._sent += len(chunk)
        if self._data:
            self._callback(round(self._sent * 100 / len(self._data)))
        return chunk


class SheetsApiClient:
    """Client for the upload and sheet row endpoints."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, *parts: str) -> str:
        return '/'.join([self.base_url] + [quote(str(p), safe='') for p in parts])

    def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ApiError(f"Network error: {e}")

        if not 200 <= response.status_code < 300:
            raise ApiError(self._error_message(response), status_code=response.status_code)

        return response.json()

    @staticmethod
    def _error_message(response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get('error'):
            return str(body['error'])
        return f"HTTP {response.status_code}"

    def upload(self, file_path: str, progress_callback: Optional[ProgressCallback] = None) -> List[str]:
        """
        Upload a spreadsheet file.

        Returns:
            Worksheet names in file order
        """
        path = Path(file_path)
        body, content_type = encode_multipart_formdata({
            'file': (path.name, path.read_bytes(), XLSX_CONTENT_TYPE)
        })
        data = _ProgressBody(body, progress_callback) if progress_callback else body

        logger.info(f"Uploading {path.name} ({len(body)} bytes) to {self.base_url}")
        result = self._request(
            'POST', self._url('upload'),
            data=data,
            headers={'Content-Type': content_type}
        )
        return result.get('sheets', [])

    def get_sheet(self, name: str) -> Dict[str, Any]:
        """Fetch a full sheet document."""
        return self._request('GET', self._url('sheets', name))

    def append_row(self, name: str, row: List[Any]) -> Dict[str, Any]:
        return self._request('POST', self._url('sheets', name, 'rows'), json={'row': row})

    def replace_row(self, name: str, index: int, row: List[Any]) -> Dict[str, Any]:
        return self._request('PATCH', self._url('sheets', name, 'rows', index), json={'row': row})

    def delete_row(self, name: str, index: int) -> Dict[str, Any]:
        return self._request('DELETE', self._url('sheets', name, 'rows', index))
