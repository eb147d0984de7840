"""Unit tests for the configuration document fetchers."""

from __future__ import annotations

import pytest
import requests

from envship.core.errors import FetchFailedError, FetchTimeoutError
from envship.core.fetchers import ConfigFetcher, FileConfigFetcher, HttpConfigFetcher


def _response(url: str, status: int, body: bytes = b"") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.reason = "OK" if status < 400 else "Not Found"
    response._content = body
    return response


class FakeSession:
    """Stands in for requests.Session; records the last request."""

    def __init__(self, status: int = 200, body: bytes = b"{}", error: Exception | None = None):
        self.status = status
        self.body = body
        self.error = error
        self.requests: list[dict] = []

    def get(self, url, headers=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return _response(url, self.status, self.body)


class TestHttpConfigFetcher:
    def test_fetch_returns_body(self):
        session = FakeSession(body=b'{"name": "qa"}')
        fetcher = HttpConfigFetcher("https://app.example.com/", session=session)

        assert fetcher.fetch("/assets/config/environment.json") == b'{"name": "qa"}'
        assert session.requests[0]["url"] == (
            "https://app.example.com/assets/config/environment.json"
        )

    def test_bypasses_caches(self):
        session = FakeSession()
        HttpConfigFetcher("https://app.example.com", session=session).fetch("x.json")
        assert session.requests[0]["headers"]["Cache-Control"] == "no-cache"

    def test_timeout_is_bounded(self):
        session = FakeSession()
        HttpConfigFetcher("https://app.example.com", timeout=2.5, session=session).fetch("x")
        assert session.requests[0]["timeout"] == 2.5

    def test_timeout_maps_to_fetch_timeout(self):
        session = FakeSession(error=requests.Timeout("read timed out"))
        fetcher = HttpConfigFetcher("https://app.example.com", session=session)
        with pytest.raises(FetchTimeoutError):
            fetcher.fetch("x")

    def test_timeout_is_a_fetch_failure(self):
        assert issubclass(FetchTimeoutError, FetchFailedError)

    def test_connection_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))
        fetcher = HttpConfigFetcher("https://app.example.com", session=session)
        with pytest.raises(FetchFailedError, match="refused"):
            fetcher.fetch("x")

    def test_http_error_status(self):
        session = FakeSession(status=404)
        fetcher = HttpConfigFetcher("https://app.example.com", session=session)
        with pytest.raises(FetchFailedError, match="404"):
            fetcher.fetch("/assets/config/environment.json")


class TestFileConfigFetcher:
    def test_reads_relative_to_root(self, tmp_path):
        (tmp_path / "assets").mkdir()
        (tmp_path / "assets" / "doc.json").write_bytes(b"{}")
        assert FileConfigFetcher(tmp_path).fetch("/assets/doc.json") == b"{}"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FetchFailedError):
            FileConfigFetcher(tmp_path).fetch("/assets/doc.json")


class TestProtocol:
    def test_fetchers_satisfy_protocol(self, tmp_path):
        assert isinstance(FileConfigFetcher(tmp_path), ConfigFetcher)
        assert isinstance(
            HttpConfigFetcher("https://app.example.com", session=FakeSession()),
            ConfigFetcher,
        )
