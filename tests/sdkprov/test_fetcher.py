"""
Tests for the fetcher. HTTP is exercised through a fake requests session.
"""

import os

import pytest
import requests

from sdkprov.fetcher import Fetcher


class FakeResponse:
    def __init__(self, status_code=200, body=b"", content_type="application/octet-stream"):
        self.status_code = status_code
        self.reason = "OK" if status_code < 400 else "Not Found"
        self.headers = {"Content-Type": content_type}
        self._body = body
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start:start + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.requested = []

    def get(self, url, **kwargs):
        self.requested.append((url, kwargs))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


class TestHttpFetch:
    """Tests for http(s) candidates."""

    def test_success_writes_archive(self, logger, tmp_path):
        """Test a streamed download written to disk."""
        url = "https://example.com/sdk/foo-1.0.tar.gz?token=abc"
        response = FakeResponse(body=b"x" * 2500)
        fetcher = Fetcher(logger, session=FakeSession({url: response}), chunk_size=1000)

        result = fetcher.fetch(url, str(tmp_path))

        assert result.ok
        assert result.source_url == url
        assert result.byte_size == 2500
        assert os.path.basename(result.archive_path) == "foo-1.0.tar.gz"
        assert response.closed

    def test_streams_without_timeout_by_default(self, logger, tmp_path):
        """Test that requests are streamed with no timeout by default."""
        url = "https://example.com/a.zip"
        session = FakeSession({url: FakeResponse(body=b"zip")})
        Fetcher(logger, session=session).fetch(url, str(tmp_path))

        _, kwargs = session.requested[0]
        assert kwargs["stream"] is True
        assert kwargs["timeout"] is None

    def test_http_error_is_a_failure_result(self, logger, tmp_path):
        """Test that an error status is a failure result."""
        url = "https://example.com/missing.zip"
        fetcher = Fetcher(logger, session=FakeSession({url: FakeResponse(status_code=404)}))

        result = fetcher.fetch(url, str(tmp_path))

        assert not result.ok
        assert result.archive_path is None
        assert "404" in result.error_message
        assert os.listdir(tmp_path) == []

    def test_login_page_is_a_failure_result(self, logger, tmp_path):
        """Test that an HTML login page is a failure result."""
        url = "https://example.com/licensed.tar.xz"
        response = FakeResponse(body=b"<html>sign in</html>", content_type="text/html; charset=utf-8")
        fetcher = Fetcher(logger, session=FakeSession({url: response}))

        result = fetcher.fetch(url, str(tmp_path))

        assert not result.ok
        assert "HTML" in result.error_message

    def test_transport_error_is_a_failure_result(self, logger, tmp_path):
        """Test that a requests exception is a failure result."""
        url = "https://unreachable.example.com/a.zip"
        session = FakeSession({url: requests.ConnectionError("connection refused")})

        result = Fetcher(logger, session=session).fetch(url, str(tmp_path))

        assert not result.ok
        assert "connection refused" in result.error_message


class TestLocalFetch:
    """Tests for file:// urls and plain paths."""

    def test_file_url_is_copied(self, logger, tmp_path):
        """Test copying a file:// url."""
        source = tmp_path / "manual" / "cudnn.tar.xz"
        source.parent.mkdir()
        source.write_bytes(b"archive")

        result = Fetcher(logger).fetch(source.as_uri(), str(tmp_path / "download"))

        assert result.ok
        assert result.byte_size == len(b"archive")
        assert result.archive_path == str(tmp_path / "download" / "cudnn.tar.xz")

    def test_plain_path_is_copied(self, logger, tmp_path):
        """Test copying a plain local path."""
        source = tmp_path / "foo.zip"
        source.write_bytes(b"zip")

        result = Fetcher(logger).fetch(str(source), str(tmp_path / "download"))

        assert result.ok

    def test_missing_local_file_is_a_failure_result(self, logger, tmp_path):
        """Test a file:// url to a missing file."""
        result = Fetcher(logger).fetch((tmp_path / "nope.zip").as_uri(), str(tmp_path / "d"))

        assert not result.ok
        assert "No such file" in result.error_message

    def test_unsupported_scheme_is_a_failure_result(self, logger, tmp_path):
        """Test an unsupported url scheme."""
        result = Fetcher(logger).fetch("ftp://example.com/a.zip", str(tmp_path))

        assert not result.ok
        assert "ftp" in result.error_message

    def test_unusable_destination_is_a_failure_result(self, logger, tmp_path):
        """Test a destination directory whose parent is a regular file."""
        source = tmp_path / "foo.zip"
        source.write_bytes(b"zip")
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        result = Fetcher(logger).fetch(str(source), str(blocker / "download"))

        assert not result.ok
        assert result.error_message


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com/a/b/TensorRT-10.0.1.6.tar.gz", "TensorRT-10.0.1.6.tar.gz"),
        ("https://example.com/a/cudnn%2B9.zip?sig=1", "cudnn+9.zip"),
        ("https://example.com/", "download"),
    ],
)
def test_file_name_for(url, expected):
    """Test local file names derived from urls."""
    assert Fetcher.file_name_for(url) == expected
