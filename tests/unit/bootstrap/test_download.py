"""Tests for secure download utilities."""

from __future__ import annotations

import io
import ssl
from unittest.mock import MagicMock, patch

import pytest

from balscan.bootstrap.download import download_file, get_ssl_context, is_supported_url


class TestIsSupportedUrl:
    """Tests for is_supported_url."""

    @pytest.mark.parametrize("url", ["https://example.com/Scan.toml", "http://host:8080/a.jar"])
    def test_http_urls_supported(self, url: str) -> None:
        assert is_supported_url(url)

    @pytest.mark.parametrize("url", ["Scan.toml", "/abs/path", "ftp://host/x", "https://"])
    def test_other_references_rejected(self, url: str) -> None:
        assert not is_supported_url(url)


class TestDownloadFile:
    """Tests for download_file."""

    def test_get_ssl_context(self) -> None:
        assert isinstance(get_ssl_context(), ssl.SSLContext)

    def test_streams_response_into_destination(self) -> None:
        response = MagicMock()
        response.__enter__.return_value = io.BytesIO(b"remote-content")
        dest = io.BytesIO()

        with patch("balscan.bootstrap.download.urlopen", return_value=response) as mock_urlopen:
            download_file("https://example.com/Scan.toml", dest, timeout=3.0)

        assert dest.getvalue() == b"remote-content"
        _, kwargs = mock_urlopen.call_args
        assert kwargs["timeout"] == 3.0
        assert isinstance(kwargs["context"], ssl.SSLContext)

    def test_plain_http_has_no_ssl_context(self) -> None:
        response = MagicMock()
        response.__enter__.return_value = io.BytesIO(b"")

        with patch("balscan.bootstrap.download.urlopen", return_value=response) as mock_urlopen:
            download_file("http://example.com/Scan.toml", io.BytesIO())

        assert mock_urlopen.call_args.kwargs["context"] is None

    def test_unsupported_url_raises(self) -> None:
        with pytest.raises(ValueError):
            download_file("file:///etc/passwd", io.BytesIO())
