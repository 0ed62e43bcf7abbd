"""Secure download utilities with SSL certificate handling.

Downloads verify TLS against certifi's CA bundle so that frozen or
sandboxed interpreters without access to the system store still work.
"""

from __future__ import annotations

import shutil
import ssl
from typing import BinaryIO, Optional
from urllib.parse import urlparse
from urllib.request import urlopen

import certifi

# Default socket timeout for artifact downloads, in seconds
DEFAULT_TIMEOUT = 60.0

# Schemes accepted for remote configuration and platform artifacts
SUPPORTED_SCHEMES = frozenset({"http", "https"})

_CHUNK_SIZE = 64 * 1024


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def is_supported_url(url: str) -> bool:
    """Check that ``url`` is an absolute http(s) URL with a host."""
    parsed = urlparse(url)
    return parsed.scheme.lower() in SUPPORTED_SCHEMES and bool(parsed.netloc)


def download_file(url: str, dest: BinaryIO, timeout: Optional[float] = DEFAULT_TIMEOUT) -> None:
    """Stream the content at ``url`` into an open binary file.

    Args:
        url: The URL to download from.
        dest: Writable binary file object.
        timeout: Connection timeout in seconds.

    Raises:
        URLError: If the URL cannot be opened.
        ValueError: If the URL is not http(s).
        OSError: If reading the response or writing the file fails.
    """
    if not is_supported_url(url):
        raise ValueError(f"Only http(s) URLs are supported: {url}")

    context = get_ssl_context() if url.lower().startswith("https://") else None
    with urlopen(url, timeout=timeout, context=context) as response:  # nosec B310
        shutil.copyfileobj(response, dest, _CHUNK_SIZE)
