"""Local-first cache for remote scan artifacts.

Remote scan configurations and platform artifacts are downloaded once into
the project's target directory and reused on every later lookup. There is
no freshness check: an entry, once materialized, is trusted until the
target directory is cleaned.

Downloads go to a temporary file next to the destination and are moved into
place atomically, so an interrupted download never leaves a file that a
later run would mistake for a valid cache entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional
from urllib.error import URLError

from balscan.bootstrap.download import DEFAULT_TIMEOUT, download_file, is_supported_url
from balscan.core.fs import atomic_output
from balscan.core.logging import get_logger
from balscan.core.streaming import NullStreamHandler, StreamHandler

LOGGER = get_logger(__name__)

Downloader = Callable[[str, BinaryIO, Optional[float]], None]

_STAGE = "artifact download"


class InvalidArtifactURLError(ValueError):
    """The artifact reference is not a usable remote URL."""

    pass


class ArtifactDownloadError(OSError):
    """Downloading a remote artifact failed."""

    pass


@dataclass(frozen=True)
class CacheEntry:
    """A resolved artifact.

    Attributes:
        url: Remote reference the entry was resolved from.
        path: Local file holding the artifact bytes.
        downloaded: True if this lookup performed the download.
    """

    url: str
    path: Path
    downloaded: bool


class ArtifactCache:
    """Resolves remote references to files under ``<target_dir>/<subpath>/``."""

    def __init__(
        self,
        target_dir: Path,
        downloader: Downloader = download_file,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        stream_handler: Optional[StreamHandler] = None,
    ) -> None:
        """Initialize the cache.

        Args:
            target_dir: Project target directory holding all cache entries.
            downloader: Callable streaming a URL into an open binary file.
            timeout: Download timeout in seconds.
            stream_handler: Sink for user-facing progress messages.
        """
        self._target_dir = target_dir
        self._downloader = downloader
        self._timeout = timeout
        self._stream = stream_handler or NullStreamHandler()

    @property
    def target_dir(self) -> Path:
        return self._target_dir

    def path_for(self, subpath: str, file_name: str) -> Path:
        """Return the cache location for a logical artifact name."""
        return self._target_dir / subpath / file_name

    def contains(self, subpath: str, file_name: str) -> bool:
        return self.path_for(subpath, file_name).is_file()

    def fetch(self, url: str, subpath: str, file_name: str) -> CacheEntry:
        """Return a local copy of ``url``, downloading it on a cache miss.

        Args:
            url: Remote reference (http or https).
            subpath: Conventional cache subdirectory for this kind of artifact.
            file_name: Logical file name of the artifact.

        Returns:
            CacheEntry pointing at the local file.

        Raises:
            InvalidArtifactURLError: If ``url`` is not an http(s) URL.
            ArtifactDownloadError: If the download fails.
        """
        if not is_supported_url(url):
            raise InvalidArtifactURLError(f"Not a valid remote URL: {url}")

        cache_path = self.path_for(subpath, file_name)
        if cache_path.is_file():
            LOGGER.debug(f"Cache hit for {url} at {cache_path}")
            self._stream.status(_STAGE, f"Loading {file_name} from cache...")
            return CacheEntry(url=url, path=cache_path, downloaded=False)

        self._stream.status(_STAGE, f"Downloading {file_name} from {url}")
        try:
            cache_path.parent.mkdir(parents=True, exist_ok=True)
            with atomic_output(cache_path) as handle:
                self._downloader(url, handle, self._timeout)
        except (URLError, OSError, ValueError) as e:
            raise ArtifactDownloadError(f"Failed to download {url}: {e}") from e

        LOGGER.info(f"Cached {url} at {cache_path}")
        return CacheEntry(url=url, path=cache_path, downloaded=True)
