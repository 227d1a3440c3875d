"""Downloading of missing artifacts from a list of Maven provider sites."""

from __future__ import annotations

import logging
import os
import threading
import urllib.error
import urllib.request
from collections.abc import Callable, Iterable

from gradlecopy.project_info import platform_suffix

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
_CHUNK_SIZE = 64 * 1024

Fetch = Callable[[str], bytes]
LinkCallback = Callable[[int, str], None]


class DownloadError(Exception):
    """A download failed; ``status`` holds the HTTP status when there was one."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def not_found(self) -> bool:
        return self.status == 404


class FileDownloader:
    """Fetches one URL into memory when waited on, unless aborted first."""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.url = str(url)
        self.timeout = timeout
        self.link = ""
        self.data = b""
        self.status: int | None = None
        self.error: DownloadError | None = None
        self._aborted = threading.Event()

    def __repr__(self) -> str:
        return f"FileDownloader({self.url!r})"

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self._aborted.is_set()

    def abort(self) -> None:
        """Cancel the download; a running wait() stops at the next chunk."""
        self._aborted.set()

    def _cancelled(self) -> None:
        self.error = DownloadError("Operation canceled")

    def wait(self) -> bytes:
        """Perform the request and block until it ends.

        Returns the data received; on failure ``error`` is set and the
        data is empty.
        """
        if self._aborted.is_set():
            self._cancelled()
            return self.data
        try:
            with urllib.request.urlopen(self.url, timeout=self.timeout) as reply:
                self.status = getattr(reply, "status", None)
                chunks = []
                while True:
                    if self._aborted.is_set():
                        self._cancelled()
                        return self.data
                    chunk = reply.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    chunks.append(chunk)
        except urllib.error.HTTPError as error:
            self.status = error.code
            if error.code == 404:
                self.error = DownloadError("Not found 404", 404)
            else:
                self.error = DownloadError(f"Invalid HTTP status: {error.code}", error.code)
            return self.data
        except (urllib.error.URLError, OSError, ValueError) as error:
            reason = getattr(error, "reason", None) or error
            self.error = DownloadError(str(reason) or "Unknown error.")
            return self.data

        if self.status is not None and not 200 <= self.status <= 299:
            self.error = DownloadError(f"Invalid HTTP status: {self.status}", self.status)
            return self.data
        self.data = b"".join(chunks)
        return self.data


class DownloadJob:
    """Downloads links from each provider site in turn into a target folder.

    Links that a provider serves are removed from the pending list; the
    rest are tried on the next provider. A failed link is retried once
    with the platform-specific suffix (like ``-linux.jar``).
    """

    def __init__(
        self,
        links: Iterable[str],
        target: str,
        provider_sites: Iterable[str],
        fetch: Fetch | None = None,
        on_begin: LinkCallback | None = None,
        on_download: LinkCallback | None = None,
    ) -> None:
        self._links = list(links)
        self._link_count = len(self._links)
        target = str(target)
        self.target = target if target.endswith("/") else target + "/"
        self.provider_sites = list(provider_sites)
        self._fetch = fetch if fetch is not None else self._default_fetch
        self._on_begin = on_begin
        self._on_download = on_download
        self._aborted = False
        self._provider_index = 0
        self.not_found_count = 0
        self._task: FileDownloader | None = None
        self._task_lock = threading.Lock()

    @property
    def pending_links(self) -> list[str]:
        return list(self._links)

    def link_count(self) -> int:
        return self._link_count

    def pending_link_count(self) -> int:
        return len(self._links)

    def pending_provider_count(self) -> int:
        return len(self.provider_sites) - self._provider_index

    def abort(self) -> None:
        """Stop after the current link and cancel any download in flight."""
        self._aborted = True
        with self._task_lock:
            if self._task is not None:
                self._task.abort()

    def find_local_path(self, url: str) -> str:
        """Map a URL to a path under the target by dropping the provider prefix."""
        url = str(url)
        lowered = url.lower()
        for provider in self.provider_sites:
            if lowered.startswith(provider.lower()):
                url = url[len(provider):]
                break
        return self.target + url

    def find_local_folder(self, path_or_url: str) -> str:
        """Folder part of a local path, or of the local path a URL maps to."""
        path = str(path_or_url)
        if "://" in path:
            path = self.find_local_path(path)
        pos = path.rfind("/")
        return path if pos < 0 else path[:pos]

    def save_data(self, url: str, data: bytes) -> str | None:
        """Write ``data`` where ``url`` belongs locally; return that path."""
        local_path = self.find_local_path(url)
        try:
            os.makedirs(self.find_local_folder(local_path), exist_ok=True)
        except OSError:
            log.warning("failed to make path: %s", local_path)
            return None
        try:
            with open(local_path, "wb") as file:
                file.write(data)
        except OSError:
            log.warning("failed to write: %s", local_path)
            return None
        return local_path

    def _default_fetch(self, url: str) -> bytes:
        downloader = FileDownloader(url)
        downloader.link = url
        with self._task_lock:
            self._task = downloader
        try:
            data = downloader.wait()
        finally:
            with self._task_lock:
                self._task = None
        if downloader.error is not None:
            raise downloader.error
        return data

    def _handle_error(self, error: DownloadError) -> None:
        # Only the last provider's failures are worth reporting.
        if self._provider_index + 1 < len(self.provider_sites):
            return
        if error.not_found:
            self.not_found_count += 1
        elif error.message:
            log.debug("Error %s: %s", error.status, error.message)
        else:
            log.debug("Unknown error: %s", error.status)

    def _try_link(self, link: str) -> bool:
        try:
            data = self._fetch(link)
        except DownloadError as error:
            self._handle_error(error)
            return False
        self.save_data(link, data)
        return True

    def run(self) -> int:
        """Download every pending link; return how many succeeded."""
        try:
            os.makedirs(self.target, exist_ok=True)
        except OSError:
            log.warning("failed to make path: %s", self.target)
            return 0

        for self._provider_index, provider in enumerate(self.provider_sites):
            separator = "" if provider.endswith("/") else "/"
            log.debug("Trying provider: %s", provider)
            i = 0
            while i < len(self._links):
                if self._aborted:
                    break
                link = provider + separator + self._links[i]
                index = self._link_count - (len(self._links) - i)
                succeeded = False
                for attempt in range(2):
                    if self._on_begin is not None:
                        self._on_begin(index, link)
                    if self._try_link(link):
                        succeeded = True
                        break
                    if attempt == 0:
                        link = link[:-4] + platform_suffix(link[-3:])
                if succeeded:
                    if self._on_download is not None:
                        self._on_download(index, link)
                    del self._links[i]
                else:
                    i += 1

        success_count = self._link_count - len(self._links)
        log.debug(
            "Finished downloading successfully for: %d package(s) out of: %d",
            success_count,
            self._link_count,
        )
        if self.not_found_count:
            log.debug("Ignored 404 (Not-found) error(s) which we got for: %d links", self.not_found_count)
        return success_count