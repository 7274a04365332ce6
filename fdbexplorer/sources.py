"""Sources of the cluster ``status json`` document."""

import http.client
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


class StatusSourceError(Exception):
    """Raised when a source cannot deliver the status document."""


@runtime_checkable
class StatusProvider(Protocol):
    """Anything that can produce the raw ``status json`` document."""

    def status(self) -> bytes:
        """Return the raw status document, raising StatusSourceError on failure."""
        raise NotImplementedError


@runtime_checkable
class ExclusionManager(Protocol):
    """A source that can also include and exclude processes."""

    def include_process(self, include_key: str) -> None:
        """Remove ``include_key`` from the exclusion list."""
        raise NotImplementedError

    def exclude_process(self, exclude_key: str) -> None:
        """Add ``exclude_key`` to the exclusion list."""
        raise NotImplementedError

    def excluded_processes(self) -> list[str]:
        """Addresses currently excluded."""
        raise NotImplementedError

    def exclusion_in_progress_processes(self) -> list[str]:
        """Addresses whose exclusion has not yet finished."""
        raise NotImplementedError


@dataclass(frozen=True)
class FileSource:
    """Reads the status document from a file saved earlier."""

    path: str

    def status(self):
        try:
            handle = open(self.path, "rb")
        except OSError as exc:
            raise StatusSourceError(f"failed to open input file: {exc}") from exc
        with handle:
            try:
                return handle.read()
            except OSError as exc:
                raise StatusSourceError(f"failed to read input file: {exc}") from exc


@dataclass(frozen=True)
class UrlSource:
    """Fetches the status document over HTTP with a GET request."""

    url: str

    def status(self):
        try:
            return self._get()
        except StatusSourceError as exc:
            raise StatusSourceError(f"url fetch err: {exc}") from exc

    def _get(self):
        try:
            request = urllib.request.Request(self.url, method="GET")
        except ValueError as exc:
            raise StatusSourceError(f"request: {exc}") from exc

        try:
            response = urllib.request.urlopen(request)
        except urllib.error.HTTPError as exc:
            exc.close()
            raise StatusSourceError(f"http response: not 200, was {exc.code}") from exc
        except (OSError, ValueError, http.client.HTTPException) as exc:
            raise StatusSourceError(f"http do: {exc}") from exc

        with response:
            if response.status != 200:
                raise StatusSourceError(f"http response: not 200, was {response.status}")
            try:
                return response.read()
            except (OSError, http.client.HTTPException) as exc:
                raise StatusSourceError(f"http body: {exc}") from exc


def select_source(input_file, url) -> Optional[StatusProvider]:
    """The source chosen by the options: a file first, then a URL, else None."""
    if input_file:
        return FileSource(input_file)
    if url:
        return UrlSource(url)
    return None