"""HTTP remote store with retries and timeout."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

import httpx

from folder_relay.remote.base import RemoteStoreError, remote_parts

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_USER_AGENT = "FolderRelay/1.0"


class HttpRemoteStore:
    """Stores files with ``PUT`` and checks them with ``HEAD`` below a base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        base_headers = {"User-Agent": DEFAULT_USER_AGENT}
        if headers:
            base_headers.update(headers)
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_seconds, connect=10.0),
            headers=base_headers,
            transport=httpx.HTTPTransport(retries=max_retries),
            follow_redirects=True,
        )

    def upload(self, local_file: Path, remote_dir: str) -> None:
        url = self._url(remote_dir, local_file.name)
        try:
            with local_file.open("rb") as stream:
                response = self._client.put(url, content=stream.read())
        except httpx.TimeoutException as error:
            logger.warning("Timeout uploading %s", url)
            raise RemoteStoreError(f"Timeout uploading {local_file.name}") from error
        except httpx.HTTPError as error:
            logger.warning("HTTP error uploading %s: %s", url, error)
            raise RemoteStoreError(f"Upload of {local_file.name} failed: {error}") from error
        if not response.is_success:
            raise RemoteStoreError(
                f"Upload of {local_file.name} rejected with HTTP {response.status_code}",
            )

    def exists(self, remote_dir: str, file_name: str) -> bool:
        url = self._url(remote_dir, file_name)
        try:
            response = self._client.head(url)
        except httpx.HTTPError as error:
            raise RemoteStoreError(f"Lookup of {file_name} failed: {error}") from error
        if response.status_code == 404:
            return False
        if not response.is_success:
            raise RemoteStoreError(f"Lookup of {file_name} returned HTTP {response.status_code}")
        return True

    def close(self) -> None:
        self._client.close()

    def _url(self, remote_dir: str, file_name: str) -> str:
        segments = [*remote_parts(remote_dir), file_name]
        return f"{self.base_url}/" + "/".join(quote(segment) for segment in segments)
