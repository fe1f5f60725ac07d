"""Remote store implementations."""

from folder_relay.remote.base import RemoteStore, RemoteStoreError
from folder_relay.remote.directory_store import DirectoryRemoteStore
from folder_relay.remote.http_store import HttpRemoteStore

__all__ = [
    "DirectoryRemoteStore",
    "HttpRemoteStore",
    "RemoteStore",
    "RemoteStoreError",
    "build_remote_store",
]


def build_remote_store(
    root: str,
    *,
    timeout_seconds: float = 30.0,
    max_retries: int = 3,
) -> RemoteStore:
    """Pick the store for ``root``: ``http(s)://`` URLs go over HTTP, anything else is a path."""

    if root.startswith(("http://", "https://")):
        return HttpRemoteStore(root, timeout_seconds=timeout_seconds, max_retries=max_retries)
    return DirectoryRemoteStore(root)
