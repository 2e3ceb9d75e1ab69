from urllib.parse import urlparse

import requests

from photoframe.defaults import FETCH_TIMEOUT
from .errors import FetchError


def is_remote(source: str) -> bool:
    return urlparse(source).scheme.lower() in ("http", "https")


def local_path(source: str) -> str:
    """
    Returns the filesystem path for a local source.
    Plain paths pass through, file:// URLs are reduced to their path.
    """
    parsed = urlparse(source)
    if parsed.scheme.lower() == "file":
        return parsed.path
    return source


def fetch_bytes(source: str, timeout: float = FETCH_TIMEOUT) -> bytes:
    """
    Reads the raw bytes behind 'source'.
    http(s) sources go through requests with the given timeout,
    everything else is read from disk.
    Raises FetchError when the transfer fails or returns nothing.
    """
    if not source:
        raise FetchError("No image source given")

    if is_remote(source):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {source}: {e}") from e
        contents = response.content
    else:
        try:
            with open(local_path(source), "rb") as f:
                contents = f.read()
        except OSError as e:
            raise FetchError(f"Failed to read {source}: {e}") from e

    if not contents:
        raise FetchError(f"Empty content from {source}")
    return contents
