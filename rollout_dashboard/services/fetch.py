from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from rollout_dashboard.errors import FetchError

"""Workbook retrieval.

A source is either an ``http(s)://`` URL or a local path (optionally a
``file://`` URL, percent-encoding allowed). Exactly one attempt is made; no
retries, no caching.
"""

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def is_remote(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def resolve_local_path(source: str) -> Path:
    parsed = urlparse(source)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(unquote(source))


def fetch_workbook(
    source: str,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    session: requests.Session | None = None,
) -> bytes:
    """Return the raw workbook bytes for ``source``.

    Raises:
        FetchError: Malformed source, network failure, non-2xx status or
            unreadable file
    """
    try:
        remote = is_remote(source)
        path = None if remote else resolve_local_path(source)
    except ValueError as e:
        raise FetchError(f"Unable to load {source} ({e})") from e

    if remote:
        http = session or requests
        try:
            # Cache-Control mirrors a "no-store" browser fetch
            response = http.get(source, timeout=float(timeout_seconds), headers={"Cache-Control": "no-cache"})
        except requests.RequestException as e:
            raise FetchError(f"Unable to load {source} ({e})") from e
        if not response.ok:
            raise FetchError(f"Unable to load {source} ({response.status_code})")
        logger.debug("fetched %s (%d bytes)", source, len(response.content))
        return response.content

    try:
        data = path.read_bytes()
    except OSError as e:
        raise FetchError(f"Unable to load {source} ({e.strerror or e})") from e
    except ValueError as e:
        raise FetchError(f"Unable to load {source} ({e})") from e
    logger.debug("read %s (%d bytes)", path, len(data))
    return data
