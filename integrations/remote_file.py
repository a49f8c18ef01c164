"""
Fetch stored files over HTTP.

Public storage URLs need no signing, so a plain GET is enough.
"""

import requests
import structlog

from exceptions import TransportError

logger = structlog.get_logger(__name__)


def fetch_bytes(url: str, timeout: float = 30) -> bytes:
    """
    Download the resource at url.

    Args:
        url: Public URL of the file
        timeout: Seconds to wait for the server

    Returns:
        Raw response body

    Raises:
        TransportError: On network failure or a non-success status
    """
    logger.debug("fetching_remote_file", url=url)

    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.error(
            "remote_file_unreachable",
            url=url,
            error=str(e),
            error_type=type(e).__name__
        )
        raise TransportError(url, str(e)) from e

    if not response.ok:
        logger.error(
            "remote_file_bad_status",
            url=url,
            status=response.status_code
        )
        raise TransportError(
            url,
            f"HTTP {response.status_code} {response.reason or ''}".strip(),
            status=response.status_code
        )

    content = response.content
    logger.debug("remote_file_fetched", url=url, size_bytes=len(content))
    return content
