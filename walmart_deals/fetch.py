"""Single-shot page fetch."""

import httpx
import structlog

from walmart_deals import config
from walmart_deals.errors import HttpError, NetworkError

logger = structlog.get_logger(__name__)


def fetch_page(
    url: str,
    headers: dict[str, str] | None = None,
    timeout: float = config.REQUEST_TIMEOUT_S,
    transport: httpx.BaseTransport | None = None,
) -> tuple[str, str]:
    """
    GET a page once and return its final URL and body text.

    Any status below 500 counts as a usable response, so challenge pages
    served with 403/404 can still be inspected by the caller.

    Args:
        url: Page to fetch
        headers: Request headers, defaults to the browser-like set in config
        timeout: Overall timeout in seconds
        transport: Optional httpx transport (tests use MockTransport)

    Returns:
        (final_url, body) after redirects

    Raises:
        NetworkError: timeout, DNS failure, connection reset or redirect loop
        HttpError: status >= 500
    """
    try:
        with httpx.Client(
            headers=headers if headers is not None else config.REQUEST_HEADERS,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        ) as client:
            response = client.get(url)
    except httpx.RequestError as e:
        logger.error("Request failed", url=url, error=str(e))
        raise NetworkError(f"No response received from {url}: {e}") from e

    final_url = str(response.url)
    logger.debug("Fetched page", url=url, final_url=final_url,
                 status=response.status_code, length=len(response.text))

    if response.status_code >= 500:
        raise HttpError(response.status_code, final_url)
    return final_url, response.text
