"""Error types raised by the scanner.

Everything here is fatal to a run: ``main`` logs it and exits with status 1.
Problems inside the product payload itself never surface as one of these.
"""


class ScanError(Exception):
    """Base class for all scanner errors."""
    pass


class NetworkError(ScanError):
    """Timeout, DNS failure or dropped connection while fetching."""
    pass


class HttpError(ScanError):
    """Server answered with a 5xx status."""

    def __init__(self, status: int, url: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"HTTP {status} from {url}" if url else f"HTTP {status}")


class BlockedError(ScanError):
    """The retailer served a bot-challenge page instead of results."""

    def __init__(self, url: str = ""):
        self.url = url
        super().__init__(
            "Walmart blocked the request. The page shows a CAPTCHA/bot detection page.\n"
            "Possible solutions:\n"
            "1. Use a residential proxy\n"
            "2. Add delays between requests\n"
            "3. Use a different IP address\n"
            "4. Try accessing the site manually first to establish a session"
        )


class MissingDataError(ScanError):
    pass


class EmptyDataError(ScanError):
    pass


class MalformedJsonError(ScanError):
    """Embedded payload is present but is not valid JSON."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Failed to parse embedded JSON: {detail}")


class ConfigError(ScanError):
    pass


class DeliveryError(ScanError):
    """Email could not be handed to the SMTP server."""
    pass
