import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

from walmart_deals.errors import ConfigError
from walmart_deals.models import EmailSettings

# Load environment variables from .env file
load_dotenv()

def _env_bool(name: str, default: bool=False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1","true","t","yes","y","on")

def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return float(v)
    except ValueError:
        return default

def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return int(v)
    except ValueError:
        return default

DEBUG = _env_bool("DEBUG", False)

# Only the literal "true" turns delivery on
SEND_EMAIL = os.getenv("SEND_EMAIL", "").strip().lower() == "true"

SEARCH_QUERY = os.getenv("SEARCH_QUERY", "kids clothes")
MAX_PRICE    = _env_float("MAX_PRICE", 2.0)

SITE_ORIGIN  = "https://www.walmart.com"
IMAGE_ORIGIN = "https://i5.walmartimages.com"
ITEM_PATH    = "/ip/"

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

REQUEST_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Cache-Control": "max-age=0",
    "Referer": SITE_ORIGIN + "/",
}

REQUEST_TIMEOUT_S = 30.0

BLOCK_MARKERS = (
    "Robot or human",
    "PRESS & HOLD",
    "Activate and hold the button",
    "walmart.com/blocked",
)
BLOCK_PATHS = ("/blocked",)

NEXT_DATA_ID = "__NEXT_DATA__"
DUMP_PATH    = os.getenv("DUMP_PATH", "walmart-next-data.json")

MAX_DEPTH = _env_int("MAX_DEPTH", 256)

SMTP_SERVER = os.getenv("SMTP_SERVER", "smtp.gmail.com")
SMTP_PORT   = _env_int("SMTP_PORT", 587)

if DEBUG:
    print(f"[config] UA set to: {USER_AGENT[:60]}...")


def search_url(query: str | None = None, max_price: float | None = None) -> str:
    """Build the retailer search URL for a keyword and price ceiling."""
    q = SEARCH_QUERY if query is None else query
    p = MAX_PRICE if max_price is None else max_price
    return f"{SITE_ORIGIN}/search?q={quote_plus(q)}&max_price={p:g}"


def email_settings() -> EmailSettings:
    """Read delivery credentials from the environment.

    All three values are required together; the error names every one missing.
    """
    values = {
        "GMAIL_USER": os.getenv("GMAIL_USER", ""),
        "GMAIL_APP_PASSWORD": os.getenv("GMAIL_APP_PASSWORD", ""),
        "EMAIL_RECIPIENT": os.getenv("EMAIL_RECIPIENT", ""),
    }
    missing = [k for k, v in values.items() if not v.strip()]
    if missing:
        raise ConfigError(
            "Missing email configuration. Please set: " + ", ".join(missing)
        )
    return EmailSettings(
        user=values["GMAIL_USER"].strip(),
        password=values["GMAIL_APP_PASSWORD"],
        recipient=values["EMAIL_RECIPIENT"].strip(),
        smtp_server=SMTP_SERVER,
        smtp_port=SMTP_PORT,
    )
