import logging
import sys
import traceback
from datetime import datetime, timezone

import structlog

from walmart_deals import config
from walmart_deals.domutils import describe_payload, extract_next_data, is_blocked, save_payload
from walmart_deals.errors import BlockedError, ScanError
from walmart_deals.extract import dedupe_products, extract_products
from walmart_deals.fetch import fetch_page
from walmart_deals.models import Product
from walmart_deals.notify import send_email

logger = structlog.get_logger(__name__)


def scrape(url: str | None = None, threshold: float | None = None,
           dump_path: str | None = None, transport=None) -> list[Product]:
    """Fetch the search page and return unique products under the threshold."""
    url = url or config.search_url()
    threshold = config.MAX_PRICE if threshold is None else threshold

    print(f"Fetching: {url}")
    final_url, html = fetch_page(url, transport=transport)

    if is_blocked(html, final_url):
        raise BlockedError(final_url)

    print("Extracting Next.js data from __NEXT_DATA__ script tag...")
    data = extract_next_data(html)
    print("Successfully parsed __NEXT_DATA__ JSON")

    if config.DEBUG:
        for line in describe_payload(data):
            print(f"[payload] {line}")

    saved = save_payload(data, dump_path or config.DUMP_PATH)
    if saved:
        print(f"Full Next.js data saved to: {saved}")

    print("Extracting product data from JSON...")
    products = dedupe_products(extract_products(data, threshold))
    print(f"Found {len(products)} products under ${threshold:g}")
    return products


def print_products(products: list[Product]) -> None:
    for i, product in enumerate(products, 1):
        print(f"{i}. {product.name}")
        print(f"   Price: {product.price}")
        print(f"   URL: {product.url}")
        if product.image_url:
            print(f"   Image: {product.image_url}")
        print("")


def _configure_logging() -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if config.DEBUG else logging.INFO
        ),
    )


def main() -> int:
    _configure_logging()
    send = config.SEND_EMAIL

    try:
        # Credentials are checked before any network traffic
        settings = config.email_settings() if send else None
    except ScanError as e:
        logger.error("Missing required environment variables for email", error=str(e))
        print(f"Error: {e}")
        print("Set GMAIL_USER, GMAIL_APP_PASSWORD and EMAIL_RECIPIENT in .env, "
              "or run without SEND_EMAIL=true to just print results")
        return 1

    print("Walmart Deal Scanner")
    print("====================")
    print(f"Started at: {datetime.now(timezone.utc).isoformat()}")
    print(f"Email sending: {'ENABLED' if send else 'DISABLED'}\n")

    try:
        products = scrape()
        if not products:
            print(f"No products found under ${config.MAX_PRICE:g}.")
            return 0

        print(f"\nFound {len(products)} product(s) under ${config.MAX_PRICE:g}:\n")
        print_products(products)

        if settings is not None:
            print("Sending email...")
            send_email(products, settings)
            print("Email sent successfully!")
        else:
            print("(Email not sent. Set SEND_EMAIL=true to send email)")
    except ScanError as e:
        logger.error("Error during scrape", error_type=type(e).__name__, error=str(e))
        print(f"Error during scrape: {e}")
        return 1
    except Exception as e:
        logger.error("Unexpected error during scrape", error_type=type(e).__name__, error=str(e))
        print(f"Fatal error: {e}")
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
