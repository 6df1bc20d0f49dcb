import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

import structlog

from walmart_deals import config
from walmart_deals.errors import DeliveryError
from walmart_deals.models import EmailSettings, Product

logger = structlog.get_logger(__name__)


def _threshold_label(threshold: float) -> str:
    return f"${threshold:g}"


def build_subject(count: int, query: str = config.SEARCH_QUERY,
                  threshold: float = config.MAX_PRICE) -> str:
    return f"🎉 Found {count} {query.title()} Deal(s) Under {_threshold_label(threshold)} at Walmart!"


def format_text(products: list[Product], query: str = config.SEARCH_QUERY,
                threshold: float = config.MAX_PRICE) -> str:
    """Plain-text body: numbered name/price/url entries."""
    entries = "\n\n".join(
        f"{i}. {p.name} - {p.price}\n   {p.url}" for i, p in enumerate(products, 1)
    )
    return (
        f"Walmart {query.title()} Deals Found!\n\n"
        f"Found {len(products)} item(s) under {_threshold_label(threshold)}:\n\n"
        f"{entries}"
    )


def _format_product_row(index: int, product: Product) -> str:
    image_cell = ""
    if product.image_url:
        image_cell = (
            '<td style="width: 120px; vertical-align: top; padding-right: 15px;">'
            f'<img src="{escape(product.image_url)}" alt="{escape(product.name)}" '
            'style="max-width: 120px; height: auto; border-radius: 4px;" />'
            "</td>"
        )
    return f"""
    <tr style="border-bottom: 1px solid #eee;">
      <td style="padding: 10px;">
        <table style="width: 100%;">
          <tr>
            {image_cell}
            <td style="vertical-align: top;">
              <strong>{index}. {escape(product.name)}</strong><br>
              <span style="color: #e31837; font-size: 18px; font-weight: bold;">{escape(product.price)}</span><br>
              <a href="{escape(product.url)}" style="color: #0066cc; text-decoration: none;">View Product →</a>
            </td>
          </tr>
        </table>
      </td>
    </tr>"""


def format_html(products: list[Product], query: str = config.SEARCH_QUERY,
                threshold: float = config.MAX_PRICE) -> str:
    rows = "".join(_format_product_row(i, p) for i, p in enumerate(products, 1))
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background-color: #004c91; color: white; padding: 20px; text-align: center; }}
    .content {{ background-color: #f9f9f9; padding: 20px; }}
    .product-list {{ width: 100%; border-collapse: collapse; }}
    .footer {{ text-align: center; padding: 20px; color: #666; font-size: 12px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>🎉 Walmart {escape(query.title())} Deals Found!</h1>
    </div>
    <div class="content">
      <p>Found <strong>{len(products)}</strong> {escape(query)} item(s) under {_threshold_label(threshold)}:</p>
      <table class="product-list">{rows}
      </table>
    </div>
    <div class="footer">
      <p>This email was sent automatically by Walmart Deal Scanner</p>
    </div>
  </div>
</body>
</html>
"""


def build_message(products: list[Product], settings: EmailSettings,
                  query: str = config.SEARCH_QUERY,
                  threshold: float = config.MAX_PRICE) -> MIMEMultipart:
    """Assemble the multipart/alternative digest (text first, HTML preferred)."""
    msg = MIMEMultipart("alternative")
    msg["From"] = settings.user
    msg["To"] = settings.recipient
    msg["Subject"] = build_subject(len(products), query, threshold)
    msg.attach(MIMEText(format_text(products, query, threshold), "plain", "utf-8"))
    msg.attach(MIMEText(format_html(products, query, threshold), "html", "utf-8"))
    return msg


def send_email(products: list[Product], settings: EmailSettings,
               query: str = config.SEARCH_QUERY,
               threshold: float = config.MAX_PRICE) -> None:
    """
    Send one digest email over SMTP with STARTTLS.

    Raises:
        DeliveryError: connection, TLS, authentication or encoding failure
    """
    msg = build_message(products, settings, query, threshold)
    try:
        with smtplib.SMTP(settings.smtp_server, settings.smtp_port, timeout=30) as server:
            server.starttls()
            # Gmail shows app passwords in groups of four
            server.login(settings.user, settings.password.replace(" ", ""))
            server.send_message(msg)
    except (smtplib.SMTPException, OSError, ValueError) as e:
        logger.error("Error sending email", recipient=settings.recipient, error=str(e))
        raise DeliveryError(f"Email delivery failed: {e}") from e

    if config.DEBUG:
        print(f"[notify] sent {len(products)} product(s) to {settings.recipient}")
    logger.info("Email sent", recipient=settings.recipient, count=len(products))
