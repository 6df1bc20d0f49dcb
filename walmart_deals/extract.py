"""Product extraction from the search page's embedded Next.js payload.

The payload has no published schema and its shape differs between grid,
carousel and sponsored results, so products are found by probing every
object for a name-like and a price-like field rather than by a fixed path.
The same item is usually found more than once; ``dedupe_products`` keeps the
first sighting of each URL.
"""

import re
from typing import Any, Iterable

import structlog

from walmart_deals import config
from walmart_deals.models import Product

logger = structlog.get_logger(__name__)

NAME_FIELDS  = ("title", "name", "productName")
PRICE_FIELDS = ("price", "currentPrice", "priceInfo")
URL_FIELDS   = ("productUrl", "url", "canonicalUrl")
ITEM_ID_FIELD = "usItemId"

# (field, may be an object carrying .url/.src)
IMAGE_FIELDS = (
    ("imageUrl", False),
    ("image", True),
    ("thumbnail", True),
    ("thumbnailUrl", False),
    ("primaryImage", True),
    ("productImage", True),
)

# Where the result list has lived in past payload versions
KNOWN_PATHS = (
    "props.pageProps.initialData.searchResult.itemStacks",
    "props.pageProps.initialData.searchResult.items",
    "props.pageProps.initialData.products",
    "props.pageProps.initialData.itemStacks",
    "props.pageProps.initialData.items",
    "props.pageProps.searchResult.itemStacks",
    "props.pageProps.searchResult.items",
    "props.pageProps.products",
)

PRICE_RE = re.compile(r"\$?(\d+(?:\.\d+)?)")


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _present(v: Any) -> bool:
    """Field carries a usable value: not missing, null, false, empty text, zero or NaN."""
    if v is None or v is False:
        return False
    if isinstance(v, str):
        return v != ""
    if _is_number(v):
        return v == v and v != 0
    return True


def _text(v: Any) -> str:
    # Containers have no meaningful text form
    if isinstance(v, str):
        return v
    if isinstance(v, bool):
        return "true" if v else "false"
    if _is_number(v):
        return str(v)
    return ""


def _first_present(node: dict, fields: Iterable[str]) -> Any:
    for f in fields:
        if _present(node.get(f)):
            return node[f]
    return None


def format_price(value: float) -> str:
    """Render a numeric price as dollars with two decimals."""
    return f"${value:.2f}"


def parse_price_value(text: str) -> float | None:
    """First decimal number in ``text`` (optionally $-prefixed), or None."""
    m = PRICE_RE.search(text or "")
    if not m:
        return None
    try:
        return float(m.group(1))
    except ValueError:
        return None


def absolute_url(url: str, origin: str = config.SITE_ORIGIN) -> str:
    """Prefix a site-relative URL with ``origin``, with exactly one slash between."""
    if not url or url.startswith("http"):
        return url
    return origin + (url if url.startswith("/") else "/" + url)


def absolute_image_url(url: str, origin: str = config.IMAGE_ORIGIN) -> str:
    """
    Make protocol-relative and root-relative image URLs absolute.

    Anything else that lacks an http prefix is returned unchanged.
    """
    if not url or url.startswith("http"):
        return url
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("/"):
        return origin + url
    return url


def is_candidate(node: Any) -> bool:
    """Object has at least one name-bearing and one price-bearing field."""
    if not isinstance(node, dict):
        return False
    return (_first_present(node, NAME_FIELDS) is not None
            and _first_present(node, PRICE_FIELDS) is not None)


def resolve_name(node: dict) -> str:
    return _text(_first_present(node, NAME_FIELDS))


def resolve_price(node: dict) -> str:
    """Display price from the first field in the precedence chain that resolves."""
    price = node.get("price")
    if _is_number(price):
        return format_price(price)
    if isinstance(price, str):
        return price

    current = node.get("currentPrice")
    if _present(current):
        if _is_number(current):
            return format_price(current)
        if isinstance(current, dict) and _present(current.get("price")):
            inner = current["price"]
            return format_price(inner) if _is_number(inner) else _text(inner)
        return _text(current)

    info = node.get("priceInfo")
    if isinstance(info, dict) and _present(info.get("currentPrice")):
        inner = info["currentPrice"]
        return format_price(inner) if _is_number(inner) else _text(inner)
    return ""


def resolve_url(node: dict) -> str:
    value = _first_present(node, URL_FIELDS)
    if value is not None:
        return absolute_url(_text(value))
    item_id = _text(node.get(ITEM_ID_FIELD)) if _present(node.get(ITEM_ID_FIELD)) else ""
    if item_id:
        return f"{config.SITE_ORIGIN}{config.ITEM_PATH}{item_id}"
    return ""


def _image_ref(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return _text(_first_present(value, ("url", "src")))
    return ""


def resolve_image(node: dict) -> str:
    for field, nested in IMAGE_FIELDS:
        value = node.get(field)
        if _present(value):
            return absolute_image_url(_image_ref(value) if nested else _text(value))
    images = node.get("images")
    if isinstance(images, list) and images:
        return absolute_image_url(_image_ref(images[0]))
    return ""


def normalize_candidate(node: dict, threshold: float) -> Product | None:
    """
    Turn a candidate object into a Product, or None if it does not qualify.

    A Product needs a name, a URL and a parseable price strictly below
    ``threshold``. Nothing here raises for odd field shapes.
    """
    name = resolve_name(node)
    price = resolve_price(node)
    url = resolve_url(node)

    value = parse_price_value(price)
    if value is None or not value < threshold:
        return None
    if not name or not url:
        return None

    image = resolve_image(node)
    return Product(name=name, price=price, url=url, image_url=image or None)


def find_products(node: Any, threshold: float,
                  max_depth: int | None = None, _depth: int = 0) -> list[Product]:
    """
    Depth-first search of a parsed JSON tree for product-shaped objects.

    Arrays are visited in index order, object fields in their stored order.
    A matching object is still searched below, so nested duplicates are
    expected. Subtrees deeper than ``max_depth`` are skipped.
    """
    limit = config.MAX_DEPTH if max_depth is None else max_depth
    if _depth > limit:
        logger.debug("Depth limit reached, skipping subtree", depth=_depth)
        return []

    found: list[Product] = []
    if isinstance(node, list):
        for item in node:
            found.extend(find_products(item, threshold, limit, _depth + 1))
    elif isinstance(node, dict):
        if is_candidate(node):
            product = normalize_candidate(node, threshold)
            if product is not None:
                found.append(product)
        for value in node.values():
            found.extend(find_products(value, threshold, limit, _depth + 1))
    return found


def resolve_path(root: Any, path: str) -> Any:
    """Follow a dotted key path through nested objects; None if any step is missing."""
    current = root
    for part in path.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return None
    return current


def probe_known_paths(root: Any, threshold: float,
                      paths: Iterable[str] = KNOWN_PATHS,
                      max_depth: int | None = None) -> list[Product]:
    """Rerun the search rooted at each historical result-list location."""
    found: list[Product] = []
    for path in paths:
        subtree = resolve_path(root, path)
        if not _present(subtree):
            continue
        logger.info("Found data at path", path=path)
        found.extend(find_products(subtree, threshold, max_depth))
    return found


def extract_products(root: Any, threshold: float,
                     max_depth: int | None = None) -> list[Product]:
    """Whole-tree search followed by the fixed-path probe, duplicates included."""
    products = find_products(root, threshold, max_depth)
    products.extend(probe_known_paths(root, threshold, max_depth=max_depth))
    return products


def dedupe_products(products: Iterable[Product]) -> list[Product]:
    """Keep the first product seen for each URL, in discovery order."""
    unique: dict[str, Product] = {}
    for product in products:
        unique.setdefault(product.url, product)
    return list(unique.values())
