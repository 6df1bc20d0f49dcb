# Page-level helpers: bot-challenge detection and the embedded Next.js payload.
import json
from pathlib import Path
from typing import Any, Iterable

import structlog
from bs4 import BeautifulSoup

from walmart_deals import config
from walmart_deals.errors import EmptyDataError, MalformedJsonError, MissingDataError

logger = structlog.get_logger(__name__)


def is_blocked(body: str, final_url: str,
               markers: Iterable[str] | None = None,
               block_paths: Iterable[str] | None = None) -> bool:
    """True if the URL or body looks like a bot-challenge page (case-sensitive)."""
    paths = config.BLOCK_PATHS if block_paths is None else block_paths
    phrases = config.BLOCK_MARKERS if markers is None else markers
    if any(p in (final_url or "") for p in paths):
        return True
    return any(m in (body or "") for m in phrases)


def extract_next_data(html: str, element_id: str = config.NEXT_DATA_ID) -> Any:
    """Find the inline script with ``element_id`` and parse its JSON."""
    soup = BeautifulSoup(html or "", "html.parser")
    script = soup.find("script", id=element_id)
    if script is None:
        raise MissingDataError(
            f"Could not find {element_id} script tag. Walmart may have changed their page structure."
        )

    text = script.string if script.string is not None else script.get_text()
    if not text or not text.strip():
        raise EmptyDataError(f"{element_id} script tag is empty")

    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise MalformedJsonError(str(e)) from e


def describe_payload(data: Any) -> list[str]:
    # Top-level, props and pageProps keys, for eyeballing schema changes
    lines = []
    if not isinstance(data, dict):
        return [f"payload type: {type(data).__name__}"]
    lines.append(f"Next.js data structure keys: {list(data.keys())}")
    props = data.get("props")
    if isinstance(props, dict):
        lines.append(f"Props keys: {list(props.keys())}")
        page_props = props.get("pageProps")
        if isinstance(page_props, dict):
            lines.append(f"PageProps keys: {list(page_props.keys())}")
    return lines


def save_payload(data: Any, path: str | Path = config.DUMP_PATH) -> Path | None:
    """Write the parsed payload for offline inspection. Failures are only logged."""
    target = Path(path)
    try:
        target.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Could not save JSON file", path=str(target), error=str(e))
        return None
    return target.resolve()
