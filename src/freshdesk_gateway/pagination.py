import re
from typing import Any, Dict, Optional
from urllib.parse import parse_qs, urlsplit

import httpx

from freshdesk_gateway.config import FreshdeskConfig
from freshdesk_gateway.errors import UnexpectedResponseError
from freshdesk_gateway.models import Page, PaginationCursor
from freshdesk_gateway.transport import decode_body, request_raw

MIN_PAGE = 1
MIN_PER_PAGE = 1
MAX_PER_PAGE = 100
DEFAULT_PER_PAGE = 30

_LINK_RE = re.compile(r'<([^>]*)>\s*;\s*rel="?([^",;]+)"?')


def clamp_page(page: Optional[int]) -> int:
    if page is None or page < MIN_PAGE:
        return MIN_PAGE
    return page


def clamp_per_page(per_page: Optional[int]) -> int:
    if per_page is None:
        return DEFAULT_PER_PAGE
    return max(MIN_PER_PAGE, min(MAX_PER_PAGE, per_page))


def _page_from_url(url: str) -> Optional[int]:
    values = parse_qs(urlsplit(url).query).get("page")
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


def parse_link_header(link_header: Optional[str]) -> Dict[str, Optional[int]]:
    """Parse the Link header to extract pagination information.

    Args:
        link_header: The Link header string from the response

    Returns:
        Dictionary containing next and prev page numbers; a relation missing
        from the header maps to None.
    """
    pagination: Dict[str, Optional[int]] = {
        "next": None,
        "prev": None,
    }

    if not link_header:
        return pagination

    # URLs may contain commas, e.g. tag=a,b
    for match in _LINK_RE.finditer(link_header):
        url, rel = match.groups()
        rel = rel.strip().lower()
        if rel not in pagination:
            continue
        pagination[rel] = _page_from_url(url)

    return pagination


def cursor_from_response(response: httpx.Response, page: int, per_page: int) -> PaginationCursor:
    links = parse_link_header(response.headers.get("Link", ""))
    return PaginationCursor(
        current_page=page,
        per_page=per_page,
        next_page=links["next"],
        prev_page=links["prev"],
    )


async def fetch_page(
    config: FreshdeskConfig,
    endpoint: str,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    params: Optional[Dict[str, Any]] = None,
) -> Page:
    """GET one page of a listing and rebuild the cursor from its Link header."""
    page = clamp_page(page)
    per_page = clamp_per_page(per_page)
    query: Dict[str, Any] = dict(params or {})
    query["page"] = page
    query["per_page"] = per_page

    response = await request_raw(config, endpoint, params=query)
    items = decode_body(response)
    if not isinstance(items, list):
        raise UnexpectedResponseError(
            f"Expected a list from {endpoint}, got {type(items).__name__}",
            details={"endpoint": endpoint},
        )
    return Page(items=items, pagination=cursor_from_response(response, page, per_page))
