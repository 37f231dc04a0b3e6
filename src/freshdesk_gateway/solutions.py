"""Knowledge base (solutions) operations: categories, folders and articles."""

import logging
from typing import Any, Dict, List

from freshdesk_gateway.config import FreshdeskConfig
from freshdesk_gateway.errors import FreshdeskError, UnexpectedResponseError
from freshdesk_gateway.transport import request

logger = logging.getLogger(__name__)


def _as_list(body: Any, key: str, endpoint: str) -> List[Dict[str, Any]]:
    # The API returns bare arrays; older deployments wrap them in {"<key>": [...]}.
    if isinstance(body, list):
        return body
    if isinstance(body, dict) and isinstance(body.get(key), list):
        return body[key]
    raise UnexpectedResponseError(
        f"Invalid {key} response from {endpoint}",
        details={"endpoint": endpoint},
    )


async def get_categories(config: FreshdeskConfig) -> List[Dict[str, Any]]:
    """List solution categories.

    Never fails: a transport/remote error or a body that is not a list yields
    an empty list, so callers can chain it unconditionally.
    """
    try:
        body = await request(config, "/solutions/categories")
    except Exception:
        logger.exception("Error fetching solution categories")
        return []
    if not isinstance(body, list):
        logger.error("Invalid categories response: expected a list, got %s", type(body).__name__)
        return []
    return body


async def get_folders(config: FreshdeskConfig, category_id: int) -> List[Dict[str, Any]]:
    endpoint = f"/solutions/categories/{category_id}/folders"
    return _as_list(await request(config, endpoint), "folders", endpoint)


async def get_articles(config: FreshdeskConfig, folder_id: int) -> List[Dict[str, Any]]:
    endpoint = f"/solutions/folders/{folder_id}/articles"
    return _as_list(await request(config, endpoint), "articles", endpoint)


async def get_article(config: FreshdeskConfig, article_id: int) -> Dict[str, Any]:
    return await request(config, f"/solutions/articles/{article_id}")


async def search_articles(config: FreshdeskConfig, term: str) -> Dict[str, Any]:
    """Full-text search over solution articles.

    Returns {"results": [...], "total": n}. The total is copied from the
    remote when it reports one; for a bare list it is the list length.
    """
    body = await request(config, "/search/solutions", params={"term": term})
    if isinstance(body, list):
        return {"results": body, "total": len(body)}
    if isinstance(body, dict) and isinstance(body.get("results"), list):
        out: Dict[str, Any] = {"results": body["results"]}
        if "total" in body:
            out["total"] = body["total"]
        return out
    raise UnexpectedResponseError("Invalid search response from /search/solutions")


def _item_id(item: Any) -> Any:
    return item.get("id") if isinstance(item, dict) else None


async def get_category_tree(config: FreshdeskConfig) -> List[Dict[str, Any]]:
    """Every category with its folders.

    A category whose folders cannot be fetched is kept with an empty folder
    list and an "error" note.
    """
    tree: List[Dict[str, Any]] = []
    for category in await get_categories(config):
        category_id = _item_id(category)
        if category_id is None:
            logger.warning("Skipping category without an id: %r", category)
            continue
        try:
            folders = await get_folders(config, category_id)
            tree.append({"category": category, "folders": folders})
        except FreshdeskError as e:
            logger.warning("Error fetching folders for category %s: %s", category_id, e)
            tree.append({
                "category": category,
                "folders": [],
                "error": f"Failed to fetch folders: {e}",
            })
    return tree


async def get_all_articles(config: FreshdeskConfig) -> List[Dict[str, Any]]:
    """Flatten categories -> folders -> articles into one list.

    Fetches run one at a time. A category or folder that fails is logged and
    skipped; the result holds whatever the other branches returned.
    """
    all_articles: List[Dict[str, Any]] = []
    for branch in await get_category_tree(config):
        for folder in branch["folders"]:
            folder_id = _item_id(folder)
            if folder_id is None:
                logger.warning("Skipping folder without an id: %r", folder)
                continue
            try:
                articles = await get_articles(config, folder_id)
            except FreshdeskError as e:
                logger.warning("Error fetching articles for folder %s: %s", folder_id, e)
                continue
            all_articles.extend(articles)
    return all_articles
