# services/catalog_service.py
import csv
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Mapping, Set, Tuple

import requests

import config
from domain.errors import SourceUnavailable
from domain.models import CatalogItem
from services.ingest_service import parse_sheet_csv
from utils.branch_resolver import build_canonical_branches, normalize_branch_key

logger = logging.getLogger(__name__)


def fetch_sheet_text(
        url: str,
        *,
        timeout_seconds: float = config.HTTP_TIMEOUT,
        max_retries: int = config.HTTP_MAX_RETRIES,
        session=requests,
) -> str:
    """
    Download one sheet as plain CSV text, retrying transient failures.
    """
    if not url:
        raise SourceUnavailable("Sheet URL is not configured")

    last_error = None
    for attempt in range(1, max_retries + 1):
        try:
            resp = session.get(url, timeout=timeout_seconds)
            resp.raise_for_status()
            # sheet exports are UTF-8 even when the header omits the charset
            resp.encoding = "utf-8"
            return resp.text
        except requests.RequestException as e:
            last_error = e
            logger.warning("Sheet download failed (%d/%d): %s", attempt, max_retries, e)

    logger.error("Giving up downloading sheet %s: %s", url, last_error)
    raise SourceUnavailable(f"Cannot download sheet: {last_error}")


def load_catalog(
        sources: Mapping[str, str],
        fetch: Callable[[str], str] = fetch_sheet_text,
) -> Tuple[List[CatalogItem], List[str]]:
    """
    Fetch every category sheet in parallel and merge them into one catalog.

    `sources` maps category name -> CSV export URL.
    Returns (items, canonical_branches). Raises SourceUnavailable if any sheet fails,
    so callers never see a half-loaded catalog.
    """
    categories = list(sources.keys())
    if not categories:
        return [], []

    with ThreadPoolExecutor(max_workers=len(categories)) as ex:
        futures = {category: ex.submit(fetch, sources[category]) for category in categories}
        texts: Dict[str, str] = {}
        for category, fut in futures.items():
            try:
                texts[category] = fut.result()
            except SourceUnavailable:
                raise
            except Exception as e:
                raise SourceUnavailable(f"Cannot load {category}: {e}") from e

    items: List[CatalogItem] = []
    branch_names: Set[str] = set()

    # merge in the configured category order
    for category in categories:
        try:
            parsed, names = parse_sheet_csv(texts[category], category)
        except csv.Error as e:
            raise SourceUnavailable(f"Cannot parse {category}: {e}") from e
        items.extend(parsed)
        branch_names.update(names)

    branches = build_canonical_branches(branch_names)
    logger.info("Catalog loaded: %d items, %d branches", len(items), len(branches))
    return items, branches


def filter_items(
        catalog: List[CatalogItem],
        branch: str,
        category: str = config.ALL_CATEGORIES,
) -> List[CatalogItem]:
    """
    Items of one branch (matched on the normalized branch key), optionally one category.
    """
    if not branch:
        return []

    branch_key = normalize_branch_key(branch)
    result = [item for item in catalog if normalize_branch_key(item.branch) == branch_key]

    if category and category != config.ALL_CATEGORIES:
        result = [item for item in result if item.category == category]

    return result


def unique_item_names(catalog: List[CatalogItem], category: str) -> List[str]:
    """Sorted distinct item names in one category, across all branches."""
    return sorted({item.item for item in catalog if item.category == category})
