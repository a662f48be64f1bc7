# services/ingest_service.py

import csv
import logging
import re
from typing import Dict, List, Optional, Set, Tuple

from domain.models import CatalogItem

logger = logging.getLogger(__name__)

HEADER_ANCHOR = "Head Office"

# Header cells containing any of these are summary/bookkeeping columns, not branches
RESERVED_HEADER_MARKERS = ("Total", "Tracking", "List", "No.")

# Subtotal and footer rows
RESERVED_ITEM_PREFIXES = ("Total", "Tracking")

MIN_ROW_CELLS = 5
ITEM_NAME_COL = 1
ITEM_NAME_FALLBACK_COL = 0

_LEADING_INT = re.compile(r"[+-]?\d+")
_WHITESPACE = re.compile(r"\s+")


def make_item_id(branch: str, item_name: str) -> str:
    """
    Stable id for a (branch, item) pair. Category is not part of it,
    so the same pair keeps its check state across reloads and sheets.
    """
    return _WHITESPACE.sub("_", f"{branch}_{item_name}")


def _clean_cell(value: Optional[str]) -> str:
    return (value or "").strip().strip('"').strip()


def _parse_qty(value: Optional[str]) -> Optional[int]:
    """
    Leading integer of a sheet cell ("5", "5 pcs" -> 5), None if there is none.
    """
    match = _LEADING_INT.match(_clean_cell(value))
    if not match:
        return None
    return int(match.group())


def _cell(row: List[str], index: int) -> str:
    return row[index] if index < len(row) else ""


def _find_header(lines: List[str]) -> Tuple[int, Dict[int, str]]:
    for line_no, line in enumerate(lines):
        if HEADER_ANCHOR not in line:
            continue

        header = next(csv.reader([line]))
        branch_columns: Dict[int, str] = {}
        for index, raw in enumerate(header):
            name = _clean_cell(raw)
            if not name:
                continue
            if any(marker in name for marker in RESERVED_HEADER_MARKERS):
                continue
            branch_columns[index] = name

        return line_no, branch_columns

    return -1, {}


def parse_sheet_csv(csv_text: str, category: str) -> Tuple[List[CatalogItem], Set[str]]:
    """
    Parse one exported sheet into catalog items.

    The sheet layout is:
      - some preamble rows
      - a header row containing "Head Office", one column per branch
      - one row per item: No., item name, then a quantity under each branch

    Returns (items, branch_names). A sheet without a header row yields nothing.
    """
    items: List[CatalogItem] = []
    branch_names: Set[str] = set()

    if not csv_text or not csv_text.strip():
        return items, branch_names

    lines = csv_text.strip().splitlines()
    header_index, branch_columns = _find_header(lines)

    if header_index == -1:
        logger.debug('No "%s" header in %s sheet, skipping', HEADER_ANCHOR, category)
        return items, branch_names

    branch_names.update(branch_columns.values())

    for row in csv.reader(lines[header_index + 1:]):
        if len(row) < MIN_ROW_CELLS:
            continue

        item_name = _clean_cell(_cell(row, ITEM_NAME_COL)) or _clean_cell(_cell(row, ITEM_NAME_FALLBACK_COL))
        if not item_name or item_name.startswith(RESERVED_ITEM_PREFIXES):
            continue

        for index, branch in branch_columns.items():
            qty = _parse_qty(_cell(row, index))
            if qty is None or qty <= 0:
                continue

            items.append(
                CatalogItem(
                    id=make_item_id(branch, item_name),
                    branch=branch,
                    category=category,
                    item=item_name,
                    qty=qty,
                )
            )

    logger.info("Parsed %d items for %d branches from %s", len(items), len(branch_names), category)
    return items, branch_names
