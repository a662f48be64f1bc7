# utils/formatting.py

from domain.models import CatalogItem


def format_missing_line(item: CatalogItem) -> str:
    """
    One line of the missing-items list sent with a report.
    Example: " Banner A1 (จำนวน: 2)"
    """
    return f" {item.item} (จำนวน: {item.qty})"


def short_category(category: str) -> str:
    """
    Compact label for table badges: "RE-Brand" -> "Brand", "Special-POP" -> "POP"
    """
    return category.replace("RE-", "").replace("Special-", "")
