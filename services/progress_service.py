# services/progress_service.py
import math
from typing import Mapping, Sequence

from domain.models import CatalogItem, ProgressStats


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_progress(items: Sequence[CatalogItem], checked: Mapping[str, bool]) -> ProgressStats:
    """
    Completion counters for the currently displayed items.
    An empty item set is never complete.
    """
    total = len(items)
    if total == 0:
        return ProgressStats(count=0, total=0, percent=0, is_complete=False)

    count = sum(1 for item in items if checked.get(item.id))
    return ProgressStats(
        count=count,
        total=total,
        percent=round_half_up(count / total * 100),
        is_complete=count == total,
    )
