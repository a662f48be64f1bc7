# services/history_service.py
import logging
from datetime import date
from typing import List, Optional, Union

from domain.errors import CorruptRecord
from domain.models import HistoryRecord, SnapshotItem
from services.report_client import ReportClient

logger = logging.getLogger(__name__)

ITEMS_UNAVAILABLE = "⚠️ Cannot load POP items (Data might be corrupted)"
STATUS_RECEIVED = "✅ Received"
STATUS_NOT_RECEIVED = "❌ Not Received"


def fetch_latest_history(
        client: ReportClient,
        branch: str,
        report_date: Union[date, str],
) -> Optional[HistoryRecord]:
    """
    The most recent report for (branch, date), or None if nothing was submitted.
    The store returns records oldest first, so the last one wins.
    """
    date_str = report_date.isoformat() if isinstance(report_date, date) else report_date
    rows = client.get_history(branch, date_str)

    if not rows:
        logger.info("No history for %s on %s", branch, date_str)
        return None

    return HistoryRecord.from_dict(rows[-1])


def snapshot_or_none(record: HistoryRecord) -> Optional[List[SnapshotItem]]:
    """
    Snapshot items of a record, or None when the snapshot is corrupt.
    Renderers show ITEMS_UNAVAILABLE in that case instead of dropping the record.
    """
    try:
        return record.snapshot_items()
    except CorruptRecord as e:
        logger.warning("Corrupt item snapshot for %s on %s: %s", record.branch, record.date, e)
        return None


def status_label(item: SnapshotItem) -> str:
    return STATUS_RECEIVED if item.isChecked else STATUS_NOT_RECEIVED
