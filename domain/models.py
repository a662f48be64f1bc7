# domain/models.py

import json
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Optional, Dict, Any

from domain.errors import CorruptRecord

MAX_ATTACHMENTS = 3
NO_MISSING_ITEMS = "-"


class ReportMode(Enum):
    MISSING_ITEMS = "missing_items"
    DEFECT_REPORT = "defect_report"
    COMPLETE = "complete"


class LoadingStatus(Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class CatalogItem:
    """
    One expected unit of POP material at one branch.
    """
    id: str  # "<branch>_<item>" with whitespace runs collapsed to "_"
    branch: str  # label as found in the sheet header
    category: str  # e.g. "RE-Brand"
    item: str
    qty: int


@dataclass
class ProgressStats:
    count: int
    total: int
    percent: int
    is_complete: bool


@dataclass
class Attachment:
    """
    A photo or video picked by the operator as report evidence.
    """
    filename: str
    mime_type: str
    content: bytes

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


@dataclass
class ReportDraft:
    """
    Transient report fields entered by the operator before submitting.
    """
    note: str = ""
    attachments: List[Attachment] = field(default_factory=list)
    defect_mode: bool = False

    def reset(self) -> None:
        self.note = ""
        self.attachments = []
        self.defect_mode = False


@dataclass
class SnapshotItem:
    id: str
    item: str
    qty: int
    category: str
    isChecked: bool


@dataclass
class ReportPayload:
    """
    JSON body posted to the report store. Field names follow the store's contract.
    """
    branch: str
    date: str  # 'YYYY-MM-DD'
    note: str
    images: List[str]  # data URLs
    missingItems: str  # newline-joined lines or "-"
    items: str  # JSON list of SnapshotItem

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SubmissionResult:
    mode: ReportMode
    payload: ReportPayload
    missing_lines: List[str]
    cleared_ids: List[str]
    storage_error: Optional[str] = None  # set when the report went out but local checks could not be cleared


@dataclass
class HistoryRecord:
    """
    A previously submitted report as returned by the history query.
    """
    date: str
    branch: str
    items: str  # JSON snapshot, may be corrupt
    missing: str = ""
    note: str = ""
    images: str = ""
    tracking_no: Optional[str] = None

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "HistoryRecord":
        return HistoryRecord(
            date=str(data.get("date") or ""),
            branch=str(data.get("branch") or ""),
            items=data.get("items") or "",
            missing=str(data.get("missing") or ""),
            note=str(data.get("note") or ""),
            images=str(data.get("images") or ""),
            tracking_no=data.get("trackingNo") or None,
        )

    @property
    def has_missing(self) -> bool:
        return bool(self.missing) and self.missing != NO_MISSING_ITEMS

    def snapshot_items(self) -> List[SnapshotItem]:
        """
        Decode the item snapshot stored with the record.

        Raises CorruptRecord if the snapshot is not a JSON list of item objects.
        """
        raw = self.items
        try:
            decoded = json.loads(raw) if isinstance(raw, str) else raw
        except (TypeError, ValueError) as e:
            raise CorruptRecord(f"Item snapshot is not valid JSON: {e}") from e

        if not isinstance(decoded, list):
            raise CorruptRecord("Item snapshot is not a list")

        result: List[SnapshotItem] = []
        for entry in decoded:
            if not isinstance(entry, dict):
                raise CorruptRecord(f"Unexpected snapshot entry: {entry!r}")
            try:
                result.append(
                    SnapshotItem(
                        id=str(entry.get("id", "")),
                        item=str(entry["item"]),
                        qty=int(entry.get("qty", 0)),
                        category=str(entry.get("category", "")),
                        isChecked=bool(entry.get("isChecked", False)),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise CorruptRecord(f"Snapshot entry is missing fields: {e}") from e
        return result
