# services/tracking_service.py

import logging
from datetime import date
from typing import Callable, List, Mapping, Optional, Tuple

import config
from domain.errors import DispatchFailed, SourceUnavailable, StorageError, ValidationFailed
from domain.models import CatalogItem, LoadingStatus, ProgressStats, ReportDraft, ReportMode
from services.catalog_service import fetch_sheet_text, filter_items, load_catalog
from services.checklist_store import ChecklistStore
from services.progress_service import compute_progress
from services.report_client import ReportClient
from services.submission_service import determine_report_mode, submit_report, success_message
from utils.branch_resolver import resolve_canonical_branch

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "❌ เชื่อมต่อไม่ได้"
SUBMIT_ERROR_MESSAGE = "❌ เกิดข้อผิดพลาดในการส่งข้อมูล"
SUBMIT_IN_PROGRESS_MESSAGE = "กำลังส่งข้อมูล กรุณารอสักครู่"
STORAGE_ERROR_MESSAGE = "❌ บันทึกสถานะไม่สำเร็จ"
CLEAR_WARNING_MESSAGE = "⚠️ ส่งรายงานแล้ว แต่ล้างสถานะการตรวจรับไม่สำเร็จ กรุณาตรวจสอบรายการก่อนส่งครั้งถัดไป"


class TrackingSession:
    """
    Everything one operator works with on one device: the loaded catalog,
    current selections, the check state and the report being drafted.

    Operations the UI triggers return (ok, message) so pages can show the
    message directly.
    """

    def __init__(
            self,
            store: ChecklistStore,
            client: ReportClient,
            *,
            sources: Optional[Mapping[str, str]] = None,
            fetch: Callable[[str], str] = fetch_sheet_text,
            today: Optional[date] = None,
    ):
        self.store = store
        self.client = client
        self.sources = dict(sources if sources is not None else config.SHEET_URLS)
        self.fetch = fetch

        self.catalog: List[CatalogItem] = []
        self.branches: List[str] = []
        self.status = LoadingStatus.LOADING

        self.selected_branch = ""
        self.selected_category = config.ALL_CATEGORIES
        self.report_date: Optional[date] = today or date.today()

        self.draft = ReportDraft()
        self.is_submitting = False
        self._load_generation = 0

    # ---------- Loading ----------

    def start(self) -> bool:
        self.store.load_all()
        return self.load_catalog()

    def load_catalog(self) -> bool:
        """
        Replace the catalog with a fresh load of every sheet.
        On failure the previous catalog stays and status becomes ERROR.
        """
        self._load_generation += 1
        generation = self._load_generation
        self.status = LoadingStatus.LOADING

        try:
            items, branches = load_catalog(self.sources, fetch=self.fetch)
        except SourceUnavailable as e:
            logger.error("Catalog load failed: %s", e)
            if generation == self._load_generation:
                self.status = LoadingStatus.ERROR
            return False

        if generation != self._load_generation:
            logger.info("Discarding superseded catalog load #%d", generation)
            return False

        self.catalog = items
        self.branches = branches
        self.status = LoadingStatus.READY
        return True

    # ---------- Selection & derived state ----------

    def select_branch(self, raw_branch: str) -> Optional[str]:
        self.selected_branch = resolve_canonical_branch(raw_branch, self.branches) or ""
        return self.selected_branch or None

    def filtered_items(self) -> List[CatalogItem]:
        return filter_items(self.catalog, self.selected_branch, self.selected_category)

    def branch_items(self) -> List[CatalogItem]:
        return filter_items(self.catalog, self.selected_branch)

    def progress(self) -> ProgressStats:
        return compute_progress(self.filtered_items(), self.store.checked)

    def report_mode(self) -> ReportMode:
        return determine_report_mode(self.branch_items(), self.store.checked, self.draft.defect_mode)

    # ---------- Operations ----------

    def toggle(self, item_id: str) -> Tuple[bool, str]:
        try:
            state = self.store.toggle(item_id, self.report_date)
        except ValidationFailed as e:
            return False, e.message
        except StorageError as e:
            logger.error("Toggle failed: %s", e)
            return False, STORAGE_ERROR_MESSAGE
        return True, "checked" if state else "unchecked"

    def submit(self) -> Tuple[bool, str]:
        if self.is_submitting:
            return False, SUBMIT_IN_PROGRESS_MESSAGE

        self.is_submitting = True
        try:
            result = submit_report(
                self.client,
                self.store,
                self.draft,
                self.selected_branch,
                self.report_date,
                self.branch_items(),
            )
        except ValidationFailed as e:
            return False, e.message
        except DispatchFailed as e:
            logger.error("Submit failed for %s: %s", self.selected_branch, e)
            return False, SUBMIT_ERROR_MESSAGE
        finally:
            self.is_submitting = False

        if result.storage_error:
            return True, success_message(result) + "\n\n" + CLEAR_WARNING_MESSAGE
        return True, success_message(result)
