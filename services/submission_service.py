# services/submission_service.py

import json
import logging
from dataclasses import asdict
from datetime import date
from typing import Iterable, List, Mapping, Optional, Sequence

from domain.errors import AttachmentLimitExceeded, StorageError, ValidationFailed
from domain.models import (
    MAX_ATTACHMENTS,
    NO_MISSING_ITEMS,
    Attachment,
    CatalogItem,
    ReportDraft,
    ReportMode,
    ReportPayload,
    SnapshotItem,
    SubmissionResult,
)
from services.checklist_store import ChecklistStore
from services.report_client import ReportClient
from utils.formatting import format_missing_line
from utils.media import encode_attachments

logger = logging.getLogger(__name__)

RECEIVED_ALL_NOTE = "Received All (รับครบถ้วน)"

# rule id -> message shown to the operator
RULE_MESSAGES = {
    "branch_required": "กรุณาเลือกสาขา",
    "date_required": "กรุณาเลือกวันที่",
    "missing_evidence": "⚠️ ของไม่ครบ: กรุณาระบุรายละเอียด หรือแนบรูปภาพ",
    "defect_note": "⚠️ แจ้งชำรุด: กรุณาระบุรายละเอียดความเสียหาย",
    "defect_attachment": "⚠️ แจ้งชำรุด: กรุณาแนบรูปภาพ/วิดีโอประกอบ",
    "complete_attachment": "⚠️ รับของครบ: กรุณาถ่ายรูป/วิดีโอยืนยันการรับของ",
}


def _fail(rule: str) -> ValidationFailed:
    return ValidationFailed(rule, RULE_MESSAGES[rule])


def add_attachments(draft: ReportDraft, new_files: Sequence[Attachment]) -> None:
    """
    Append files to the draft, all or nothing, keeping at most MAX_ATTACHMENTS.
    """
    if len(draft.attachments) + len(new_files) > MAX_ATTACHMENTS:
        raise AttachmentLimitExceeded()
    draft.attachments = [*draft.attachments, *new_files]


def remove_attachment(draft: ReportDraft, index: int) -> None:
    draft.attachments = [a for i, a in enumerate(draft.attachments) if i != index]


def unchecked_items(branch_items: Iterable[CatalogItem], checked: Mapping[str, bool]) -> List[CatalogItem]:
    return [item for item in branch_items if not checked.get(item.id)]


def build_missing_items(branch_items: Iterable[CatalogItem], checked: Mapping[str, bool]) -> List[str]:
    return [format_missing_line(item) for item in unchecked_items(branch_items, checked)]


def determine_report_mode(
        branch_items: Sequence[CatalogItem],
        checked: Mapping[str, bool],
        defect_mode: bool,
) -> ReportMode:
    """
    Anything unchecked forces MISSING_ITEMS; the defect flag only matters
    once every item has been received.
    """
    if unchecked_items(branch_items, checked):
        return ReportMode.MISSING_ITEMS
    if defect_mode:
        return ReportMode.DEFECT_REPORT
    return ReportMode.COMPLETE


def validate_report(mode: ReportMode, note: str, attachments: Sequence[Attachment]) -> None:
    has_note = bool(note and note.strip())
    has_media = len(attachments) > 0

    if mode is ReportMode.MISSING_ITEMS:
        if not has_note and not has_media:
            raise _fail("missing_evidence")
    elif mode is ReportMode.DEFECT_REPORT:
        if not has_note:
            raise _fail("defect_note")
        if not has_media:
            raise _fail("defect_attachment")
    else:
        if not has_media:
            raise _fail("complete_attachment")


def build_snapshot(branch_items: Iterable[CatalogItem], checked: Mapping[str, bool]) -> str:
    snapshot = [
        asdict(
            SnapshotItem(
                id=item.id,
                item=item.item,
                qty=item.qty,
                category=item.category,
                isChecked=bool(checked.get(item.id)),
            )
        )
        for item in branch_items
    ]
    return json.dumps(snapshot, ensure_ascii=False)


def validate_and_build(
        branch: str,
        report_date: Optional[date],
        branch_items: Sequence[CatalogItem],
        checked: Mapping[str, bool],
        draft: ReportDraft,
) -> SubmissionResult:
    """
    Check the evidence rules for the current mode and build the outgoing report.
    Raises ValidationFailed without touching any state.
    """
    if not branch:
        raise _fail("branch_required")
    if not report_date:
        raise _fail("date_required")

    mode = determine_report_mode(branch_items, checked, draft.defect_mode)
    validate_report(mode, draft.note, draft.attachments)

    missing_lines = build_missing_items(branch_items, checked)
    note = RECEIVED_ALL_NOTE if mode is ReportMode.COMPLETE else draft.note

    payload = ReportPayload(
        branch=branch,
        date=report_date.isoformat(),
        note=note,
        images=encode_attachments(draft.attachments),
        missingItems="\n".join(missing_lines) if missing_lines else NO_MISSING_ITEMS,
        items=build_snapshot(branch_items, checked),
    )

    return SubmissionResult(mode=mode, payload=payload, missing_lines=missing_lines, cleared_ids=[])


def submit_report(
        client: ReportClient,
        store: ChecklistStore,
        draft: ReportDraft,
        branch: str,
        report_date: Optional[date],
        branch_items: Sequence[CatalogItem],
) -> SubmissionResult:
    """
    Validate, send, then reset the branch for its next delivery cycle.

    Only after a successful send are the branch's checks cleared and the draft
    reset; a DispatchFailed leaves everything in place for a retry.

    Once the report is out, a StorageError while clearing is logged and put on
    result.storage_error instead of raised, so the report is never sent twice.
    """
    result = validate_and_build(branch, report_date, branch_items, store.checked, draft)

    client.post_report(result.payload)

    try:
        result.cleared_ids = store.clear(item.id for item in branch_items)
    except StorageError as e:
        logger.error('Report for "%s" sent but checks not cleared: %s', branch, e)
        result.storage_error = str(e)
    draft.reset()

    logger.info(
        'Submitted %s report for "%s" on %s (%d missing)',
        result.mode.value,
        branch,
        result.payload.date,
        len(result.missing_lines),
    )
    return result


def success_message(result: SubmissionResult) -> str:
    if result.mode is ReportMode.MISSING_ITEMS:
        msg = f"⚠️ บันทึกข้อมูลแล้ว (แต่มีของที่ยังไม่ได้ {len(result.missing_lines)} รายการ)\nระบบแจ้งเตือนแล้ว\n"
        msg += "\n".join(result.missing_lines)
        msg += "\n\n================\nระบบได้แจ้งเตือนฝ่ายที่เกี่ยวข้องแล้ว"
        return msg
    if result.mode is ReportMode.DEFECT_REPORT:
        return "✅ บันทึกข้อมูลสำเร็จ (แจ้งชำรุด)"
    return "✅ บันทึกข้อมูลสำเร็จ (ครบถ้วน)\nขอบคุณครับ"
