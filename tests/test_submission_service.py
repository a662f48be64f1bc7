"""
Tests for report validation, payload building and submission.

Run with: pytest tests/test_submission_service.py -v
"""
import json

import pytest

from domain.errors import AttachmentLimitExceeded, DispatchFailed, ValidationFailed
from domain.models import Attachment, ReportDraft, ReportMode
from services.checklist_store import ChecklistStore
from services.storage_service import InMemoryKeyValueStore
from services.submission_service import (
    RECEIVED_ALL_NOTE,
    add_attachments,
    build_missing_items,
    determine_report_mode,
    remove_attachment,
    submit_report,
    success_message,
    validate_and_build,
    validate_report,
)


class ReadOnlyDeleteStore(InMemoryKeyValueStore):
    def delete(self, key):
        raise OSError("read-only filesystem")


def _check_all(store, items, report_date):
    for item in items:
        store.toggle(item.id, report_date)


class TestDetermineReportMode:
    @pytest.mark.parametrize(
        "checked_count,defect,expected",
        [
            (2, False, ReportMode.MISSING_ITEMS),
            (2, True, ReportMode.MISSING_ITEMS),
            (3, True, ReportMode.DEFECT_REPORT),
            (3, False, ReportMode.COMPLETE),
        ],
    )
    def test_mode_table(self, item_factory, checked_count, defect, expected):
        items = item_factory("Phuket", 3)
        checked = {i.id: True for i in items[:checked_count]}
        assert determine_report_mode(items, checked, defect) is expected


class TestValidateReport:
    def test_missing_items_needs_note_or_media(self, photo):
        with pytest.raises(ValidationFailed) as exc:
            validate_report(ReportMode.MISSING_ITEMS, "", [])
        assert exc.value.rule == "missing_evidence"

        validate_report(ReportMode.MISSING_ITEMS, "box 2 not delivered", [])
        validate_report(ReportMode.MISSING_ITEMS, "", [photo])

    def test_whitespace_note_is_no_note(self):
        with pytest.raises(ValidationFailed) as exc:
            validate_report(ReportMode.MISSING_ITEMS, "   \n", [])
        assert exc.value.rule == "missing_evidence"

    def test_defect_needs_note_then_media(self, photo):
        with pytest.raises(ValidationFailed) as exc:
            validate_report(ReportMode.DEFECT_REPORT, "", [photo])
        assert exc.value.rule == "defect_note"

        with pytest.raises(ValidationFailed) as exc:
            validate_report(ReportMode.DEFECT_REPORT, "stand is cracked", [])
        assert exc.value.rule == "defect_attachment"

        validate_report(ReportMode.DEFECT_REPORT, "stand is cracked", [photo])

    def test_complete_needs_media(self, photo):
        with pytest.raises(ValidationFailed) as exc:
            validate_report(ReportMode.COMPLETE, "all good", [])
        assert exc.value.rule == "complete_attachment"
        assert "กรุณาถ่ายรูป" in exc.value.message

        validate_report(ReportMode.COMPLETE, "", [photo])


class TestAttachments:
    def test_limit_is_all_or_nothing(self, photo):
        draft = ReportDraft(attachments=[photo, photo])
        with pytest.raises(AttachmentLimitExceeded):
            add_attachments(draft, [photo, photo])
        assert len(draft.attachments) == 2

        add_attachments(draft, [photo])
        assert len(draft.attachments) == 3

    def test_remove_by_index(self, photo):
        video = Attachment(filename="unbox.mp4", mime_type="video/mp4", content=b"mp4")
        draft = ReportDraft(attachments=[photo, video])
        remove_attachment(draft, 0)
        assert draft.attachments == [video]
        remove_attachment(draft, 5)
        assert draft.attachments == [video]


class TestValidateAndBuild:
    def test_branch_and_date_required(self, item_factory, report_date, photo):
        items = item_factory("Phuket", 1)
        draft = ReportDraft(attachments=[photo])
        checked = {items[0].id: True}

        with pytest.raises(ValidationFailed) as exc:
            validate_and_build("", report_date, items, checked, draft)
        assert exc.value.rule == "branch_required"

        with pytest.raises(ValidationFailed) as exc:
            validate_and_build("Phuket", None, items, checked, draft)
        assert exc.value.rule == "date_required"

    def test_complete_report_payload(self, item_factory, report_date, photo):
        items = item_factory("Phuket", 5)
        checked = {i.id: True for i in items}
        draft = ReportDraft(note="ignored", attachments=[photo])

        result = validate_and_build("Phuket", report_date, items, checked, draft)

        assert result.mode is ReportMode.COMPLETE
        assert result.payload.missingItems == "-"
        assert result.payload.note == RECEIVED_ALL_NOTE
        assert result.payload.date == "2025-01-15"
        assert result.payload.images == ["data:image/jpeg;base64,/9hqcGVnZGF0YQ=="]

    def test_complete_without_attachment_fails(self, item_factory, report_date):
        items = item_factory("Phuket", 5)
        checked = {i.id: True for i in items}
        with pytest.raises(ValidationFailed) as exc:
            validate_and_build("Phuket", report_date, items, checked, ReportDraft())
        assert exc.value.rule == "complete_attachment"

    def test_missing_items_with_note_only(self, item_factory, report_date):
        items = item_factory("Phuket", 5)
        checked = {i.id: True for i in items[:3]}

        with pytest.raises(ValidationFailed) as exc:
            validate_and_build("Phuket", report_date, items, checked, ReportDraft())
        assert exc.value.rule == "missing_evidence"

        draft = ReportDraft(note="two boxes short")
        result = validate_and_build("Phuket", report_date, items, checked, draft)

        assert result.mode is ReportMode.MISSING_ITEMS
        assert result.payload.note == "two boxes short"
        assert result.payload.images == []
        assert result.payload.missingItems == " Item 4 (จำนวน: 4)\n Item 5 (จำนวน: 5)"
        assert result.missing_lines == [" Item 4 (จำนวน: 4)", " Item 5 (จำนวน: 5)"]

    def test_snapshot_reflects_checks(self, item_factory, report_date):
        items = item_factory("Phuket", 2)
        checked = {items[0].id: True}
        result = validate_and_build("Phuket", report_date, items, checked, ReportDraft(note="late"))

        snapshot = json.loads(result.payload.items)
        assert snapshot == [
            {"id": "Phuket_Item_1", "item": "Item 1", "qty": 1, "category": "RE-Brand", "isChecked": True},
            {"id": "Phuket_Item_2", "item": "Item 2", "qty": 2, "category": "RE-Brand", "isChecked": False},
        ]

    def test_missing_lines_follow_item_order(self, item_factory):
        items = item_factory("Phuket", 3)
        assert build_missing_items(items, {items[1].id: True}) == [
            " Item 1 (จำนวน: 1)",
            " Item 3 (จำนวน: 3)",
        ]


class TestSubmitReport:
    def test_success_clears_only_that_branch(self, store, kv, report_client, item_factory, report_date, photo):
        phuket = item_factory("Phuket", 3)
        chiang_mai = item_factory("Chiang Mai", 2)
        _check_all(store, phuket, report_date)
        _check_all(store, chiang_mai, report_date)
        draft = ReportDraft(note="", attachments=[photo])

        result = submit_report(report_client, store, draft, "Phuket", report_date, phuket)

        report_client.post_report.assert_called_once_with(result.payload)
        assert sorted(result.cleared_ids) == sorted(i.id for i in phuket)
        assert store.checked == {i.id: True for i in chiang_mai}
        assert sorted(kv.keys()) == sorted("pop_check_" + i.id for i in chiang_mai)
        assert draft == ReportDraft()

    def test_dispatch_failure_keeps_state(self, store, report_client, item_factory, report_date, photo):
        items = item_factory("Phuket", 2)
        _check_all(store, items, report_date)
        draft = ReportDraft(note="ok", attachments=[photo], defect_mode=True)
        report_client.post_report.side_effect = DispatchFailed("connection reset")

        with pytest.raises(DispatchFailed):
            submit_report(report_client, store, draft, "Phuket", report_date, items)

        assert store.checked == {i.id: True for i in items}
        assert draft.note == "ok"
        assert draft.attachments == [photo]
        assert draft.defect_mode is True

    def test_clear_failure_after_send_still_returns_result(self, report_client, item_factory, report_date, photo):
        store = ChecklistStore(ReadOnlyDeleteStore())
        items = item_factory("Phuket", 2)
        _check_all(store, items, report_date)
        draft = ReportDraft(attachments=[photo])

        result = submit_report(report_client, store, draft, "Phuket", report_date, items)

        report_client.post_report.assert_called_once_with(result.payload)
        assert result.storage_error
        assert result.cleared_ids == []
        assert draft == ReportDraft()

    def test_validation_failure_sends_nothing(self, store, report_client, item_factory, report_date):
        items = item_factory("Phuket", 2)
        with pytest.raises(ValidationFailed):
            submit_report(report_client, store, ReportDraft(), "Phuket", report_date, items)
        report_client.post_report.assert_not_called()


class TestSuccessMessage:
    def test_messages_per_mode(self, item_factory, report_date, photo):
        items = item_factory("Phuket", 2)

        missing = validate_and_build("Phuket", report_date, items, {}, ReportDraft(note="short"))
        msg = success_message(missing)
        assert "2 รายการ" in msg
        assert " Item 1 (จำนวน: 1)" in msg

        checked = {i.id: True for i in items}
        defect = validate_and_build(
            "Phuket", report_date, items, checked, ReportDraft(note="torn", attachments=[photo], defect_mode=True)
        )
        assert success_message(defect) == "✅ บันทึกข้อมูลสำเร็จ (แจ้งชำรุด)"

        complete = validate_and_build("Phuket", report_date, items, checked, ReportDraft(attachments=[photo]))
        assert success_message(complete).startswith("✅ บันทึกข้อมูลสำเร็จ (ครบถ้วน)")
