import logging
from io import BytesIO
from pathlib import Path
from typing import List, Optional

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt

from domain.models import HistoryRecord
from services.history_service import ITEMS_UNAVAILABLE, snapshot_or_none, status_label
from utils.barcode import can_encode, ensure_barcode_image
from utils.docx_helpers import add_label_value, add_table

logger = logging.getLogger(__name__)

TITLE = "POP Receive Tracking Order"
SUBTITLE = "POP Receive Tracking Order System"
ITEM_HEADERS = ["Category", "Item", "Qty", "Status"]


def history_filename(record: HistoryRecord) -> str:
    return f"POP_Report_{record.branch}_{record.date}.docx"


def _item_rows(record: HistoryRecord) -> Optional[List[List[str]]]:
    items = snapshot_or_none(record)
    if items is None:
        return None
    return [[it.category, it.item, str(it.qty), status_label(it)] for it in items]


def build_history_document(
        record: HistoryRecord,
        barcode_dir: Optional[Path] = None,
) -> BytesIO:
    """
    Printable record of one submitted report.

    Layout:
      - title + subtitle
      - branch, tracking number (with barcode when printable), date checked
      - item table with received status, or a placeholder if the snapshot is corrupt
      - note and footer

    The missing-items list is an on-screen alert only and is left out here.
    """
    doc = Document()

    title = doc.add_heading(TITLE, level=1)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    subtitle = doc.add_paragraph(SUBTITLE)
    subtitle.alignment = WD_ALIGN_PARAGRAPH.CENTER

    add_label_value(doc, "Branch:", record.branch)
    add_label_value(doc, "Tracking No.:", record.tracking_no or "-")

    if record.tracking_no and can_encode(record.tracking_no):
        img_path = ensure_barcode_image(record.tracking_no, barcode_dir)
        doc.add_paragraph().add_run().add_picture(img_path, width=Inches(2.0))
    elif record.tracking_no:
        logger.info("Tracking no. %r is not Code128-printable, skipping barcode", record.tracking_no)

    add_label_value(doc, "Date Checked:", record.date)

    rows = _item_rows(record)
    if rows is None:
        warning = doc.add_paragraph(ITEMS_UNAVAILABLE)
        warning.alignment = WD_ALIGN_PARAGRAPH.CENTER
    else:
        add_table(doc, ITEM_HEADERS, rows)

    doc.add_paragraph()
    add_label_value(doc, "Note:", record.note or "-")

    footer = doc.add_paragraph()
    footer.alignment = WD_ALIGN_PARAGRAPH.RIGHT
    run = footer.add_run(f"(Auto-saved on {record.date})")
    run.italic = True
    run.font.size = Pt(8)

    buffer = BytesIO()
    doc.save(buffer)
    buffer.seek(0)
    return buffer
