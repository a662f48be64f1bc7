import logging

import streamlit as st
import pandas as pd

import config
from domain.errors import AttachmentLimitExceeded
from domain.models import Attachment, LoadingStatus, ReportMode
from element_component import MODE_LABELS, confirmation_dialog_submit, get_tracking_session
from services.submission_service import add_attachments
from utils.formatting import short_category
from utils.media import guess_mime_type

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

st.set_page_config(
    page_title="POP Order Tracking",
    page_icon="📦"
)

st.title("POP Order Tracking")
st.caption("ระบบตรวจสอบและรายงานยอดรับวัสดุ")

session = get_tracking_session()

# -------------------------------------------------------------------
# Session state defaults
# -------------------------------------------------------------------

defaults = {
    "submit_result": None,
    "uploader_gen": 0,
    "report_note": "",
    "checklist_gen": 0,
    "toggle_warning": None,
}

for k, v in defaults.items():
    st.session_state.setdefault(k, v)

# Result of the confirmation dialog from the previous run
if st.session_state["submit_result"] is not None:
    ok, msg = st.session_state["submit_result"]
    st.session_state["submit_result"] = None
    if ok:
        st.session_state["report_note"] = ""
        st.session_state["uploader_gen"] += 1
        st.success(msg)
    else:
        st.error(msg)

# -------------------------------------------------------------------
# Loading status
# -------------------------------------------------------------------

col_status, col_reload = st.columns([3, 1])
with col_status:
    if session.status is LoadingStatus.READY:
        st.caption("✅ พร้อมใช้งาน")
    elif session.status is LoadingStatus.ERROR:
        st.error("❌ เชื่อมต่อไม่ได้")
    else:
        st.caption("กำลังเชื่อมต่อ...")
with col_reload:
    if st.button("🔄 โหลดใหม่"):
        with st.spinner("กำลังเชื่อมต่อ..."):
            session.load_catalog()
        st.rerun()

# -------------------------------------------------------------------
# Controls
# -------------------------------------------------------------------

branch_val = st.selectbox(
    "1. เลือกสาขา (Branch)",
    session.branches,
    index=session.branches.index(session.selected_branch) if session.selected_branch in session.branches else None,
    placeholder="-- กรุณาเลือกสาขา --",
    disabled=session.status is not LoadingStatus.READY and not session.branches,
)
session.select_branch(branch_val or "")

category_options = [config.ALL_CATEGORIES, *config.SHEET_URLS.keys()]
session.selected_category = st.selectbox(
    "2. หมวดหมู่ (Category)",
    category_options,
    format_func=lambda c: "แสดงทั้งหมด (All)" if c == config.ALL_CATEGORIES else c,
)

# starts empty, the operator confirms the receiving date before checking items
session.report_date = st.date_input("3. วันที่รับของ *", value=None, format="YYYY-MM-DD")
if not session.report_date:
    st.warning("⚠️ กรุณาระบุวันที่รับของ")

if not session.selected_branch:
    st.info("👈 เลือกสาขาเพื่อเริ่ม")
    st.stop()

items = session.filtered_items()
if not items:
    st.info("📭 ไม่พบข้อมูล")
    st.stop()

# -------------------------------------------------------------------
# Progress + checklist
# -------------------------------------------------------------------

progress = session.progress()
st.caption(f"ความคืบหน้าการตรวจรับ {progress.count}/{progress.total} ({progress.percent}%)")
st.progress(progress.percent / 100)

st.subheader(f"{session.selected_branch} · รวม {len(items)} รายการ")

if st.session_state["toggle_warning"]:
    st.warning(st.session_state["toggle_warning"])
    st.session_state["toggle_warning"] = None

for row in items:
    checked = session.store.is_checked(row.id)
    col_cat, col_item, col_qty, col_chk = st.columns([1, 4, 1, 1])
    col_cat.caption(short_category(row.category))
    col_item.write(f"~~{row.item}~~" if checked else row.item)
    col_qty.write(str(row.qty))

    # key follows the stored state; a refused toggle bumps the generation to reset the box
    new_val = col_chk.checkbox(
        "รับแล้ว",
        value=checked,
        key=f"chk_{row.id}_{int(checked)}_{st.session_state['checklist_gen']}",
        label_visibility="collapsed",
    )
    if new_val != checked:
        ok, msg = session.toggle(row.id)
        if not ok:
            st.session_state["toggle_warning"] = msg
            st.session_state["checklist_gen"] += 1
        st.rerun()

# -------------------------------------------------------------------
# Report section
# -------------------------------------------------------------------

st.divider()
mode = session.report_mode()
st.subheader(MODE_LABELS[mode])

if mode is not ReportMode.MISSING_ITEMS:
    defect_label = "↩️ ยกเลิกแจ้งชำรุด" if session.draft.defect_mode else "⚠️ พบสินค้าชำรุด?"
    if st.button(defect_label):
        session.draft.defect_mode = not session.draft.defect_mode
        st.rerun()

if mode is not ReportMode.COMPLETE:
    session.draft.note = st.text_area(
        "รายละเอียดปัญหา",
        placeholder="ระบุรายการที่หายไป หรือเสียหาย...",
        key="report_note",
    )

uploaded = st.file_uploader(
    "แนบรูปภาพ/วิดีโอ (จำเป็น, รวมไม่เกิน 3 ไฟล์)",
    type=["jpg", "jpeg", "png", "webp", "heic", "mp4", "mov", "webm"],
    accept_multiple_files=True,
    key=f"uploader_{st.session_state['uploader_gen']}",
)

files = [
    Attachment(filename=f.name, mime_type=guess_mime_type(f.name, f.type), content=f.getvalue())
    for f in (uploaded or [])
]
session.draft.attachments = []
try:
    add_attachments(session.draft, files)
except AttachmentLimitExceeded as e:
    st.error(e.message)

if session.draft.attachments:
    preview_cols = st.columns(len(session.draft.attachments))
    for col, attachment in zip(preview_cols, session.draft.attachments):
        if attachment.is_video:
            col.video(attachment.content)
        else:
            col.image(attachment.content, caption=attachment.filename)

submit_label = {
    ReportMode.MISSING_ITEMS: "🚀 ยืนยันและส่งรายงาน",
    ReportMode.DEFECT_REPORT: "🚀 ส่งรายงานความเสียหาย",
    ReportMode.COMPLETE: "✅ ยืนยันการรับของ (Submit All)",
}[mode]

if st.button(submit_label, type="primary", disabled=session.is_submitting):
    confirmation_dialog_submit(session, "submit_result")

missing_df = pd.DataFrame(
    [{"รายการ": it.item, "จำนวน": it.qty} for it in session.branch_items() if not session.store.is_checked(it.id)]
)
if not missing_df.empty:
    with st.expander(f"รายการที่ยังไม่ได้รับ ({len(missing_df)})"):
        st.dataframe(missing_df, hide_index=True)

st.caption("* ข้อมูลจะถูกบันทึกลง Google Sheet")
