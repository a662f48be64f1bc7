import streamlit as st
import pandas as pd

from domain.errors import StorageError
from domain.models import ReportMode
from services.checklist_store import ChecklistStore
from services.report_client import ReportClient
from services.storage_service import get_key_value_store
from services.tracking_service import TrackingSession

MODE_LABELS = {
    ReportMode.MISSING_ITEMS: "แจ้งปัญหา / ของไม่ครบ",
    ReportMode.DEFECT_REPORT: "รายงานสินค้าชำรุด/เสียหาย",
    ReportMode.COMPLETE: "ยืนยันการรับของครบถ้วน",
}


def get_tracking_session():
    """
    One TrackingSession per browser session, created and loaded on first use.
    """
    if "tracking_session" not in st.session_state:
        with st.spinner("กำลังเชื่อมต่อ..."):
            try:
                session = TrackingSession(ChecklistStore(get_key_value_store()), ReportClient())
                session.start()
            except StorageError as e:
                st.error(f"โหลดสถานะการตรวจรับไม่สำเร็จ: {e}")
                st.stop()
        st.session_state["tracking_session"] = session
    return st.session_state["tracking_session"]


@st.dialog("ยืนยันการส่งรายงาน")
def confirmation_dialog_submit(session, state_name):
    mode = session.report_mode()
    progress = session.progress()
    summary = {
        "สาขา": session.selected_branch,
        "วันที่": session.report_date.isoformat() if session.report_date else "-",
        "สถานะ": MODE_LABELS[mode],
        "ตรวจรับแล้ว": f"{progress.count}/{progress.total}",
        "ไฟล์แนบ": str(len(session.draft.attachments)),
    }
    df = pd.DataFrame(summary.items(), columns=["Key", "Value"])
    st.dataframe(df, hide_index=True)

    col_yes, col_no = st.columns(2)

    with col_yes:
        if st.button("ยืนยัน", type="primary", key="confirm_yes"):
            with st.spinner("กำลังส่งข้อมูลและไฟล์... (กรุณารอสักครู่ ห้ามปิดหน้าจอ)"):
                ok, msg = session.submit()
            st.session_state[state_name] = (ok, msg)
            st.rerun()
    with col_no:
        if st.button("ยกเลิก"):
            st.rerun()
