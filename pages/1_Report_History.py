import streamlit as st
import pandas as pd

from domain.errors import SourceUnavailable
from element_component import get_tracking_session
from services.doc_service import build_history_document, history_filename
from services.history_service import ITEMS_UNAVAILABLE, fetch_latest_history, snapshot_or_none, status_label

st.set_page_config(
    page_title="Report History",
    page_icon="🔍"
)

st.sidebar.header("🔍 Report History")

if "history_record" not in st.session_state:
    st.session_state["history_record"] = None

session = get_tracking_session()

# -------------------------------------------------------------------
# Search controls
# -------------------------------------------------------------------

branch = st.selectbox(
    "1. Select Branch",
    session.branches,
    index=None,
    placeholder="-- Please Select Branch --",
)
report_date = st.date_input("2. Date *")

if st.button("🔍 Search History"):
    st.session_state["history_record"] = None
    if not branch or not report_date:
        st.error("Please select branch and date before searching")
    else:
        try:
            with st.spinner("Fetching data..."):
                record = fetch_latest_history(session.client, branch, report_date)
        except SourceUnavailable as e:
            st.error(f"Error fetching history: {e}")
        else:
            if record is None:
                st.warning("No record found for this date")
            st.session_state["history_record"] = record

record = st.session_state["history_record"]

if record is None:
    st.info('Select branch and date, then press "Search History"')
    st.stop()

# -------------------------------------------------------------------
# Record
# -------------------------------------------------------------------

st.subheader("POP Receive Tracking Order")

col_left, col_right = st.columns(2)
col_left.markdown(f"**🏠 Branch:** {record.branch}")
col_left.markdown(f"**📦 Tracking No.:** {record.tracking_no or '-'}")
col_right.markdown(f"**📅 Date Checked:** {record.date}")

items = snapshot_or_none(record)
if items is None:
    st.error(ITEMS_UNAVAILABLE)
else:
    df = pd.DataFrame(
        [
            {"Category": it.category, "Item": it.item, "Qty": it.qty, "Status": status_label(it)}
            for it in items
        ]
    )
    st.dataframe(df, width='stretch', hide_index=True)

if record.has_missing:
    st.warning("⚠️ Missing Items / Reported Issues:")
    st.code(record.missing, language=None)

st.markdown(f"**📝 Note:** {record.note or '-'}")
st.caption(f"(Auto-saved on {record.date})")

st.download_button(
    "🖨️ Export DOCX / Print",
    data=build_history_document(record),
    file_name=history_filename(record),
    mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)
