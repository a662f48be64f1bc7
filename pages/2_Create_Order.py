import streamlit as st

import config
from domain.errors import ValidationFailed
from element_component import get_tracking_session
from services.catalog_service import unique_item_names
from services.order_form_service import build_order_workbook, count_ordered, order_filename

st.set_page_config(page_title="Create New Order", page_icon="🛒")
st.title("🛒 Create New Order")

session = get_tracking_session()

# -------------------------------------------------------------------
# Branch + category
# -------------------------------------------------------------------

if "order_quantities" not in st.session_state:
    st.session_state["order_quantities"] = {}


def _reset_quantities():
    st.session_state["order_quantities"] = {}


col_branch, col_category = st.columns(2)
with col_branch:
    branch = st.selectbox(
        "Branch",
        session.branches,
        index=None,
        placeholder="-- Select Branch --",
    )
with col_category:
    category = st.selectbox(
        "Category",
        config.ORDER_CATEGORIES,
        on_change=_reset_quantities,
    )

# -------------------------------------------------------------------
# Quantities per item
# -------------------------------------------------------------------

item_names = unique_item_names(session.catalog, category)
quantities = st.session_state["order_quantities"]

if not item_names:
    st.info("ไม่มีรายการสินค้าในหมวดนี้")

for name in item_names:
    col_item, col_qty = st.columns([4, 1])
    col_item.write(name)
    quantities[name] = col_qty.number_input(
        "Order Qty",
        min_value=0,
        step=1,
        value=int(quantities.get(name, 0)),
        key=f"order_{category}_{name}",
        label_visibility="collapsed",
    )

st.divider()
st.write(f"**Total Items:** {count_ordered(quantities)} รายการ")

if st.button("📥 Prepare Excel Form", type="primary"):
    try:
        buffer = build_order_workbook(branch or "", category, item_names, quantities)
    except ValidationFailed as e:
        st.error(e.message)
    else:
        st.download_button(
            "Download Excel",
            data=buffer,
            file_name=order_filename(branch, category),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
