"""
Order form export.

Staff pick quantities for the items of one category and download an .xlsx
order form for their branch. Layout:

    ใบสั่งซื้อสินค้า (Order Form)
    สาขา (Branch):       <branch>
    ประเภท (Category):   <category>
    วันที่ (Date):        dd/mm/yyyy
    <blank>
    Item Name (รายการ) | Quantity (จำนวน) | Status
    ...one row per item with quantity > 0, status "Pending"
"""

from datetime import date
from io import BytesIO
from typing import Dict, List, Mapping, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Font

from domain.errors import ValidationFailed

ORDER_SHEET_TITLE = "Order"
ORDER_TABLE_HEADER = ["Item Name (รายการ)", "Quantity (จำนวน)", "Status"]
ORDER_STATUS = "Pending"
COLUMN_WIDTHS = {"A": 50, "B": 15, "C": 20}


def order_lines(item_names: List[str], quantities: Mapping[str, int]) -> List[Tuple[str, int]]:
    """(item, qty) for every item with a positive quantity, in item order."""
    return [(name, int(quantities.get(name) or 0)) for name in item_names if (quantities.get(name) or 0) > 0]


def order_filename(branch: str, category: str) -> str:
    return f"Order_{branch}_{category}.xlsx"


def build_order_workbook(
        branch: str,
        category: str,
        item_names: List[str],
        quantities: Mapping[str, int],
        order_date: Optional[date] = None,
) -> BytesIO:
    """
    Returns:
        BytesIO buffer containing the Excel file
    """
    if not branch:
        raise ValidationFailed("branch_required", "กรุณาเลือกสาขาก่อน Export")

    lines = order_lines(item_names, quantities)
    if not lines:
        raise ValidationFailed("order_empty", "กรุณาใส่จำนวนสินค้าอย่างน้อย 1 รายการ")

    order_date = order_date or date.today()

    wb = Workbook()
    ws = wb.active
    ws.title = ORDER_SHEET_TITLE

    ws.append(["ใบสั่งซื้อสินค้า (Order Form)"])
    ws["A1"].font = Font(bold=True, size=14)
    ws.append(["สาขา (Branch):", branch])
    ws.append(["ประเภท (Category):", category])
    ws.append(["วันที่ (Date):", order_date.strftime("%d/%m/%Y")])
    ws.append([])

    ws.append(ORDER_TABLE_HEADER)
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)

    for name, qty in lines:
        ws.append([name, qty, ORDER_STATUS])

    for col, width in COLUMN_WIDTHS.items():
        ws.column_dimensions[col].width = width

    buffer = BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer


def count_ordered(quantities: Dict[str, int]) -> int:
    return sum(1 for q in quantities.values() if q and q > 0)
