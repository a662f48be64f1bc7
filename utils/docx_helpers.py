from typing import List

from docx.document import Document
from docx.table import Table


def add_label_value(doc: Document, label: str, value: str) -> None:
    """
    Add a "Label: value" paragraph with the label in bold.
    """
    p = doc.add_paragraph()
    p.add_run(f"{label} ").bold = True
    p.add_run(value)


def add_table(doc: Document, headers: List[str], rows: List[List[str]], style: str = "Table Grid") -> Table:
    """
    Add a table with a bold header row followed by `rows`.
    """
    table = doc.add_table(rows=1, cols=len(headers))
    table.style = style

    for cell, header in zip(table.rows[0].cells, headers):
        cell.text = ""
        cell.paragraphs[0].add_run(header).bold = True

    for values in rows:
        cells = table.add_row().cells
        for cell, value in zip(cells, values):
            cell.text = value

    return table
