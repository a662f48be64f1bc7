# utils/barcode.py

import re
from pathlib import Path
from typing import Optional

from barcode import Code128
from barcode.writer import ImageWriter

# Folder to store generated barcode images
BARCODE_IMG_DIR = Path("barcodes")

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def can_encode(text: str) -> bool:
    """Code128 only covers printable ASCII."""
    return bool(text) and all(32 <= ord(c) < 127 for c in text)


def ensure_barcode_image(barcode_text: str, output_dir: Optional[Path] = None) -> str:
    """
    Generate a Code128 barcode image for `barcode_text` if it doesn't exist yet.
    Returns the path to the PNG file.
    """
    target_dir = Path(output_dir or BARCODE_IMG_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)

    filename = target_dir / f"{_UNSAFE_FILENAME_CHARS.sub('_', barcode_text)}.png"
    if filename.exists():
        return str(filename)

    # python-barcode appends '.png' itself
    code = Code128(barcode_text, writer=ImageWriter())
    full = Path(code.save(str(filename.with_suffix(""))))

    if full != filename and full.exists():
        full.rename(filename)

    return str(filename)
