# config.py
import os
from typing import Dict

from dotenv import load_dotenv

load_dotenv()

CATEGORY_BRAND = "RE-Brand"
CATEGORY_SYSTEM = "RE-System"
CATEGORY_SPECIAL = "Special-POP"
CATEGORY_EQUIPMENT = "Equipment-Order"
ALL_CATEGORIES = "all"

# Tracked categories, each exported from its own sheet tab as CSV
SHEET_URLS: Dict[str, str] = {
    CATEGORY_BRAND: os.getenv("POP_SHEET_BRAND_URL", ""),
    CATEGORY_SYSTEM: os.getenv("POP_SHEET_SYSTEM_URL", ""),
    CATEGORY_SPECIAL: os.getenv("POP_SHEET_SPECIAL_URL", ""),
}

ORDER_CATEGORIES = (CATEGORY_BRAND, CATEGORY_SYSTEM, CATEGORY_SPECIAL, CATEGORY_EQUIPMENT)

# Apps Script web app receiving reports and answering history queries
SCRIPT_URL: str = os.getenv("POP_SCRIPT_URL", "")

HTTP_TIMEOUT: float = float(os.getenv("POP_HTTP_TIMEOUT", "15"))
HTTP_MAX_RETRIES: int = int(os.getenv("POP_HTTP_MAX_RETRIES", "3"))

# "file" or "supabase"
STATE_BACKEND: str = os.getenv("POP_STATE_BACKEND", "file").lower()
STATE_FILE: str = os.getenv("POP_STATE_FILE", ".pop_state.json")
STATE_TABLE: str = os.getenv("POP_STATE_TABLE", "pop_check_state")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
