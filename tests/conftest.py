"""
Shared fixtures for the POP tracking tests.

Run with: pytest -v
"""
from datetime import date
from typing import List
from unittest.mock import MagicMock

import pytest

from domain.models import Attachment, CatalogItem
from services.checklist_store import ChecklistStore
from services.ingest_service import make_item_id
from services.report_client import ReportClient
from services.storage_service import InMemoryKeyValueStore

REPORT_DATE = date(2025, 1, 15)

BRAND_CSV = """\
POP Distribution,,,,,
Round 1/2025,,,,,
No.,List,Head Office,Bangkok Branch ,Chiang Mai,Total
1,Shelf Talker A,0,5,3,8
2,"Banner, large",1,2,0,3
,,0,1,1,2
Total,,1,8,4,13
Tracking,,TH123,TH456,TH789,
"""

SYSTEM_CSV = """\
No.,List,Head Office,bangkok-branch,Chiang Mai,Total
1,Price Rail,0,4,x,4
2,Total rails,0,4,4,8
"""


def make_items(branch: str, count: int, category: str = "RE-Brand") -> List[CatalogItem]:
    return [
        CatalogItem(
            id=make_item_id(branch, f"Item {i}"),
            branch=branch,
            category=category,
            item=f"Item {i}",
            qty=i,
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv):
    s = ChecklistStore(kv)
    s.load_all()
    return s


@pytest.fixture
def report_client():
    return MagicMock(spec=ReportClient)


@pytest.fixture
def photo():
    return Attachment(filename="shelf.jpg", mime_type="image/jpeg", content=b"\xff\xd8jpegdata")


@pytest.fixture
def report_date():
    return REPORT_DATE


@pytest.fixture
def item_factory():
    return make_items


@pytest.fixture
def brand_csv():
    return BRAND_CSV


@pytest.fixture
def system_csv():
    return SYSTEM_CSV
