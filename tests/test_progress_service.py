"""
Run with: pytest tests/test_progress_service.py -v
"""
import pytest

from domain.models import ProgressStats
from services.progress_service import compute_progress, round_half_up


class TestComputeProgress:
    def test_all_checked(self, item_factory):
        items = item_factory("Phuket", 5)
        checked = {i.id: True for i in items}
        assert compute_progress(items, checked) == ProgressStats(count=5, total=5, percent=100, is_complete=True)

    def test_partial(self, item_factory):
        items = item_factory("Phuket", 5)
        checked = {items[0].id: True, items[2].id: True, items[4].id: True}
        assert compute_progress(items, checked) == ProgressStats(count=3, total=5, percent=60, is_complete=False)

    def test_empty_set_is_not_complete(self):
        assert compute_progress([], {}) == ProgressStats(count=0, total=0, percent=0, is_complete=False)

    def test_checks_outside_the_set_ignored(self, item_factory):
        items = item_factory("Phuket", 2)
        checked = {"Chiang_Mai_Item_1": True, items[0].id: True}
        stats = compute_progress(items, checked)
        assert (stats.count, stats.total) == (1, 2)

    def test_false_entries_count_as_unchecked(self, item_factory):
        items = item_factory("Phuket", 2)
        checked = {items[0].id: False, items[1].id: True}
        assert compute_progress(items, checked).count == 1

    def test_percent_rounds(self, item_factory):
        items = item_factory("Phuket", 3)
        assert compute_progress(items, {items[0].id: True}).percent == 33
        assert compute_progress(items, {items[0].id: True, items[1].id: True}).percent == 67


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [(12.5, 13), (0.5, 1), (2.5, 3), (33.3, 33), (99.9, 100), (0.0, 0)],
    )
    def test_values(self, value, expected):
        assert round_half_up(value) == expected
