"""
Run with: pytest tests/test_report_client.py -v
"""
from unittest.mock import MagicMock

import pytest
import requests

from domain.errors import DispatchFailed, SourceUnavailable
from domain.models import ReportPayload
from services.report_client import ReportClient

URL = "https://script.test/exec"


@pytest.fixture
def payload():
    return ReportPayload(
        branch="Phuket",
        date="2025-01-15",
        note="Received All (รับครบถ้วน)",
        images=["data:image/jpeg;base64,AAAA"],
        missingItems="-",
        items="[]",
    )


@pytest.fixture
def http():
    return MagicMock()


class TestPostReport:
    def test_posts_json_body(self, http, payload):
        client = ReportClient(URL, session=http, timeout_seconds=7)
        client.post_report(payload)

        http.post.assert_called_once_with(URL, json=payload.to_dict(), timeout=7)
        body = http.post.call_args.kwargs["json"]
        assert set(body) == {"branch", "date", "note", "images", "missingItems", "items"}

    def test_transport_error_raises(self, http, payload):
        http.post.side_effect = requests.ConnectionError("reset")
        with pytest.raises(DispatchFailed):
            ReportClient(URL, session=http).post_report(payload)

    def test_error_status_is_not_a_failure(self, http, payload):
        http.post.return_value = MagicMock(ok=False, status_code=500)
        ReportClient(URL, session=http).post_report(payload)
        assert http.post.call_count == 1

    def test_not_retried(self, http, payload):
        http.post.side_effect = requests.Timeout("slow")
        with pytest.raises(DispatchFailed):
            ReportClient(URL, session=http, max_retries=3).post_report(payload)
        assert http.post.call_count == 1

    def test_missing_url(self, http, payload):
        with pytest.raises(DispatchFailed):
            ReportClient("", session=http).post_report(payload)
        http.post.assert_not_called()


class TestGetHistory:
    def test_query_params(self, http):
        http.get.return_value.json.return_value = [{"branch": "Phuket"}, "junk"]
        rows = ReportClient(URL, session=http, timeout_seconds=7).get_history("Phuket", "2025-01-15")

        assert rows == [{"branch": "Phuket"}]
        http.get.assert_called_once_with(
            URL,
            params={"action": "getHistory", "branch": "Phuket", "date": "2025-01-15"},
            timeout=7,
        )

    def test_non_list_response(self, http):
        http.get.return_value.json.return_value = {"status": "error"}
        assert ReportClient(URL, session=http).get_history("Phuket", "2025-01-15") == []

    def test_retries_then_succeeds(self, http):
        ok = MagicMock()
        ok.json.return_value = []
        http.get.side_effect = [requests.ConnectionError("reset"), ok]

        assert ReportClient(URL, session=http, max_retries=3).get_history("Phuket", "2025-01-15") == []
        assert http.get.call_count == 2

    def test_invalid_json_exhausts_retries(self, http):
        http.get.return_value.json.side_effect = ValueError("not json")
        with pytest.raises(SourceUnavailable):
            ReportClient(URL, session=http, max_retries=2).get_history("Phuket", "2025-01-15")
        assert http.get.call_count == 2
