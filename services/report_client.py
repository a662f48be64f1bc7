# services/report_client.py
import logging
from typing import Any, Dict, List

import requests

import config
from domain.errors import DispatchFailed, SourceUnavailable
from domain.models import ReportPayload

logger = logging.getLogger(__name__)


class ReportClient:
    """
    Thin HTTP client for the Apps Script report store.

    POST sends a report, GET with action=getHistory returns earlier reports.
    The store gives no structured acknowledgment, so a POST that raises no
    transport error counts as delivered.
    """

    def __init__(
            self,
            script_url: str = config.SCRIPT_URL,
            *,
            session=None,
            timeout_seconds: float = config.HTTP_TIMEOUT,
            max_retries: int = config.HTTP_MAX_RETRIES,
    ):
        self.script_url = script_url
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries

    def post_report(self, payload: ReportPayload) -> None:
        if not self.script_url:
            raise DispatchFailed("POP_SCRIPT_URL is not configured")

        try:
            resp = self.session.post(
                self.script_url,
                json=payload.to_dict(),
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.error("Report for %s on %s not sent: %s", payload.branch, payload.date, e)
            raise DispatchFailed(str(e)) from e

        if not resp.ok:
            logger.warning(
                "Report store answered %s for %s on %s",
                resp.status_code,
                payload.branch,
                payload.date,
            )

        logger.info(
            'Report sent for "%s" on %s (%d images)',
            payload.branch,
            payload.date,
            len(payload.images),
        )

    def get_history(self, branch: str, report_date: str) -> List[Dict[str, Any]]:
        """
        All reports the store holds for (branch, date), oldest first.
        """
        if not self.script_url:
            raise SourceUnavailable("POP_SCRIPT_URL is not configured")

        params = {"action": "getHistory", "branch": branch, "date": report_date}
        last_error = None

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = self.session.get(self.script_url, params=params, timeout=self.timeout_seconds)
                resp.raise_for_status()
                data = resp.json()
                break
            except (requests.RequestException, ValueError) as e:
                last_error = e
                logger.warning("History query failed (%d/%d): %s", attempt, self.max_retries, e)
        else:
            logger.error("Giving up history query for %s on %s: %s", branch, report_date, last_error)
            raise SourceUnavailable(f"Cannot fetch history: {last_error}")

        if not isinstance(data, list):
            logger.warning("Unexpected history response type: %s", type(data).__name__)
            return []
        return [row for row in data if isinstance(row, dict)]
