"""
Day reports and customer feedback.
"""
from __future__ import annotations

from typing import Any

DAY_REPORTS = "day_reports"
FEEDBACK = "feedback"


class ReportMixin:
    """Mixin for reporting data."""

    def add_day_report(self, data: dict[str, Any]) -> str:
        return self.add_document(DAY_REPORTS, data)

    def get_day_reports(self, user_id: str) -> list[dict[str, Any]]:
        return self.find_documents(DAY_REPORTS, {"user_id": user_id})

    def add_feedback(self, data: dict[str, Any], feedback_id: str | None = None) -> str:
        return self.add_document(FEEDBACK, data, doc_id=feedback_id)
