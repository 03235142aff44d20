"""Part-time (alba) board posting adapter."""

from __future__ import annotations

from typing import Any, Mapping

from ..schemas import BoardType
from .base import board_of, first_present, load_payload

WEEKDAYS = frozenset({"MON", "TUE", "WED", "THU", "FRI"})


class AlbaPostingAdapter:
    """Convert part-time posting payloads into JobConstraints fields.

    Field values are passed through unvalidated so that malformed postings
    surface as per-item errors at evaluation time.
    """

    board_type = BoardType.PART_TIME

    def can_handle(self, blob: bytes | str | Mapping[str, Any], metadata: dict[str, Any]) -> bool:
        board = metadata.get("boardType")
        if board:
            return str(board).upper() == self.board_type.value
        try:
            data = load_payload(blob)
        except ValueError:
            return False
        return board_of(data) == self.board_type.value

    def parse_posting(self, blob: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
        payload = load_payload(blob)
        return {
            "job_id": _stringify(first_present(payload, "jobId", "job_id")),
            "board_type": self.board_type,
            "allowed_visa_codes": first_present(
                payload, "allowedVisaCodes", "allowedVisas", "allowed_visa_codes", default=[]
            ),
            "weekly_hours": first_present(payload, "weeklyHours", "weekly_hours"),
            "industry_category": first_present(
                payload, "industryCategory", "industry_category", "jobCategoryCode"
            ),
            "requires_sponsorship": first_present(payload, "requiresSponsorship"),
            "has_weekday_shift": self._weekday_shift(payload),
            "is_depopulation_area": bool(first_present(payload, "isDepopulationArea", default=False)),
        }

    @staticmethod
    def _weekday_shift(payload: Mapping[str, Any]) -> bool | None:
        schedule = payload.get("schedule")
        if isinstance(schedule, list) and schedule:
            days = {
                str(item.get("dayOfWeek", "")).upper()
                for item in schedule
                if isinstance(item, Mapping)
            }
            return bool(days & WEEKDAYS)
        explicit = payload.get("hasWeekdayShift")
        if explicit is not None:
            return bool(explicit)
        weekend_only = payload.get("isWeekendOnly")
        if weekend_only is not None:
            return not weekend_only
        return None


def _stringify(value: Any) -> str | None:
    return str(value) if value is not None else None
