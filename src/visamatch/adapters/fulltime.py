"""Full-time (regular hiring) board posting adapter."""

from __future__ import annotations

from typing import Any, Mapping

from ..schemas import BoardType
from .base import board_of, first_present, load_payload


class FulltimePostingAdapter:
    """Convert full-time posting payloads into JobConstraints fields."""

    board_type = BoardType.FULL_TIME

    def can_handle(self, blob: bytes | str | Mapping[str, Any], metadata: dict[str, Any]) -> bool:
        board = metadata.get("boardType")
        if board:
            return str(board).upper() == self.board_type.value
        try:
            data = load_payload(blob)
        except ValueError:
            return False
        return board_of(data) in (None, self.board_type.value)

    def parse_posting(self, blob: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
        payload = load_payload(blob)
        job_id = first_present(payload, "jobId", "job_id")
        return {
            "job_id": str(job_id) if job_id is not None else None,
            "board_type": self.board_type,
            "allowed_visa_codes": first_present(
                payload, "allowedVisaCodes", "allowedVisas", "allowed_visa_codes", default=[]
            ),
            "weekly_hours": first_present(payload, "weeklyHours", "weekly_hours"),
            "industry_category": first_present(
                payload, "industryCategory", "industry_category", "jobCategoryCode"
            ),
            "requires_sponsorship": first_present(
                payload, "requiresSponsorship", "visaSponsorship", "requires_sponsorship"
            ),
            "has_weekday_shift": None,
            "is_depopulation_area": bool(first_present(payload, "isDepopulationArea", default=False)),
        }
