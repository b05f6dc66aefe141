from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..documents.totals import next_document_number

PROPOSAL_PREFIX = "ATSPL/Q"
PROPOSAL_SERIES = "076"
PROPOSAL_SEQ_WIDTH = 3
PROJECT_SEQ_WIDTH = 3


def proposal_prefix(day: date) -> str:
    """ATSPL/Q/MM/YYYY/076 for the month of `day`."""

    return f"{PROPOSAL_PREFIX}/{day.month:02d}/{day.year}/{PROPOSAL_SERIES}"


def next_proposal_id(day: date, last: Optional[str]) -> str:
    # Sequence restarts every month
    return next_document_number(proposal_prefix(day), last, PROPOSAL_SEQ_WIDTH)


def project_suffix(day: date) -> str:
    return f"-{day.month:02d}-{day.year}"


def next_project_id(day: date, existing: Iterable[str]) -> str:
    """NNN-MM-YYYY: one more than the highest serial used this month."""

    suffix = project_suffix(day)
    highest = 0
    for value in existing:
        if not value or not value.endswith(suffix):
            continue
        serial = value[: -len(suffix)]
        if serial.isdigit():
            highest = max(highest, int(serial))
    return f"{highest + 1:0{PROJECT_SEQ_WIDTH}d}{suffix}"
