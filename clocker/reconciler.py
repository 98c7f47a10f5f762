"""
Turns the day's timesheet entries into the current clock status.

Pure computation: the same entries and the same `now` always give the
same ClockStatus. Anomalies in the data are recorded on the status and
logged, never raised.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from clocker.bamboohr.types import CLOCK_ENTRY_TYPE, TimesheetEntry

logger = logging.getLogger(__name__)

# Tried in order: sub-second precision first, then whole seconds.
_TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
)
# strptime reads at most microseconds
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


class Anomaly(str, Enum):
    AMBIGUOUS_STATE = "ambiguous_state"
    FUTURE_START = "future_start"
    UNPARSABLE_START = "unparsable_start"


@dataclass(frozen=True)
class ParsedTimestamp:
    value: datetime


@dataclass(frozen=True)
class Unparsable:
    raw: Optional[str]


def parse_timestamp(raw: Optional[str]) -> Union[ParsedTimestamp, Unparsable]:
    """Parse an RFC 3339 timestamp with or without fractional seconds."""
    if not raw:
        return Unparsable(raw)
    text = _EXCESS_FRACTION.sub(r"\1", raw, count=1)
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return ParsedTimestamp(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return Unparsable(raw)


@dataclass(frozen=True)
class ClockStatus:
    """Derived clock state for one reconciliation cycle."""
    clocked_in_since: Optional[str]
    today_total_hours: float
    active_entry: Optional[TimesheetEntry]
    open_entry_count: int = 0
    anomalies: Tuple[Anomaly, ...] = ()

    @property
    def is_clocked_in(self) -> bool:
        return self.active_entry is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isClockedIn": self.is_clocked_in,
            "clockedInSince": self.clocked_in_since,
            "todayTotalHours": self.today_total_hours,
            "activeEntry": self.active_entry.model_dump() if self.active_entry else None,
            "openEntryCount": self.open_entry_count,
            "anomalies": [a.value for a in self.anomalies],
        }


def completed_hours(entries: Sequence[TimesheetEntry]) -> float:
    """Sum of recorded hours over clock entries; entries without hours count as zero."""
    total = 0.0
    for entry in entries:
        if entry.type == CLOCK_ENTRY_TYPE and entry.hours is not None:
            total += entry.hours
    return total


def compute(entries: Sequence[TimesheetEntry], now: datetime) -> ClockStatus:
    """
    Reconcile entries into a ClockStatus.

    The first open clock entry in service order is the active one. Its
    elapsed time is added to the completed hours, clamped at zero when the
    start lies in the future. A missing or unparsable start contributes
    nothing.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone aware")

    open_entries = [e for e in entries if e.is_active_clock_entry]
    active = open_entries[0] if open_entries else None
    anomalies = []

    if len(open_entries) > 1:
        logger.warning(
            f"{len(open_entries)} open clock entries returned, using entry {active.id}",
        )
        anomalies.append(Anomaly.AMBIGUOUS_STATE)

    total = completed_hours(entries)

    if active is not None:
        parsed = parse_timestamp(active.start)
        if isinstance(parsed, ParsedTimestamp):
            live_hours = (now - parsed.value).total_seconds() / 3600
            if live_hours < 0:
                logger.warning(f"Clock entry {active.id} starts in the future ({active.start}), clamping to 0")
                anomalies.append(Anomaly.FUTURE_START)
                live_hours = 0.0
            total += live_hours
        else:
            logger.warning(f"Clock entry {active.id} has unparsable start {parsed.raw!r}")
            anomalies.append(Anomaly.UNPARSABLE_START)

    return ClockStatus(
        clocked_in_since=active.start if active else None,
        today_total_hours=total,
        active_entry=active,
        open_entry_count=len(open_entries),
        anomalies=tuple(anomalies),
    )
