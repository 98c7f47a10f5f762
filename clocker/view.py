"""
Status view model: the strings and flags a menu or status icon renders.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from clocker.config import settings
from clocker.reconciler import ParsedTimestamp, parse_timestamp
from clocker.service import ServiceSnapshot, ServiceState


@dataclass(frozen=True)
class StatusView:
    label: str
    toggle_label: str
    since: Optional[str]
    today_hours: Optional[str]
    attention: bool
    error: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "toggleLabel": self.toggle_label,
            "since": self.since,
            "todayHours": self.today_hours,
            "attention": self.attention,
            "error": self.error,
        }


def format_elapsed(start: str, now: datetime) -> str:
    """Elapsed time as "2h 5m" or "5m"; an unparsable start is shown as is."""
    parsed = parse_timestamp(start)
    if not isinstance(parsed, ParsedTimestamp):
        return start
    elapsed = max(int((now - parsed.value).total_seconds()), 0)
    hours, minutes = elapsed // 3600, (elapsed % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def needs_attention(
    is_clocked_in: bool,
    now: datetime,
    start_hour: Optional[int] = None,
    end_hour: Optional[int] = None,
) -> bool:
    """Clocked out during working hours, or still clocked in after them."""
    start_hour = settings.WORKDAY_START_HOUR if start_hour is None else start_hour
    end_hour = settings.WORKDAY_END_HOUR if end_hour is None else end_hour
    if not is_clocked_in:
        return start_hour <= now.hour < end_hour
    return now.hour >= end_hour


def build_view(snapshot: ServiceSnapshot, now: datetime) -> StatusView:
    """
    Render a snapshot. A degraded service keeps showing its last known
    status, with the error next to it.
    """
    error = snapshot.last_error.message if snapshot.last_error else None

    if snapshot.state is ServiceState.UNCONFIGURED:
        return StatusView(
            label="Not configured" if error else "Loading...",
            toggle_label="Set up",
            since=None,
            today_hours=None,
            attention=False,
            error=error,
        )

    status = snapshot.status
    if status is None:
        return StatusView(
            label="Error" if error else "Loading...",
            toggle_label="Toggle",
            since=None,
            today_hours=None,
            attention=error is not None,
            error=error,
        )

    since = None
    if status.is_clocked_in and status.clocked_in_since:
        since = format_elapsed(status.clocked_in_since, now)

    return StatusView(
        label="Clocked In" if status.is_clocked_in else "Clocked Out",
        toggle_label="Clock Out" if status.is_clocked_in else "Clock In",
        since=since,
        today_hours=f"{status.today_total_hours:.1f}",
        attention=needs_attention(status.is_clocked_in, now) or error is not None,
        error=error,
    )
