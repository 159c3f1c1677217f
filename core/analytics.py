"""
Read-only statistics over the mission history.

Feeds the overview cards, the analytics view and the header clock. Nothing
here mutates the history; every function takes the mission tuple the
controller exposes.
"""

import re
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Sequence, Tuple

from core.telemetry import Mission, MissionStatus, SiteType

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)\s*(hours?|hrs?|minutes?|mins?|seconds?|secs?)", re.IGNORECASE)
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


@dataclass(frozen=True)
class OverviewStat:
    """One overview card on the dashboard."""
    id: str
    label: str
    value: str
    subtext: str


def parse_duration_seconds(text: str) -> float:
    """'22 mins' / '15 secs' / '1 hr 5 mins' -> seconds."""
    parts = _DURATION_PART.findall(text)
    if not parts:
        raise ValueError(f"Unrecognized duration: {text!r}")
    return sum(float(amount) * _UNIT_SECONDS[unit[0].lower()] for amount, unit in parts)


def _duration_or_zero(mission: Mission) -> float:
    try:
        return parse_duration_seconds(mission.duration)
    except ValueError:
        return 0.0


def format_total_duration(seconds: float) -> str:
    """Seconds -> '2h 05m' (or '45m' under an hour)."""
    minutes = int(round(seconds / 60.0))
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def status_counts(missions: Sequence[Mission]) -> Dict[MissionStatus, int]:
    counts = {status: 0 for status in MissionStatus}
    for m in missions:
        counts[m.status] += 1
    return counts


def site_breakdown(missions: Sequence[Mission]) -> Dict[SiteType, int]:
    """Detected breeding sites per site type across all missions."""
    counts = {site_type: 0 for site_type in SiteType}
    for m in missions:
        for site in m.detected_sites or ():
            counts[site.type] += 1
    return counts


def site_label_counts(missions: Sequence[Mission]) -> List[Tuple[str, int]]:
    """(object label, count) pairs, most frequent first."""
    counter = Counter(site.object for m in missions for site in (m.detected_sites or ()))
    return counter.most_common()


def compute_overview(missions: Sequence[Mission]) -> List[OverviewStat]:
    """Overview cards for the dashboard view."""
    total = len(missions)
    counts = status_counts(missions)
    completed = counts[MissionStatus.COMPLETED]
    interrupted = counts[MissionStatus.INTERRUPTED]
    success_rate = (100.0 * completed / total) if total else 0.0

    flight_seconds = sum(_duration_or_zero(m) for m in missions)
    average_minutes = (flight_seconds / 60.0 / total) if total else 0.0

    sites = site_breakdown(missions)
    site_total = sum(sites.values())

    return [
        OverviewStat("total-missions", "Total Missions", str(total),
                     f"{interrupted} interrupted"),
        OverviewStat("completed", "Completed", str(completed),
                     f"{success_rate:.0f}% success rate"),
        OverviewStat("flight-time", "Flight Time", format_total_duration(flight_seconds),
                     f"avg {average_minutes:.0f} mins per mission"),
        OverviewStat("breeding-sites", "Breeding Sites Detected", str(site_total),
                     f"{sites[SiteType.OPEN]} open, {sites[SiteType.ENCLOSED]} enclosed"),
    ]


def header_clock(now: datetime) -> Tuple[str, str]:
    """('10:42 AM', 'Monday, October 19, 2026') for the dashboard header."""
    time_text = f"{now:%I:%M %p}".lstrip("0")
    date_text = f"{now:%A}, {now:%B} {now.day}, {now.year}"
    return time_text, date_text
