"""Plain-text health summary for manual sharing (e.g. with a health worker).

The layout is fixed and meant for people, not machines: there is no schema
and callers should not parse it.
"""

from __future__ import annotations

from src.models.profile import LogEntry, UserProfile
from src.tracking.cycle_projector import CycleProjection
from src.tracking.date_math import NOT_AVAILABLE, pretty_format
from src.tracking.symptom_log import recent

RECENT_LOG_COUNT = 3


def _or_na(value: object) -> str:
    if value is None or value == "":
        return NOT_AVAILABLE
    return str(getattr(value, "value", value))


def _format_entry(entry: LogEntry) -> str:
    symptoms = ", ".join(entry.symptoms) or NOT_AVAILABLE
    return (
        f"- **{pretty_format(entry.date)}:**\n"
        f"  Mood: {_or_na(entry.mood)}\n"
        f"  Symptoms: {symptoms}\n"
        f"  Cravings: {_or_na(entry.cravings)}"
    )


def build_share_summary(profile: UserProfile, projection: CycleProjection | None) -> str:
    """Render the shareable summary for ``profile``.

    Projection-derived lines read ``N/A`` when there is no projection.
    """
    next_period = projection.next_period_start if projection else None
    fertile_start = projection.fertile_start if projection else None
    fertile_end = projection.fertile_end if projection else None

    entries = recent(profile.symptoms_log, RECENT_LOG_COUNT)
    logs = "\n\n".join(_format_entry(e) for e in entries) if entries else "No recent logs."

    lines = [
        "**Health Summary**",
        f"Age: {_or_na(profile.age)}",
        f"Average Cycle: {_or_na(profile.cycle_length)} days",
        f"Average Period: {_or_na(profile.period_length)} days",
        "",
        "**Current Cycle**",
        f"Last Period Start: {pretty_format(profile.last_period_date)}",
        f"Estimated Next Period: {pretty_format(next_period)}",
        f"Estimated Fertile Window: {pretty_format(fertile_start)} - {pretty_format(fertile_end)}",
        "",
        "**Recent Logs:**",
        logs,
    ]
    return "\n".join(lines)
