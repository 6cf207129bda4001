"""Daily symptom/mood/craving log kept inside the profile document.

The log is an ordered array on the profile.  Saving a day replaces any
existing entry for that date and appends the new one, then writes the
entire array back — never a partial update of one entry.  At most one
entry per date is guaranteed by this write path alone; two writers saving
the same day concurrently race and the last one wins.

A failed write is reported as ``SaveStatus.failed`` and is not retried;
the caller decides whether to offer a manual retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from src.models.profile import LogEntry, UserProfile
from src.services.profile_store import ProfileNotFoundError, ProfileStore, ProfileStoreError

logger = logging.getLogger("cyclecare.tracking.symptom_log")

LOG_FIELD = "symptomsLog"


class SaveStatus(str, Enum):
    saved = "saved"
    failed = "failed"


@dataclass
class SaveResult:
    """Outcome of an upsert.

    Attributes:
        status:  saved / failed.
        entries: The merged log that was (or would have been) written.
        error:   Failure message when status is failed.
    """

    status: SaveStatus
    entries: list[LogEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is SaveStatus.saved


def merge(log: list[LogEntry], entry: LogEntry) -> list[LogEntry]:
    """Drop any entry sharing ``entry.date`` and append ``entry``.  Pure."""
    merged = [e for e in log if e.date != entry.date]
    merged.append(entry)
    return merged


def entry_for(log: list[LogEntry], day: date) -> LogEntry:
    """The logged entry for ``day``, or an empty one if nothing was saved."""
    for entry in log:
        if entry.date == day:
            return entry
    return LogEntry(date=day)


def recent(log: list[LogEntry], count: int = 3) -> list[LogEntry]:
    """The last ``count`` entries in log order."""
    if count <= 0:
        return []
    return log[-count:]


class SymptomLogStore:
    """Upsert day entries into a user's profile log."""

    def __init__(self, store: ProfileStore) -> None:
        self._store = store

    async def upsert(self, user_id: str, profile: UserProfile, entry: LogEntry) -> SaveResult:
        """Merge ``entry`` into ``profile.symptoms_log`` and persist the whole array.

        ``profile`` is the caller's current copy; it is not mutated.  On
        success the returned entries are the new log.

        Raises:
            ProfileNotFoundError: If the user has no profile document yet.
        """
        merged = merge(profile.symptoms_log, entry)
        document_value = [e.model_dump(mode="json", by_alias=True) for e in merged]
        try:
            await self._store.replace_field(user_id, LOG_FIELD, document_value)
        except ProfileNotFoundError:
            raise
        except ProfileStoreError as exc:
            logger.error("Saving log for %s failed for user %s: %s", entry.date, user_id, exc)
            return SaveResult(status=SaveStatus.failed, entries=merged, error=str(exc))

        logger.info("Saved log entry for %s (user %s, %d entries)", entry.date, user_id, len(merged))
        return SaveResult(status=SaveStatus.saved, entries=merged)
