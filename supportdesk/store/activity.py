from __future__ import annotations

import logging

from supportdesk.domain import Activity, ActivityType

from .tables import EntityTables, short_id

logger = logging.getLogger(__name__)


class ActivityRecorder:
    """Append-only audit feed fed by the other store components."""

    def __init__(self, tables: EntityTables) -> None:
        self._tables = tables

    def record(
        self,
        type: ActivityType,
        description: str,
        user_id: str,
        ticket_id: str | None = None,
    ) -> Activity:
        activity = Activity(
            id=short_id("act"),
            type=type,
            description=description,
            user_id=user_id,
            ticket_id=ticket_id,
            created_at=self._tables.now(),
        )
        self._tables.activities[activity.id] = activity
        logger.debug("Recorded %s activity %s", type.value, activity.id)
        return activity

    def recent(self, limit: int | None = None) -> list[Activity]:
        """Return activities most recent first, by append order."""

        ordered = list(reversed(self._tables.activities.values()))
        if limit is not None:
            return ordered[:limit]
        return ordered
