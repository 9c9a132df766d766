"""
Client-side event record shared by the grid, placement, and reminder modules.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


def parse_timestamp(val: str) -> datetime:
    """
    Parse an ISO-8601 timestamp from the API into an aware datetime.

    Raises:
        ValueError: If the string is not ISO-8601.
    """
    if val.endswith("Z"):
        val = val[:-1] + "+00:00"
    parsed = datetime.fromisoformat(val)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class CalendarEvent:
    id: int
    owner: int
    title: str
    date: datetime
    description: str = ""
    reminder_time: int = 0  # minutes before `date`
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CalendarEvent":
        """
        Build an event from the JSON object returned by the events service.
        """
        created = data.get("createdAt")
        return cls(
            id=data["id"],
            owner=data["owner"],
            title=data["title"],
            date=parse_timestamp(data["date"]),
            description=data.get("description") or "",
            reminder_time=int(data.get("reminderTime") or 0),
            created_at=parse_timestamp(created) if created else None,
        )
