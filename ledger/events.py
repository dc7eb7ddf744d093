"""
Event records for the biometric sign-in ledger.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class ValidationError(ValueError):
    """Raised when an incoming submission is malformed."""


class EventAction(Enum):
    """Sign-in or sign-out, keyed by the literal the device sends."""
    SIGNED_IN = "in"
    SIGNED_OUT = "out"

    @classmethod
    def parse(cls, value) -> "EventAction":
        """Resolve a device action literal, case-insensitively."""
        if value is None:
            raise ValidationError("Missing required field: action")
        if not isinstance(value, str):
            raise ValidationError(f'Invalid action: {value!r}. Must be "in" or "out"')

        literal = value.strip().lower()
        for action in cls:
            if action.value == literal:
                return action
        raise ValidationError(f'Invalid action: {value!r}. Must be "in" or "out"')


@dataclass(frozen=True)
class Event:
    """A normalized sign-in/sign-out record. Timestamps are epoch milliseconds."""
    name: str
    action: EventAction
    timestamp: int
    received_at: int

    @property
    def occurred_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000).astimezone()

    def identity(self, tolerance_ms: int) -> Tuple[str, EventAction, int]:
        """Dedup key with the timestamp bucketed by the tolerance window."""
        return (self.name, self.action, self.timestamp // max(tolerance_ms, 1))

    def is_duplicate_of(self, other: "Event", tolerance_ms: int) -> bool:
        return (
            self.name == other.name
            and self.action == other.action
            and abs(self.timestamp - other.timestamp) < tolerance_ms
        )

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'action': self.action.value,
            'timestamp': self.timestamp,
            'receivedAt': self.received_at
        }


@dataclass(frozen=True)
class ActiveSession:
    """A name currently signed in, with the time of its latest sign-in."""
    name: str
    start_time: int

    def duration_ms(self, now_ms: int) -> int:
        return max(now_ms - self.start_time, 0)

    def to_dict(self) -> Dict:
        return {'name': self.name, 'startTime': self.start_time}


@dataclass(frozen=True)
class LedgerStatistics:
    """Aggregates derived from the retained history at a point in time."""
    total_entries: int
    sign_ins_today: int
    sign_outs_today: int
    entries_last_24h: int
    active_sessions: int = 0
    as_of: Optional[int] = None

    def to_dict(self) -> Dict:
        return {
            'totalEntries': self.total_entries,
            'signInsToday': self.sign_ins_today,
            'signOutsToday': self.sign_outs_today,
            'entriesLast24h': self.entries_last_24h,
            'activeSessions': self.active_sessions
        }
