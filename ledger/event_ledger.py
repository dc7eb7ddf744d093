"""
In-memory ledger of biometric sign-in/sign-out events.

The ledger keeps a bounded, newest-first history of normalized events, an
index of names currently signed in, and derives statistics from whatever is
retained. State is volatile: a process restart discards everything.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional, Tuple

from .events import ActiveSession, Event, EventAction, LedgerStatistics, ValidationError
from .timestamps import current_millis, normalize_timestamp

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY = 100
DEFAULT_TOLERANCE_MS = 1000

DAY_MS = 24 * 60 * 60 * 1000


class EventLedger:
    """Bounded event history plus active-session index."""

    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY,
                 tolerance_ms: int = DEFAULT_TOLERANCE_MS):
        if max_history < 1:
            raise ValueError("max_history must be positive")
        if tolerance_ms < 0:
            raise ValueError("tolerance_ms must be non-negative")

        self.max_history = max_history
        self.tolerance_ms = tolerance_ms

        # Newest first
        self._history: List[Event] = []
        self._sessions: Dict[str, ActiveSession] = {}

        # Guards history and sessions as one unit
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)

    @property
    def size(self) -> int:
        return len(self)

    def ingest(self, raw: Mapping, now_ms: Optional[int] = None) -> Event:
        """
        Validate, normalize and record one device submission.

        Returns the stored event. A submission matching a retained event with
        the same name and action within the tolerance window is not recorded
        again; the already-stored event is returned instead.

        Raises:
            ValidationError: if name or action is missing or invalid.
        """
        event, _ = self.record(raw, now_ms)
        return event

    def record(self, raw: Mapping, now_ms: Optional[int] = None) -> Tuple[Event, bool]:
        """Like ingest, but also reports whether a new event was stored."""
        if not isinstance(raw, Mapping):
            raise ValidationError("Invalid data format. Expected an object with name, action, timestamp")

        name = raw.get('name')
        if name is None:
            raise ValidationError("Missing required field: name")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Invalid name. Must be a non-empty string")

        action = EventAction.parse(raw.get('action'))

        received_at = current_millis() if now_ms is None else now_ms
        candidate = Event(
            name=name,
            action=action,
            timestamp=normalize_timestamp(raw.get('timestamp'), received_at),
            received_at=received_at
        )

        with self._lock:
            existing = self._find_duplicate(candidate)
            if existing is not None:
                logger.debug(f"Duplicate submission ignored: {name} - {action.value}")
                return existing, False

            self._history.insert(0, candidate)

            if action is EventAction.SIGNED_IN:
                self._sessions[name] = ActiveSession(name=name, start_time=candidate.timestamp)
            else:
                self._sessions.pop(name, None)

            if len(self._history) > self.max_history:
                del self._history[self.max_history:]

        logger.debug(f"Recorded {name} - {action.value} at {candidate.timestamp}")
        return candidate, True

    def _find_duplicate(self, candidate: Event) -> Optional[Event]:
        for event in self._history:
            if candidate.is_duplicate_of(event, self.tolerance_ms):
                return event
        return None

    def list_recent(self) -> List[Event]:
        """Snapshot of the retained history, newest first."""
        with self._lock:
            return list(self._history)

    def latest(self) -> Optional[Event]:
        """Most recently ingested event, or None when empty."""
        with self._lock:
            return self._history[0] if self._history else None

    def active_sessions(self) -> Dict[str, ActiveSession]:
        """Snapshot of names currently signed in."""
        with self._lock:
            return dict(self._sessions)

    def statistics(self, as_of_ms: Optional[int] = None) -> LedgerStatistics:
        """
        Derive aggregates from the retained history.

        "Today" is the local calendar day containing ``as_of_ms``; the 24 hour
        window ends at ``as_of_ms``. Events already trimmed from the history
        are not counted anywhere.
        """
        if as_of_ms is None:
            as_of_ms = current_millis()

        as_of = datetime.fromtimestamp(as_of_ms / 1000)
        day_start = as_of.replace(hour=0, minute=0, second=0, microsecond=0)
        day_start_ms = int(day_start.timestamp() * 1000)
        day_end_ms = int((day_start + timedelta(days=1)).timestamp() * 1000)
        window_start_ms = as_of_ms - DAY_MS

        with self._lock:
            history = list(self._history)
            session_count = len(self._sessions)

        sign_ins = sign_outs = last_24h = 0
        for event in history:
            if day_start_ms <= event.timestamp < day_end_ms:
                if event.action is EventAction.SIGNED_IN:
                    sign_ins += 1
                else:
                    sign_outs += 1
            if window_start_ms <= event.timestamp <= as_of_ms:
                last_24h += 1

        return LedgerStatistics(
            total_entries=len(history),
            sign_ins_today=sign_ins,
            sign_outs_today=sign_outs,
            entries_last_24h=last_24h,
            active_sessions=session_count,
            as_of=as_of_ms
        )

    def clear(self) -> int:
        """Drop all history and sessions. Returns the number of events removed."""
        with self._lock:
            removed = len(self._history)
            self._history = []
            self._sessions = {}

        logger.debug(f"Cleared {removed} entries")
        return removed
