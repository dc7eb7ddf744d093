"""
API client and display-side cache for the dashboard.
"""
import logging
from typing import Dict, List, Optional

import requests

from ledger import ActiveSession, Event, EventLedger, ValidationError
from utils.config import config

logger = logging.getLogger(__name__)

class BiometricAPI:
    """API client for the biometric sign-in server."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or config.dashboard.api_url).rstrip("/")
        self.timeout = timeout or config.dashboard.request_timeout
        self.session = requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Dict:
        try:
            response = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"{method} {path} failed: {e}")
            return {"error": str(e), "success": False}

    def health(self) -> Dict:
        """Get server health."""
        return self._request("GET", "/health")

    def get_entries(self) -> List[Dict]:
        """Get all retained entries, newest first."""
        return self._request("GET", "/api/data").get("data", [])

    def get_latest(self) -> Optional[Dict]:
        """Get the most recent entry."""
        return self._request("GET", "/api/data/latest").get("data")

    def get_statistics(self) -> Dict:
        """Get server statistics."""
        result = self._request("GET", "/api/stats")
        if "error" in result:
            return result
        return result.get("stats", {})

    def get_sessions(self) -> List[Dict]:
        """Get names currently signed in on the server."""
        return self._request("GET", "/api/sessions").get("sessions", [])

    def clear_entries(self) -> Dict:
        """Clear all server data. Irreversible."""
        return self._request("DELETE", "/api/data")

    def get_pi_status(self) -> Optional[int]:
        """Get the device command bit, or None if unavailable."""
        return self._request("GET", "/pi-status").get("status")

    def set_pi_status(self, value: int) -> Dict:
        """Set the device command bit."""
        return self._request("POST", "/pi-status", json={"status": value})


class DashboardCache:
    """
    Display-side copy of the server history.

    Uses its own, smaller ledger so that repeated polls of the same entries
    are absorbed by the duplicate window. Clearing it only clears the display.
    """

    def __init__(self, history_limit: Optional[int] = None, tolerance_ms: Optional[int] = None):
        self.ledger = EventLedger(
            max_history=history_limit or config.dashboard.history_limit,
            tolerance_ms=config.ledger.duplicate_tolerance_ms if tolerance_ms is None else tolerance_ms
        )

    def merge(self, entries: List[Dict]) -> int:
        """Merge server entries (newest first). Returns the number of new entries."""
        # Entries past the cache bound would evict newer ones and be re-added on every poll
        newest = entries[:self.ledger.max_history]

        added = 0
        for entry in reversed(newest):
            try:
                _, created = self.ledger.record({
                    'name': entry.get('name'),
                    'action': entry.get('action'),
                    'timestamp': entry.get('timestamp')
                })
            except ValidationError as e:
                logger.warning(f"Invalid data entry {entry}: {e}")
                continue
            if created:
                added += 1
        return added

    @property
    def history(self) -> List[Event]:
        return self.ledger.list_recent()

    @property
    def sessions(self) -> List[ActiveSession]:
        return sorted(self.ledger.active_sessions().values(), key=lambda s: s.start_time)

    def clear(self) -> int:
        return self.ledger.clear()


def format_duration(milliseconds: int) -> str:
    """Render a duration as '2h 5m', '3m 10s' or '42s'."""
    seconds = max(int(milliseconds), 0) // 1000
    minutes = seconds // 60
    hours = minutes // 60

    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    elif minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"
