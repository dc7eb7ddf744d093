"""
Biometric event ledger.

This module provides:
- Timestamp normalization for epoch seconds, milliseconds and date strings
- A bounded, newest-first in-memory event history with duplicate suppression
- Active sign-in session tracking
- Daily and trailing 24 hour statistics
- The device command bit
"""

from .command_bit import DeviceCommandBit
from .event_ledger import EventLedger
from .events import ActiveSession, Event, EventAction, LedgerStatistics, ValidationError
from .timestamps import SECONDS_THRESHOLD, classify_timestamp, normalize_timestamp

__version__ = "1.0.0"

__all__ = [
    'ActiveSession',
    'DeviceCommandBit',
    'Event',
    'EventAction',
    'EventLedger',
    'LedgerStatistics',
    'SECONDS_THRESHOLD',
    'ValidationError',
    'classify_timestamp',
    'normalize_timestamp'
]
