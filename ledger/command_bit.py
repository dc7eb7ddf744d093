"""
Single command bit shared with the scanning device.

The dashboard sets it, the device polls it. Like the ledger it lives only in
memory and resets to 0 on restart.
"""
import logging
import threading

from .events import ValidationError

logger = logging.getLogger(__name__)


class DeviceCommandBit:
    """Holds one integer value, 0 or 1."""

    def __init__(self, initial: int = 0):
        self._validate(initial)
        self._value = initial
        self._lock = threading.Lock()

    @staticmethod
    def _validate(value):
        if isinstance(value, bool) or value not in (0, 1):
            raise ValidationError("status must be 0 or 1")

    def get(self) -> int:
        with self._lock:
            return self._value

    def set(self, value) -> int:
        self._validate(value)
        with self._lock:
            self._value = value
        logger.info(f"Device status updated to {value}")
        return value
