"""
Logging utilities for the biometric sign-in monitor.
Includes a separate ingest audit log and an async queue for routine messages.
"""
import logging
import json
from datetime import datetime
from typing import Dict, Optional
from pathlib import Path
import threading
import queue

class LedgerLogger:
    """Application logger with console/file output and an ingest audit trail."""

    def __init__(self, name: str = "biometric"):
        self.name = name
        self.logger = logging.getLogger(name)
        self._setup_logger()

        # Ingest audit logging
        self.ingest_logger = self._setup_ingest_logger()
        self.ingest_counts = {'accepted': 0, 'duplicate': 0, 'rejected': 0}
        self._counts_lock = threading.Lock()

        # Async logging queue for performance
        self.log_queue = queue.Queue(maxsize=1000)
        self.log_worker_thread = threading.Thread(target=self._log_worker, daemon=True)
        self.log_worker_thread.start()

        self.logger.debug("Logger initialized successfully")

    def _setup_logger(self):
        """Setup logging handlers."""
        # Import config here to avoid circular imports
        from utils.config import config
        log_level = getattr(logging, config.logging.log_level.upper(), logging.INFO)

        # Clear existing handlers to avoid duplicates
        self.logger.handlers.clear()
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # Console handler
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        self.logger.addHandler(console_handler)

        # File handler
        if config.logging.log_to_file:
            try:
                log_dir = Path(config.logging.output_dir) / "logs"
                log_dir.mkdir(parents=True, exist_ok=True)

                file_handler = logging.FileHandler(log_dir / "biometric.log", encoding='utf-8')
                file_handler.setFormatter(formatter)
                file_handler.setLevel(log_level)
                self.logger.addHandler(file_handler)
            except OSError as e:
                self.logger.warning(f"Could not setup file logging: {e}")

        # Prevent propagation to root logger
        self.logger.propagate = False

    def _setup_ingest_logger(self) -> Optional[logging.Logger]:
        """Setup separate logger for device submissions."""
        from utils.config import config
        if not config.logging.log_to_file:
            return None

        ingest_logger = logging.getLogger(f"{self.name}.ingest")
        ingest_logger.handlers.clear()
        ingest_logger.setLevel(logging.INFO)
        ingest_logger.propagate = False

        formatter = logging.Formatter(
            '%(asctime)s - INGEST - %(levelname)s - %(message)s'
        )

        try:
            log_file_path = Path(config.logging.output_dir) / "logs" / "ingest.log"
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            ingest_file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
            ingest_file_handler.setFormatter(formatter)
            ingest_logger.addHandler(ingest_file_handler)
        except OSError as e:
            self.logger.warning(f"Could not setup ingest file logging: {e}")
            return None

        return ingest_logger

    def _log_worker(self):
        """Background worker for async logging."""
        while True:
            try:
                log_entry = self.log_queue.get(timeout=1.0)
            except queue.Empty:
                continue

            if log_entry is None:  # Shutdown signal
                break

            level, message, kwargs = log_entry
            getattr(self.logger, level)(message, **kwargs)

    def _async_log(self, level: str, message: str, **kwargs):
        """Add log entry to async queue."""
        try:
            self.log_queue.put_nowait((level, message, kwargs))
        except queue.Full:
            # If queue is full, log synchronously
            getattr(self.logger, level)(message, **kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._async_log('debug', message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._async_log('info', message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._async_log('warning', message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message."""
        # Error messages are logged synchronously for immediate visibility
        self.logger.error(message, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self.logger.critical(message, **kwargs)

    def set_level(self, level_name: str):
        """Change the level of the logger and all of its handlers."""
        level = getattr(logging, level_name.upper(), logging.INFO)
        self.logger.setLevel(level)
        for handler in self.logger.handlers:
            handler.setLevel(level)

    def log_event(self, event_type: str, details: dict):
        """Log an application event with structured details."""
        timestamp = datetime.now().isoformat()
        message = f"EVENT: {event_type} | {json.dumps(details, default=str)} | {timestamp}"
        self.info(message)

    def _count(self, outcome: str):
        with self._counts_lock:
            self.ingest_counts[outcome] += 1

    def log_ingest_event(self, entry: Dict, duplicate: bool = False):
        """Record an accepted or duplicate submission in the ingest audit log."""
        outcome = 'duplicate' if duplicate else 'accepted'
        self._count(outcome)

        message = (f"Name: {entry.get('name')} | Action: {entry.get('action')} | "
                   f"Timestamp: {entry.get('timestamp')} | Outcome: {outcome.upper()}")
        if self.ingest_logger:
            self.ingest_logger.info(message)

        if not duplicate:
            self.info(f"New entry: {entry.get('name')} - {entry.get('action')}")

    def log_rejection(self, reason: str, payload=None):
        """Record a rejected submission."""
        self._count('rejected')

        message = f"Rejected: {reason}"
        if payload is not None:
            message += f" | Payload: {json.dumps(payload, default=str)}"
        if self.ingest_logger:
            self.ingest_logger.warning(message)
        self.warning(message)

    def get_log_statistics(self) -> Dict:
        """Get logging system statistics."""
        with self._counts_lock:
            counts = dict(self.ingest_counts)

        return {
            'ingest_counts': counts,
            'log_queue_size': self.log_queue.qsize(),
            'ingest_logging_enabled': self.ingest_logger is not None
        }

    def shutdown(self):
        """Graceful shutdown of logging system."""
        self.logger.info("Shutting down logger")

        # Signal log worker to stop
        self.log_queue.put(None)

        # Wait for log worker to finish
        if self.log_worker_thread.is_alive():
            self.log_worker_thread.join(timeout=5.0)

        for handler in self.logger.handlers:
            handler.flush()

# Global logger instance with fallback
try:
    logger = LedgerLogger()
except Exception as e:
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("biometric_fallback")
    logger.error(f"Failed to initialize logger: {e}")
