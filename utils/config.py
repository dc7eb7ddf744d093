"""
Configuration settings for the biometric sign-in monitor.
Loaded from environment variables with validation and safe defaults.
"""
import os
import logging
from dataclasses import dataclass, field
from typing import List
from pathlib import Path

# Configure logging for config module
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@dataclass
class LedgerConfig:
    """Event ledger configuration."""
    max_history: int = 100
    duplicate_tolerance_ms: int = 1000  # same name/action closer than this is a duplicate

@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

@dataclass
class DashboardConfig:
    """Polling dashboard configuration."""
    api_url: str = "http://localhost:3000"
    refresh_interval: int = 3  # seconds
    history_limit: int = 50
    request_timeout: float = 5.0

@dataclass
class LoggingConfig:
    """Logging configuration."""
    log_level: str = "INFO"
    output_dir: str = "biometric_output"
    log_to_file: bool = True

class Config:
    """Main configuration class with validation."""

    def __init__(self):
        self.ledger = LedgerConfig()
        self.server = ServerConfig()
        self.dashboard = DashboardConfig()
        self.logging = LoggingConfig()

        # Load environment variables
        self._load_environment_variables()

        # Validate configuration
        self._validate_configuration()

        # Create necessary directories
        self._create_directories()

    def _load_int(self, env_name: str, default: int) -> int:
        """Read an integer environment variable, keeping the default when invalid."""
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Invalid value for {env_name}: {raw}, using default {default}")
            return default

    def _load_environment_variables(self):
        """Load configuration from environment variables."""
        # Ledger settings
        self.ledger.max_history = self._load_int("MAX_HISTORY", self.ledger.max_history)
        self.ledger.duplicate_tolerance_ms = self._load_int(
            "DUPLICATE_TOLERANCE_MS", self.ledger.duplicate_tolerance_ms
        )

        # Server settings
        self.server.host = os.getenv("HOST", self.server.host)
        self.server.port = self._load_int("PORT", self.server.port)

        origins = os.getenv("CORS_ORIGINS")
        if origins:
            self.server.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]

        # Dashboard settings
        self.dashboard.api_url = os.getenv("BIOMETRIC_API_URL", self.dashboard.api_url).rstrip("/")
        self.dashboard.refresh_interval = self._load_int("REFRESH_INTERVAL", self.dashboard.refresh_interval)
        self.dashboard.history_limit = self._load_int("DASHBOARD_HISTORY_LIMIT", self.dashboard.history_limit)

        try:
            self.dashboard.request_timeout = float(os.getenv("REQUEST_TIMEOUT", self.dashboard.request_timeout))
        except ValueError as e:
            logger.warning(f"Invalid request timeout, using default: {e}")

        # Logging
        log_level = os.getenv("LOG_LEVEL", self.logging.log_level).upper()
        if log_level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            self.logging.log_level = log_level
        else:
            logger.warning(f"Invalid log level: {log_level}, using default")

        self.logging.output_dir = os.getenv("OUTPUT_DIR", self.logging.output_dir)
        self.logging.log_to_file = os.getenv("LOG_TO_FILE", "true").lower() == "true"

    def _validate_configuration(self):
        """Validate configuration values."""
        errors = []

        if self.ledger.max_history < 1:
            errors.append("Ledger max history must be positive")

        if self.ledger.duplicate_tolerance_ms < 0:
            errors.append("Duplicate tolerance must be non-negative")

        if not 0 < self.server.port < 65536:
            errors.append("Server port must be between 1 and 65535")

        if self.dashboard.refresh_interval < 1:
            errors.append("Dashboard refresh interval must be at least 1 second")

        if self.dashboard.history_limit < 1:
            errors.append("Dashboard history limit must be positive")

        if self.dashboard.request_timeout <= 0:
            errors.append("Request timeout must be positive")

        if errors:
            error_msg = "Configuration validation errors:\n" + "\n".join(f"- {error}" for error in errors)
            logger.error(error_msg)
            raise ValueError(error_msg)

        logger.debug("Configuration validation passed")

    def _create_directories(self):
        """Create the log directory if file logging is enabled."""
        if not self.logging.log_to_file:
            return

        log_dir = Path(self.logging.output_dir) / "logs"
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created/verified directory: {log_dir}")
        except OSError as e:
            logger.warning(f"Could not create directory {log_dir}: {e}")

    def get_effective_config(self) -> dict:
        """Get complete effective configuration as dictionary."""
        return {
            'ledger': {
                'max_history': self.ledger.max_history,
                'duplicate_tolerance_ms': self.ledger.duplicate_tolerance_ms
            },
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'cors_origins': list(self.server.cors_origins)
            },
            'dashboard': {
                'api_url': self.dashboard.api_url,
                'refresh_interval': self.dashboard.refresh_interval,
                'history_limit': self.dashboard.history_limit,
                'request_timeout': self.dashboard.request_timeout
            },
            'logging': {
                'log_level': self.logging.log_level,
                'output_dir': self.logging.output_dir,
                'log_to_file': self.logging.log_to_file
            }
        }

    def update_ledger_config(self, **kwargs):
        """Update ledger configuration, skipping invalid values."""
        for key, value in kwargs.items():
            if not hasattr(self.ledger, key):
                logger.warning(f"Unknown ledger config key: {key}")
                continue

            if key == 'max_history' and value < 1:
                logger.warning(f"Invalid max history: {value}, skipping")
                continue
            elif key == 'duplicate_tolerance_ms' and value < 0:
                logger.warning(f"Invalid duplicate tolerance: {value}, skipping")
                continue

            setattr(self.ledger, key, value)
            logger.info(f"Updated ledger config: {key} = {value}")

# Global configuration instance
try:
    config = Config()
    logger.debug("Configuration initialized successfully")
except Exception as e:
    logger.error(f"Failed to initialize configuration: {e}")
    # Create minimal fallback configuration
    config = Config.__new__(Config)
    config.ledger = LedgerConfig()
    config.server = ServerConfig()
    config.dashboard = DashboardConfig()
    config.logging = LoggingConfig()
    logger.warning("Using fallback configuration")

def validate_config():
    """Validate current configuration."""
    try:
        config._validate_configuration()
        return True
    except ValueError as e:
        logger.error(f"Configuration validation failed: {e}")
        return False

def get_config_summary():
    """Get a summary of current configuration."""
    return {
        'max_history': config.ledger.max_history,
        'duplicate_tolerance_ms': config.ledger.duplicate_tolerance_ms,
        'server': f"{config.server.host}:{config.server.port}",
        'dashboard_api_url': config.dashboard.api_url,
        'refresh_interval': config.dashboard.refresh_interval,
        'logging_level': config.logging.log_level
    }
