"""Utility modules for the biometric sign-in monitor."""
from .config import config, Config
from .logger import logger, LedgerLogger
__all__ = ['config', 'Config', 'logger', 'LedgerLogger']
