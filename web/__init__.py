"""Polling dashboard for the biometric sign-in monitor."""
from .api_client import BiometricAPI, DashboardCache, format_duration
__all__ = ['BiometricAPI', 'DashboardCache', 'format_duration']
