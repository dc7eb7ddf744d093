"""HTTP API for the biometric sign-in monitor."""
from .api_server import BiometricServer, create_app
__all__ = ['BiometricServer', 'create_app']
