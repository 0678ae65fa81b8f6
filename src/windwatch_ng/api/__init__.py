"""
API clients for external services.
"""

from .nws_client import NWSClient, NWSClientError

__all__ = ["NWSClient", "NWSClientError"]
