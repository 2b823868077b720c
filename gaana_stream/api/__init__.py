"""
Gaana API Layer.

This package handles all communication with the Gaana stream-url endpoint
and the CDN that serves HLS playlists.
"""

from .client import GaanaAPIClient, parse_lookup_response

__all__ = ["GaanaAPIClient", "parse_lookup_response"]
