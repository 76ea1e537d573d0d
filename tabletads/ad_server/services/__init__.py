"""
Request-scoped services behind the edge endpoints.
"""

from tabletads.ad_server.services.impression_service import ImpressionService
from tabletads.ad_server.services.playlist_service import PlaylistService

__all__ = ["ImpressionService", "PlaylistService"]
