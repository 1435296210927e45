"""
Shared API dependencies.

Reusable FastAPI dependencies for storage access.
"""

from app.services.media_storage import MediaStorage


def get_media_storage() -> MediaStorage:
    """Storage for uploaded media, configured from settings."""
    return MediaStorage()
