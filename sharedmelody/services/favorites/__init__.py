"""Favorites domain components split by responsibility.

This package isolates SQL access from row-to-schema conversions and from the
Redis cache wrappers so each piece can be tested on its own.
"""

from .analytics import FavoritesAnalytics
from .cache import FavoritesCache
from .persistence import FavoritesPersistence

__all__ = [
    "FavoritesAnalytics",
    "FavoritesCache",
    "FavoritesPersistence",
]
