"""Client-side helpers driving the favorites API."""

from .api_client import FavoritesApiClient, FavoritesClientError
from .favorite_button import DisplayState, FavoriteButton, OptimisticPhase

__all__ = [
    "DisplayState",
    "FavoriteButton",
    "FavoritesApiClient",
    "FavoritesClientError",
    "OptimisticPhase",
]
