"""Optimistic favorite toggle for a single song.

``FavoriteButton`` mirrors the heart control shown next to every song: it
flips its displayed state as soon as it is pressed, sends one request and then
either keeps the state the server confirmed or rolls the flip back.

Display states::

    UNKNOWN -> LOADING -> FAVORITED | NOT_FAVORITED
    FAVORITED <-> TOGGLING <-> NOT_FAVORITED

Each toggle also walks the optimistic phase ``IDLE -> PENDING -> SETTLED``
or ``PENDING -> REVERTED``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from sharedmelody.client.api_client import FavoritesApiClient, FavoritesClientError

logger = logging.getLogger(__name__)

LOGIN_REQUIRED_MESSAGE = "Debes iniciar sesión para agregar favoritos"


class DisplayState(str, Enum):
    UNKNOWN = "unknown"
    LOADING = "loading"
    FAVORITED = "favorited"
    NOT_FAVORITED = "not_favorited"
    TOGGLING = "toggling"


class OptimisticPhase(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SETTLED = "settled"
    REVERTED = "reverted"


def _state_for(is_favorite: bool | None) -> DisplayState:
    if is_favorite is None:
        return DisplayState.UNKNOWN
    return DisplayState.FAVORITED if is_favorite else DisplayState.NOT_FAVORITED


class FavoriteButton:
    def __init__(
        self,
        song_id: int,
        client: FavoritesApiClient,
        *,
        initial_favorite: bool | None = None,
        on_toggle: Callable[[bool], None] | None = None,
    ) -> None:
        self.song_id = song_id
        self._client = client
        self._on_toggle = on_toggle
        self.is_favorite = initial_favorite
        self.state = _state_for(initial_favorite)
        self.phase = OptimisticPhase.IDLE
        self.error: str | None = None
        self.loading = False

    @property
    def disabled(self) -> bool:
        return self.loading or not self._client.has_token

    async def load(self) -> DisplayState:
        """Fetch the server state for a button that has none yet."""

        if self.loading:
            return self.state
        if not self._client.has_token:
            self.is_favorite = False
            self.state = DisplayState.NOT_FAVORITED
            return self.state

        self.loading = True
        self.state = DisplayState.LOADING
        try:
            self.is_favorite = await self._client.is_liked(self.song_id)
            self.error = None
        except FavoritesClientError as exc:
            logger.info("Could not load favorite state of song %s: %s", self.song_id, exc.message)
            self.error = exc.message
        finally:
            self.loading = False
        self.state = _state_for(self.is_favorite)
        return self.state

    async def toggle(self) -> bool | None:
        """Flip the favorite state; returns the displayed state afterwards.

        Presses while a request is in flight are ignored. A button that does
        not know its state yet loads it first and stays put if that fails.
        """

        if self.loading:
            return self.is_favorite
        if not self._client.has_token:
            self.error = LOGIN_REQUIRED_MESSAGE
            return self.is_favorite
        if self.is_favorite is None:
            await self.load()
            if self.is_favorite is None:
                return None

        previous = self.is_favorite
        self.is_favorite = not previous
        self.state = DisplayState.TOGGLING
        self.phase = OptimisticPhase.PENDING
        self.error = None
        self.loading = True

        try:
            result = await self._client.toggle_like(self.song_id)
        except FavoritesClientError as exc:
            self.is_favorite = previous
            self.phase = OptimisticPhase.REVERTED
            self.error = exc.message
            logger.info("Reverted favorite toggle of song %s: %s", self.song_id, exc.message)
        else:
            self.is_favorite = result.is_favorite
            self.phase = OptimisticPhase.SETTLED
            if self._on_toggle is not None:
                self._on_toggle(result.is_favorite)
        finally:
            self.loading = False

        self.state = _state_for(self.is_favorite)
        return self.is_favorite
