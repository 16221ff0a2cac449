import logging
import random
import threading
from enum import Enum, IntEnum
from typing import Callable, Protocol

try:
    from backend.app.errors import PlaybackExhaustedError
except ModuleNotFoundError:
    from app.errors import PlaybackExhaustedError


logger = logging.getLogger(__name__)

# Options handed to the embedded YouTube player
PLAYER_OPTIONS = {
    "autoplay": 1,
    "rel": 0,
    "controls": 1,
}


class PlayerState(IntEnum):
    """Values reported by the YouTube IFrame player's getPlayerState()."""

    UNSTARTED = -1
    ENDED = 0
    PLAYING = 1
    PAUSED = 2
    BUFFERING = 3
    CUED = 5


PLAYER_ERROR_CODES = {
    2: "invalid_parameter",
    5: "html5_error",
    100: "video_not_found",
    101: "embedding_not_allowed",
    150: "embedding_not_allowed",
}


class PlayerHandle(Protocol):
    def get_state(self) -> int: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def stop(self) -> None: ...


class ControllerStatus(str, Enum):
    IDLE = "idle"
    READY = "ready"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


CursorListener = Callable[[str, int, dict[str, int]], None]


def pick_random_index(length: int, avoid: int, rng: random.Random) -> int:
    """
    Uniform pick over range(length) that skips ``avoid``. A single-item list
    can only repeat itself, and an ``avoid`` outside the range excludes nothing.
    """
    if length <= 1:
        return 0
    if not 0 <= avoid < length:
        return rng.randrange(length)
    index = rng.randrange(length - 1)
    return index + 1 if index >= avoid else index


class PlaybackController:
    """
    Owns the playlist and the cursor. Nothing else mutates them.

    Forward motion is shuffled (next, natural end, error skip); only
    ``play_previous`` walks the list in order. Videos the player refuses are
    dropped for the rest of the session, and once none are left the controller
    parks in EXHAUSTED until a new playlist is loaded.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._playlist: list[str] = []
        self._cursor = 0
        self._player: PlayerHandle | None = None
        self._listeners: list[CursorListener] = []
        self.status = ControllerStatus.IDLE
        self.error: PlaybackExhaustedError | None = None

    # ---------------------------
    # Read-only views
    # ---------------------------

    @property
    def playlist(self) -> list[str]:
        return list(self._playlist)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current_video_id(self) -> str | None:
        if not self._playlist:
            return None
        return self._playlist[self._cursor]

    @property
    def player_options(self) -> dict[str, int]:
        return dict(PLAYER_OPTIONS)

    @property
    def is_playing(self) -> bool:
        if self._player is None:
            return False
        return self._player.get_state() == PlayerState.PLAYING

    @property
    def exhausted(self) -> bool:
        return self.status is ControllerStatus.EXHAUSTED

    def describe(self) -> str:
        if not self._playlist:
            return "Sin videos en la lista."
        return f"Reproduciendo video {self._cursor + 1} de {len(self._playlist)}."

    def subscribe(self, listener: CursorListener) -> None:
        """Register a callback fired with (video_id, index, player_options) whenever the cursor lands somewhere."""
        self._listeners.append(listener)

    # ---------------------------
    # Lifecycle
    # ---------------------------

    def load(self, playlist: list[str]) -> None:
        with self._lock:
            self._playlist = list(playlist)
            self._cursor = 0
            self._player = None
            self.error = None
            self.status = ControllerStatus.READY if self._playlist else ControllerStatus.IDLE
            logger.info("Loaded playlist with %d videos", len(self._playlist))
        self._notify()

    def attach_player(self, player: PlayerHandle) -> None:
        with self._lock:
            self._player = player
            if self.status is ControllerStatus.READY:
                self.status = ControllerStatus.ACTIVE

    # ---------------------------
    # Transport commands
    # ---------------------------

    def jump_to(self, index: int) -> None:
        with self._lock:
            if not 0 <= index < len(self._playlist):
                raise IndexError(f"index {index} outside playlist of {len(self._playlist)}")
            self._move_to(index, stop_current=True)
        self._notify()

    def play_previous(self) -> None:
        with self._lock:
            if not self._playlist:
                return
            length = len(self._playlist)
            self._move_to((self._cursor - 1 + length) % length, stop_current=True)
        self._notify()

    def play_next(self) -> None:
        with self._lock:
            if not self._playlist:
                return
            index = pick_random_index(len(self._playlist), self._cursor, self._rng)
            self._move_to(index, stop_current=True)
        self._notify()

    def toggle_play_pause(self) -> None:
        with self._lock:
            player = self._player
            if player is None:
                return
            if player.get_state() == PlayerState.PLAYING:
                player.pause()
            else:
                player.play()

    # ---------------------------
    # Player events
    # ---------------------------

    def on_media_end(self) -> None:
        with self._lock:
            if not self._playlist:
                return
            self._cursor = pick_random_index(len(self._playlist), self._cursor, self._rng)
        self._notify()

    def on_media_error(self, failing_id: str | None = None, error_code: int | None = None) -> None:
        with self._lock:
            if not self._playlist:
                return
            if failing_id is None:
                failing_id = self._playlist[self._cursor]
            elif failing_id not in self._playlist:
                logger.info("Ignoring error for %s, already removed from the playlist", failing_id)
                return
            logger.warning(
                "Video %s blocked or failed (%s); removing it and skipping ahead",
                failing_id,
                PLAYER_ERROR_CODES.get(error_code, error_code) if error_code is not None else "unknown",
            )
            remaining = [video_id for video_id in self._playlist if video_id != failing_id]
            self._playlist = remaining
            if not remaining:
                self._cursor = 0
                self.status = ControllerStatus.EXHAUSTED
                self.error = PlaybackExhaustedError()
                logger.warning("Every video in the playlist was rejected by the player")
                return
            self._cursor = pick_random_index(len(remaining), self._cursor, self._rng)
        self._notify()

    # ---------------------------
    # Internals
    # ---------------------------

    def _move_to(self, index: int, stop_current: bool) -> None:
        if stop_current and self._player is not None:
            self._player.stop()
        self._cursor = index

    def _notify(self) -> None:
        video_id = self.current_video_id
        if video_id is None:
            return
        for listener in list(self._listeners):
            listener(video_id, self._cursor, self.player_options)
