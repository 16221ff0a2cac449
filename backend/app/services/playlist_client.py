import logging
import random
from typing import Any

import requests

try:
    from backend.app.config import MIN_PARTICIPANT_AGE
    from backend.app.errors import EmptyResultError, TransportError, ValidationError
    from backend.app.services.genres import AVAILABLE_GENRES
    from backend.app.services.playback import PlaybackController
except ModuleNotFoundError:
    from app.config import MIN_PARTICIPANT_AGE
    from app.errors import EmptyResultError, TransportError, ValidationError
    from app.services.genres import AVAILABLE_GENRES
    from app.services.playback import PlaybackController


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api/generate-playlist"
INVALID_PARTICIPANTS_MESSAGE = (
    "Asegúrate de que todos los participantes tengan una edad válida "
    f"(mínimo {MIN_PARTICIPANT_AGE}) y al menos un género seleccionado."
)


def validate_participants(participants: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Form-side check run before anything goes over the wire. Returns the
    participants normalised to plain ``{"age", "genres"}`` dicts.
    """
    if not participants:
        raise ValidationError("Se requiere al menos un participante.")

    cleaned: list[dict[str, Any]] = []
    for participant in participants:
        try:
            age = int(participant.get("age"))
        except (TypeError, ValueError):
            raise ValidationError(INVALID_PARTICIPANTS_MESSAGE)
        genres = list(participant.get("genres") or [])
        if age < MIN_PARTICIPANT_AGE or not genres:
            raise ValidationError(INVALID_PARTICIPANTS_MESSAGE)
        unknown = [genre for genre in genres if genre not in AVAILABLE_GENRES]
        if unknown:
            raise ValidationError(f"Género no disponible: {', '.join(unknown)}")
        cleaned.append({"age": age, "genres": genres})
    return cleaned


class PlaylistClient:
    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
        timeout: int = 60,
    ):
        self.api_url = api_url
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_playlist(self, participants: list[dict[str, Any]]) -> list[str]:
        body = {"participants": validate_participants(participants)}
        try:
            response = self.session.post(self.api_url, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Playlist request to %s failed: %s", self.api_url, exc)
            raise TransportError() from exc

        if response.status_code == 400:
            try:
                message = (response.json() or {}).get("message")
            except ValueError:
                message = None
            raise ValidationError(message)
        if response.status_code != 200:
            logger.warning("Playlist server answered %s", response.status_code)
            raise TransportError()

        try:
            playlist = response.json().get("playlist")
        except (ValueError, AttributeError) as exc:
            raise TransportError() from exc
        if not isinstance(playlist, list):
            raise TransportError()

        playlist = [video_id for video_id in playlist if isinstance(video_id, str) and video_id]
        if not playlist:
            raise EmptyResultError()
        return playlist

    def start_session(
        self,
        participants: list[dict[str, Any]],
        rng: random.Random | None = None,
    ) -> PlaybackController:
        controller = PlaybackController(rng=rng)
        controller.load(self.fetch_playlist(participants))
        return controller
