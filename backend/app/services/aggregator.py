import logging
import random
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable

try:
    from backend.app.config import Settings
    from backend.app.errors import ProviderQueryError, ValidationError
    from backend.app.services.genres import derive_queries
    from backend.app.services.youtube_search import youtube_search
except ModuleNotFoundError:
    from app.config import Settings
    from app.errors import ProviderQueryError, ValidationError
    from app.services.genres import derive_queries
    from app.services.youtube_search import youtube_search


logger = logging.getLogger(__name__)

SearchFn = Callable[[str, str], list[str]]


def _genres_of(participant: Any) -> list[str]:
    if isinstance(participant, dict):
        return list(participant.get("genres") or [])
    return list(getattr(participant, "genres", None) or [])


def _require_participants(participants: list[Any] | None) -> None:
    if not participants:
        raise ValidationError("Se requiere al menos un participante.")
    for position, participant in enumerate(participants, start=1):
        if not _genres_of(participant):
            raise ValidationError(f"El participante #{position} necesita al menos un género.")


class PlaylistAggregator:
    """
    Fan a participant list out into YouTube searches and merge the hits.

    Every query gets its own worker, so all of them are in flight at once, and
    each fails on its own: a broken search is logged and dropped, it never takes
    the others down with it. The merged ids come back deduplicated and
    shuffled. An empty list is a normal answer.
    """

    def __init__(
        self,
        settings: Settings,
        search: SearchFn | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings
        self._search = search or youtube_search
        self._rng = rng or random.Random()

    def _run_query(self, query: str) -> list[str] | None:
        try:
            return self._search(self.settings.youtube_api_key, query)
        except ProviderQueryError as exc:
            logger.warning("Error searching for %r: %s", query, exc.message)
        except Exception:
            logger.exception("Unexpected failure searching for %r", query)
        return None

    def generate(self, participants: list[Any]) -> list[str]:
        _require_participants(participants)
        queries = derive_queries(participants)

        candidates: set[str] = set()
        candidates_lock = threading.Lock()

        def collect(query: str) -> bool:
            video_ids = self._run_query(query)
            if video_ids is None:
                return False
            with candidates_lock:
                candidates.update(video_ids)
            return True

        with ThreadPoolExecutor(max_workers=len(queries), thread_name_prefix="yt-search") as pool:
            futures = [pool.submit(collect, query) for query in queries]
            wait(futures)
        failed = sum(1 for future in futures if not future.result())

        playlist = list(candidates)
        self._rng.shuffle(playlist)

        if failed == len(queries):
            logger.warning("All %d searches failed; returning an empty playlist", len(queries))
        logger.info(
            "Generated playlist: %d participants, %d queries (%d failed), %d unique videos",
            len(participants),
            len(queries),
            failed,
            len(playlist),
        )
        return playlist
