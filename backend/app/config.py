import os
from dataclasses import dataclass, field

from dotenv import load_dotenv


# ---------------------------
# Search tuning
# ---------------------------

# Below this age we ask for current trends, at/above it for all-time classics
AGE_CUTOFF = 25
YOUNG_AGE_CONTEXT = "tendencias actual"
CLASSIC_AGE_CONTEXT = "clasicos de todos los tiempos"

# Region bias appended to every query (Peru)
COUNTRY_PRIORITY_TERM = "Peruano OR Peruana"
OFFICIAL_CONTENT_SUFFIX = "official video OR lyrics"

# Extra headroom per search to make up for videos the player later rejects
MAX_RESULTS_PER_SEARCH = 15
MUSIC_CATEGORY_ID = "10"
VIDEO_DURATION = "medium"  # 4 to 20 minutes

YOUTUBE_SEARCH_LIST = "https://www.googleapis.com/youtube/v3/search"
SEARCH_TIMEOUT_SECONDS = 15

MIN_PARTICIPANT_AGE = 10

API_RATE_LIMIT_WINDOW_SECONDS = 60
API_RATE_LIMIT_MAX_REQUESTS = 30

DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]


def parse_cors_origins(raw: str | None) -> tuple[list[str], bool]:
    raw = (raw or "").strip()
    if not raw:
        return list(DEFAULT_CORS_ORIGINS), True
    if raw == "*":
        return ["*"], False
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        return list(DEFAULT_CORS_ORIGINS), True
    return origins, True


@dataclass(frozen=True)
class Settings:
    youtube_api_key: str
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    cors_credentials: bool = True


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def load_settings() -> Settings:
    """Read backend/.env and the process environment once, at startup."""
    load_dotenv()

    api_key = (os.getenv("YOUTUBE_API_KEY") or "").strip()
    if not api_key:
        raise RuntimeError("Missing YOUTUBE_API_KEY in backend/.env")

    cors_origins, cors_credentials = parse_cors_origins(os.getenv("CORS_ALLOWED_ORIGINS"))
    return Settings(
        youtube_api_key=api_key,
        host=os.getenv("PLAYLIST_API_HOST", "0.0.0.0"),
        port=_int_env("PLAYLIST_API_PORT", 5000),
        cors_origins=cors_origins,
        cors_credentials=cors_credentials,
    )
