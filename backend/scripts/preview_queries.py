from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from dotenv import load_dotenv

from backend.app.config import Settings
from backend.app.errors import ValidationError
from backend.app.services.aggregator import PlaylistAggregator
from backend.app.services.genres import AVAILABLE_GENRES, derive_queries
from backend.app.services.playlist_client import validate_participants


def validate_api_key(api_key: str) -> None:
    if not api_key:
        raise RuntimeError("YOUTUBE_API_KEY is required")
    # Most Google API keys begin with AIza and are 39 characters long.
    if not api_key.startswith("AIza") or len(api_key) < 35:
        raise RuntimeError("YOUTUBE_API_KEY format looks invalid (expected prefix 'AIza').")


def parse_participant(raw: str) -> dict:
    """``20:Trap,House`` -> {"age": 20, "genres": ["Trap", "House"]}"""
    age_part, sep, genres_part = raw.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected AGE:Genre[,Genre...], got {raw!r}")
    try:
        age = int(age_part.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"age must be a number, got {age_part!r}")
    genres = [genre.strip() for genre in genres_part.split(",") if genre.strip()]
    return {"age": age, "genres": genres}


def main() -> int:
    parser = argparse.ArgumentParser(description="Show (and optionally run) the YouTube searches for a group.")
    parser.add_argument(
        "--participant",
        "-p",
        action="append",
        type=parse_participant,
        default=[],
        help="AGE:Genre[,Genre...]; repeat once per person",
    )
    parser.add_argument("--run", action="store_true", help="Execute the searches against the YouTube API")
    parser.add_argument("--list-genres", action="store_true")
    args = parser.parse_args()

    if args.list_genres:
        for genre in AVAILABLE_GENRES:
            print(genre)
        return 0

    try:
        participants = validate_participants(args.participant)
    except ValidationError as exc:
        print(exc.message, file=sys.stderr)
        return 2

    queries = derive_queries(participants)
    print(f"{len(queries)} queries")
    for query in queries:
        print(f"  {query}")

    if not args.run:
        return 0

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")
    load_dotenv(ROOT_DIR / "backend" / ".env")
    api_key = os.getenv("YOUTUBE_API_KEY", "").strip()
    validate_api_key(api_key)

    playlist = PlaylistAggregator(Settings(youtube_api_key=api_key)).generate(participants)
    print(f"\nPlaylist ({len(playlist)} videos)")
    for video_id in playlist:
        print(f"  https://www.youtube.com/watch?v={video_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
