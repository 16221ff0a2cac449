from __future__ import annotations

import os
import random
import sys
from pathlib import Path
from unittest.mock import patch

from starlette.requests import Request

ROOT_DIR = Path(__file__).resolve().parents[2]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("YOUTUBE_API_KEY", "AIzaSmokeTestKeyNotUsedForRealCalls00")

import backend.main as main_module
from backend.app.errors import ProviderQueryError, ValidationError
from backend.app.models import GeneratePlaylistRequest, Participant
from backend.app.services.playback import PlaybackController, PlayerState


def make_request(ip: str = "127.0.0.1") -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/generate-playlist",
            "headers": [],
            "client": (ip, 8000),
            "query_string": b"",
            "server": ("test", 80),
            "scheme": "http",
            "http_version": "1.1",
        }
    )


class SilentPlayer:
    def __init__(self) -> None:
        self.state = PlayerState.CUED

    def get_state(self) -> int:
        return self.state

    def play(self) -> None:
        self.state = PlayerState.PLAYING

    def pause(self) -> None:
        self.state = PlayerState.PAUSED

    def stop(self) -> None:
        self.state = PlayerState.ENDED


def assert_true(condition: bool, message: str) -> None:
    if not condition:
        raise AssertionError(message)


def reset_state() -> None:
    main_module.API_RATE_LIMIT_BUCKETS.clear()


def test_health() -> None:
    payload = main_module.health()
    assert_true(payload.get("ok") is True, "/health should return ok=true")


def test_generate_dedup() -> None:
    reset_state()
    call_count = {"search": 0}

    def fake_search(api_key: str, query: str) -> list[str]:
        _ = api_key
        call_count["search"] += 1
        if query.startswith("House"):
            raise ProviderQueryError(query, "simulated outage")
        return ["shared", f"{query[:4]}-1"]

    payload = GeneratePlaylistRequest(
        participants=[
            Participant(age=20, genres=["Trap", "House"]),
            Participant(age=44, genres=["Salsa Romántica"]),
        ]
    )
    with patch.object(main_module.aggregator, "_search", side_effect=fake_search):
        response = main_module.generate_playlist(payload, make_request())

    playlist = response["playlist"]
    assert_true(call_count["search"] == 3, "/api/generate-playlist should search once per genre per participant")
    assert_true(len(playlist) == len(set(playlist)), "playlist must not contain duplicates")
    assert_true(set(playlist) == {"shared", "Trap-1", "Sals-1"}, "failed search should be dropped silently")


def test_generate_validation() -> None:
    reset_state()
    with patch.object(main_module.aggregator, "_search", side_effect=AssertionError("no network")):
        try:
            main_module.generate_playlist(GeneratePlaylistRequest(participants=[]), make_request())
        except ValidationError:
            return
    raise AssertionError("empty participants should raise ValidationError")


def test_playback_exhaustion() -> None:
    controller = PlaybackController(rng=random.Random(0))
    controller.load(["a", "b", "c"])
    controller.attach_player(SilentPlayer())
    for _ in range(3):
        controller.on_media_error(error_code=150)
    assert_true(controller.exhausted, "controller should be exhausted after every video failed")
    assert_true(controller.error is not None, "exhausted controller should carry an error")


def run() -> int:
    checks = [
        ("health", test_health),
        ("generate dedup + failure isolation", test_generate_dedup),
        ("generate validation", test_generate_validation),
        ("playback exhaustion", test_playback_exhaustion),
    ]
    failures = []

    for check_name, check_fn in checks:
        try:
            check_fn()
            print(f"[PASS] {check_name}")
        except Exception as exc:  # pragma: no cover - smoke script output path
            failures.append((check_name, str(exc)))
            print(f"[FAIL] {check_name}: {exc}")

    if failures:
        print(f"\nSmoke checks failed: {len(failures)}")
        for check_name, message in failures:
            print(f"- {check_name}: {message}")
        return 1

    print("\nAll smoke checks passed.")
    return 0


if __name__ == "__main__":
    sys.exit(run())
