import json

import pytest
import requests

import backend.app.services.youtube_search as search_module
from backend.app.errors import ProviderQueryError, ProviderQuotaExceededError
from backend.app.services.youtube_search import build_search_params, youtube_search


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_build_search_params_filters_music_medium_videos():
    params = build_search_params("KEY", "Trap tendencias actual")
    assert params == {
        "key": "KEY",
        "q": "Trap tendencias actual",
        "part": "snippet",
        "type": "video",
        "videoCategoryId": "10",
        "maxResults": 15,
        "videoDuration": "medium",
    }


def test_youtube_search_skips_items_without_video_id(monkeypatch):
    captured = {}

    def fake_get(url, params=None, timeout=None):
        captured.update(url=url, params=params, timeout=timeout)
        return FakeResponse(
            payload={
                "items": [
                    {"id": {"kind": "youtube#video", "videoId": "a"}},
                    {"id": {"kind": "youtube#video", "videoId": "b"}},
                    {"id": {"kind": "youtube#channel", "channelId": "UC1"}},
                    {"id": {"kind": "youtube#video", "videoId": "c"}},
                ]
            }
        )

    monkeypatch.setattr(search_module.requests, "get", fake_get)

    assert youtube_search("KEY", "Trap") == ["a", "b", "c"]
    assert captured["url"] == "https://www.googleapis.com/youtube/v3/search"
    assert captured["params"]["q"] == "Trap"
    assert captured["timeout"] == 15


def test_youtube_search_network_error(monkeypatch):
    def fake_get(*_args, **_kwargs):
        raise requests.ConnectionError("dns failure")

    monkeypatch.setattr(search_module.requests, "get", fake_get)

    with pytest.raises(ProviderQueryError) as excinfo:
        youtube_search("KEY", "Trap")
    assert excinfo.value.query == "Trap"


def test_youtube_search_quota_exceeded(monkeypatch):
    body = {"error": {"code": 403, "errors": [{"reason": "quotaExceeded"}], "message": "quota"}}
    monkeypatch.setattr(search_module.requests, "get", lambda *_a, **_k: FakeResponse(403, body))

    with pytest.raises(ProviderQuotaExceededError) as excinfo:
        youtube_search("KEY", "House")
    assert excinfo.value.status_code == 403


def test_youtube_search_other_http_error(monkeypatch):
    body = {"error": {"code": 400, "errors": [{"reason": "keyInvalid"}]}}
    monkeypatch.setattr(search_module.requests, "get", lambda *_a, **_k: FakeResponse(400, body))

    with pytest.raises(ProviderQueryError) as excinfo:
        youtube_search("KEY", "House")
    assert not isinstance(excinfo.value, ProviderQuotaExceededError)
    assert "keyInvalid" in excinfo.value.message


@pytest.mark.parametrize("payload", [None, {"kind": "youtube#searchListResponse"}, ["not", "a", "dict"]])
def test_youtube_search_malformed_body(monkeypatch, payload):
    monkeypatch.setattr(
        search_module.requests,
        "get",
        lambda *_a, **_k: FakeResponse(200, payload, text="<html>"),
    )
    with pytest.raises(ProviderQueryError):
        youtube_search("KEY", "Indie")
