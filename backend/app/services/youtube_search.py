from typing import Any

import requests

try:
    from backend.app.config import (
        MAX_RESULTS_PER_SEARCH,
        MUSIC_CATEGORY_ID,
        SEARCH_TIMEOUT_SECONDS,
        VIDEO_DURATION,
        YOUTUBE_SEARCH_LIST,
    )
    from backend.app.errors import ProviderQueryError, ProviderQuotaExceededError
except ModuleNotFoundError:
    from app.config import (
        MAX_RESULTS_PER_SEARCH,
        MUSIC_CATEGORY_ID,
        SEARCH_TIMEOUT_SECONDS,
        VIDEO_DURATION,
        YOUTUBE_SEARCH_LIST,
    )
    from app.errors import ProviderQueryError, ProviderQuotaExceededError


def build_search_params(api_key: str, query: str) -> dict[str, Any]:
    return {
        "key": api_key,
        "q": query,
        "part": "snippet",
        "type": "video",
        "videoCategoryId": MUSIC_CATEGORY_ID,
        "maxResults": MAX_RESULTS_PER_SEARCH,
        "videoDuration": VIDEO_DURATION,
    }


def _error_reason(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return ""
    error = payload.get("error") if isinstance(payload, dict) else None
    errors = (error or {}).get("errors") or []
    if errors and isinstance(errors[0], dict):
        return str(errors[0].get("reason") or "")
    return ""


def is_quota_response(response: requests.Response) -> bool:
    if response.status_code not in {403, 429}:
        return False
    lowered = response.text.lower()
    reason = _error_reason(response).lower()
    return (
        reason in {"quotaexceeded", "ratelimitexceeded", "dailylimitexceeded"}
        or "quotaexceeded" in lowered
        or "quota exceeded" in lowered
        or "youtube.quota" in lowered
    )


def youtube_search(api_key: str, query: str, timeout: int = SEARCH_TIMEOUT_SECONDS) -> list[str]:
    """
    Run one search.list call and return the video ids it carries, in response
    order. Items without an id (channels, playlists, stripped results) are
    skipped. Any transport, HTTP or shape problem becomes ProviderQueryError.
    """
    try:
        response = requests.get(
            YOUTUBE_SEARCH_LIST,
            params=build_search_params(api_key, query),
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise ProviderQueryError(query, f"YouTube is temporarily unavailable: {exc}") from exc

    if response.status_code != 200:
        if is_quota_response(response):
            raise ProviderQuotaExceededError(query, status_code=response.status_code)
        reason = _error_reason(response)
        raise ProviderQueryError(
            query,
            f"YouTube search returned {response.status_code}{f' ({reason})' if reason else ''}",
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderQueryError(query, "YouTube search returned invalid JSON") from exc

    items = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        raise ProviderQueryError(query, "YouTube search response has no items list")

    video_ids: list[str] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        ident = item.get("id")
        video_id = ident.get("videoId") if isinstance(ident, dict) else None
        if isinstance(video_id, str) and video_id:
            video_ids.append(video_id)
    return video_ids
