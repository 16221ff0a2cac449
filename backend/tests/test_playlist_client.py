import pytest
import requests

from backend.app.errors import EmptyResultError, TransportError, ValidationError
from backend.app.services.playback import ControllerStatus
from backend.app.services.playlist_client import PlaylistClient, validate_participants


class FakeResponse:
    def __init__(self, status_code: int, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.posts: list[dict] = []

    def post(self, url, json=None, timeout=None):
        self.posts.append({"url": url, "json": json, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


def test_validate_participants_normalises():
    cleaned = validate_participants([{"age": "30", "genres": ["Trap"], "id": 17}])
    assert cleaned == [{"age": 30, "genres": ["Trap"]}]


@pytest.mark.parametrize(
    "participants",
    [
        [],
        [{"age": 9, "genres": ["Trap"]}],
        [{"age": 25, "genres": []}],
        [{"age": None, "genres": ["Trap"]}],
        [{"age": 25, "genres": ["Polka"]}],
    ],
)
def test_validate_participants_rejects(participants):
    with pytest.raises(ValidationError):
        validate_participants(participants)


def test_invalid_participants_never_reach_the_server():
    session = FakeSession(FakeResponse(200, {"playlist": ["a"]}))
    client = PlaylistClient("http://api/generate", session=session)
    with pytest.raises(ValidationError):
        client.fetch_playlist([{"age": 8, "genres": ["Trap"]}])
    assert session.posts == []


def test_fetch_playlist_posts_participants():
    session = FakeSession(FakeResponse(200, {"playlist": ["a", "b"]}))
    client = PlaylistClient("http://api/generate", session=session, timeout=5)

    assert client.fetch_playlist([{"age": 20, "genres": ["Trap"]}]) == ["a", "b"]
    assert session.posts == [
        {
            "url": "http://api/generate",
            "json": {"participants": [{"age": 20, "genres": ["Trap"]}]},
            "timeout": 5,
        }
    ]


def test_empty_playlist_is_a_soft_error():
    client = PlaylistClient(session=FakeSession(FakeResponse(200, {"playlist": []})))
    with pytest.raises(EmptyResultError) as excinfo:
        client.fetch_playlist([{"age": 20, "genres": ["Trap"]}])
    assert "géneros más generales" in excinfo.value.message


def test_server_validation_message_is_kept():
    client = PlaylistClient(
        session=FakeSession(FakeResponse(400, {"message": "Se requiere al menos un participante."}))
    )
    with pytest.raises(ValidationError) as excinfo:
        client.fetch_playlist([{"age": 20, "genres": ["Trap"]}])
    assert excinfo.value.message == "Se requiere al menos un participante."


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.ConnectionError("refused")),
        FakeSession(FakeResponse(500, {"message": "boom"})),
        FakeSession(FakeResponse(200, None)),
        FakeSession(FakeResponse(200, {"playlist": "abc"})),
    ],
)
def test_transport_failures(session):
    client = PlaylistClient(session=session)
    with pytest.raises(TransportError):
        client.fetch_playlist([{"age": 20, "genres": ["Trap"]}])


def test_start_session_loads_controller():
    client = PlaylistClient(session=FakeSession(FakeResponse(200, {"playlist": ["a", "b", "c"]})))
    controller = client.start_session([{"age": 20, "genres": ["Trap"]}])
    assert controller.status is ControllerStatus.READY
    assert controller.playlist == ["a", "b", "c"]
    assert controller.cursor == 0
