import json

import pytest

from recipetree.client import SearchBackendClient
from webapp import create_app
from webapp.config import Config
from webapp.services.sse import channels


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.ok = status_code < 400

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(params)
        return self.response


class ExplodingClient:
    def search(self, *args, **kwargs):
        raise RuntimeError("search exploded")


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        DEBUG = False
        LOG_DIR = tmp_path / "logs"
        MOVIE_CACHE_SIZE = 4

    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


def _use_backend(app, status_code, payload):
    session = FakeSession(FakeResponse(status_code, payload))
    app.extensions["search_client"] = SearchBackendClient("http://search.local", session=session)
    return session


def test_about(client):
    response = client.get("/about")
    assert response.status_code == 200
    assert "about" in response.get_json()


def test_recipe_tree(client, raw_sample_steps):
    response = client.post("/recipe/tree", json={"steps": raw_sample_steps, "mode": "dfs"})
    assert response.status_code == 200

    data = response.get_json()
    assert data["strategy"] == "dfs"
    assert data["root"] == "Brick-2-0-0"
    assert {n["data"]["label"] for n in data["nodes"]} == {"Earth", "Water", "Mud", "Fire", "Brick"}
    assert data["frames"][0]["nodes"] == ["Earth-0-2-0", "Water-0-2-0", "Mud-1-1-0"]
    assert data["basePreview"] is False


def test_recipe_tree_accepts_bare_list_and_search_response(client, app, raw_sample_steps):
    bare = client.post("/recipe/tree", json=raw_sample_steps)
    assert bare.status_code == 200
    assert bare.get_json()["stepCount"] == 2

    response = client.post(
        "/recipe/tree",
        json={"found": True, "paths": [raw_sample_steps, raw_sample_steps[:1]], "pathIndex": 1},
    )
    assert response.status_code == 200
    assert response.get_json()["root"] == "Mud-1-0-0"

    assert len(app.extensions["recipe_movies"]) == 2


def test_recipe_tree_with_base_preview(client, raw_sample_steps):
    response = client.post("/recipe/tree", json={"steps": raw_sample_steps, "basePreview": True})
    data = response.get_json()

    assert data["basePreview"] is True
    assert data["frames"][0]["edges"] == []


def test_recipe_tree_empty_steps(client):
    response = client.post("/recipe/tree", json={"steps": []})
    assert response.status_code == 200
    assert response.get_json()["nodes"] == []


@pytest.mark.parametrize(
    "kwargs",
    [
        {"json": {"steps": [{"ingredients": ["Earth"], "result": "Mud"}]}},
        {"json": {"mode": "bfs"}},
        {"json": {"found": True, "paths": [[]], "pathIndex": 3}},
        {"data": "Earth + Water", "content_type": "text/plain"},
    ],
)
def test_recipe_tree_bad_requests(client, kwargs):
    response = client.post("/recipe/tree", **kwargs)
    assert response.status_code == 400
    assert response.get_json()["status"] == 400


def test_search_success(client, app, raw_sample_steps):
    session = _use_backend(
        app, 200, {"found": True, "paths": [raw_sample_steps], "steps": 14, "executionTime": 2.0}
    )

    response = client.get("/search?element=Brick&mode=dfs&maxRecipes=2")
    assert response.status_code == 200
    assert session.calls == [{"element": "brick", "mode": "dfs", "maxRecipes": 2}]

    data = response.get_json()
    assert data["search"]["found"] is True
    assert data["search"]["steps"] == 14
    assert data["movie"]["strategy"] == "dfs"
    assert data["movie"]["root"] == "Brick-2-0-0"


def test_search_not_found(client, app):
    _use_backend(app, 404, {"found": False})

    response = client.get("/search?element=unobtainium")
    assert response.status_code == 200
    assert response.get_json() == {
        "search": {"found": False, "steps": 0, "executionTime": 0.0, "paths": []},
        "movie": None,
    }


def test_search_backend_failure_is_bad_gateway(client, app):
    _use_backend(app, 503, None)

    response = client.get("/search?element=brick")
    assert response.status_code == 502
    assert response.get_json()["error"] == "HTTP error! status: 503"


@pytest.mark.parametrize(
    "query", ["", "?element=", "?element=brick&mode=astar", "?element=brick&maxRecipes=0"]
)
def test_search_bad_requests(client, query):
    response = client.get(f"/search{query}")
    assert response.status_code == 400


def test_unexpected_errors_become_500(client, app):
    app.extensions["search_client"] = ExplodingClient()

    response = client.get("/search?element=brick")
    assert response.status_code == 500
    assert response.get_json() == {"error": "search exploded", "status": 500}


def test_playback_round_trip(client, raw_sample_steps):
    response = client.post(
        "/recipe/playback",
        json={"steps": raw_sample_steps, "autoplay": False, "intervalMs": 500},
    )
    assert response.status_code == 200
    data = response.get_json()
    channel_id = data["channel_id"]
    assert data["stream_url"] == f"/stream/playback/{channel_id}"
    assert data["playback"]["interval_ms"] == 500
    assert data["movie"]["stepCount"] == 2

    step = client.post(f"/recipe/playback/{channel_id}/step-forward")
    assert step.status_code == 200
    assert step.get_json()["cursor"] == 1
    assert step.get_json()["state"] == "paused"

    bad = client.post(f"/recipe/playback/{channel_id}/rewind")
    assert bad.status_code == 400

    seek = client.post(f"/recipe/playback/{channel_id}/seek", json={"cursor": 0})
    assert seek.get_json()["cursor"] == 0

    assert client.post(f"/recipe/playback/{channel_id}/close").status_code == 200

    stream = client.get(f"/stream/playback/{channel_id}")
    assert stream.mimetype == "text/event-stream"
    body = stream.get_data(as_text=True)
    events = [line for line in body.splitlines() if line.startswith("event: ")]
    assert events[0] == "event: frame"
    assert events[-1] == "event: complete"

    frames = [
        json.loads(line[len("data: "):])
        for line in body.splitlines()
        if line.startswith("data: ") and '"cursor"' in line and '"nodes"' in line
    ]
    assert 1 in [f["cursor"] for f in frames]
    assert frames[-1]["cursor"] == 0
    assert channels.get(channel_id) is None


def test_playback_unknown_session_and_stream(client):
    assert client.post("/recipe/playback/nope/play").status_code == 404
    assert client.get("/stream/playback/nope").status_code == 404


def test_playback_rejects_too_fast_interval(client, raw_sample_steps):
    response = client.post(
        "/recipe/playback", json={"steps": raw_sample_steps, "intervalMs": 5}
    )
    assert response.status_code == 400
