from timesync.level import LevelOptions
from timesync.level.tiles import LEVER_TILES
from timesync.routes.level_api import get_cached_level


def _codes(rows):
    return {c for row in rows for c in row}


def test_tiles_legend(client):
    r = client.get("/api/level/tiles")
    assert r.status_code == 200
    tiles = r.get_json()["tiles"]
    assert [t["code"] for t in tiles] == list(range(10))
    by_name = {t["name"]: t for t in tiles}
    assert by_name["wall"]["code"] == 1
    assert by_name["lever_gate"]["char"] == "|"


def test_generate_shape(client):
    r = client.get("/api/level/generate?width=6&height=6&difficulty=3&seed=42")
    assert r.status_code == 200
    data = r.get_json()
    for k in ["past", "future", "start", "goal", "obstacles", "min_moves", "solution_path", "seed", "hint", "metrics"]:
        assert k in data
    assert data["seed"] == 42
    assert len(data["past"]) == 6 and len(data["past"][0]) == 6
    assert data["min_moves"] == len(data["solution_path"])
    assert isinstance(data["hint"], str) and data["hint"]
    assert data["metrics"]["attempts"] == data["attempts"]


def test_same_seed_returns_same_level(client):
    a = client.get("/api/level/generate?width=6&height=5&seed=77").get_json()
    b = client.get("/api/level/generate?width=6&height=5&seed=77").get_json()
    assert a["past"] == b["past"]
    assert a["solution_path"] == b["solution_path"]


def test_cache_can_be_disabled(client, monkeypatch):
    monkeypatch.setenv("TIMESYNC_DISABLE_CACHE", "1")
    a = client.get("/api/level/generate?width=5&height=5&seed=78").get_json()
    b = client.get("/api/level/generate?width=5&height=5&seed=78").get_json()
    assert a["past"] == b["past"]


def test_post_json_body_with_string_seed(client):
    body = {"width": 5, "height": 7, "seed": "alpha", "enable_levers": False}
    r1 = client.post("/api/level/generate", json=body)
    assert r1.status_code == 200
    d1 = r1.get_json()
    assert len(d1["past"]) == 7 and len(d1["past"][0]) == 5
    assert isinstance(d1["seed"], int)
    assert d1["options"]["enable_levers"] is False
    assert not (_codes(d1["past"]) | _codes(d1["future"])) & LEVER_TILES
    d2 = client.post("/api/level/generate", json=body).get_json()
    assert d2["seed"] == d1["seed"]


def test_query_string_flags(client):
    r = client.get("/api/level/generate?width=5&height=5&seed=3&enable_obstacles=false")
    data = r.get_json()
    assert data["options"]["enable_obstacles"] is False
    assert data["obstacles"] == []


def test_size_preset(client):
    r = client.get("/api/level/generate?size=1&seed=5&enable_obstacles=0&enable_keys=0&enable_levers=0")
    assert r.status_code == 200
    data = r.get_json()
    assert data["width"] == 10 and data["height"] == 10


def test_invalid_parameters_are_400(client):
    for qs in ["width=2", "height=41", "width=abc", "width=10.7", "size=9", "difficulty=12", "difficulty=hard"]:
        r = client.get(f"/api/level/generate?{qs}")
        assert r.status_code == 400, qs
        assert "error" in r.get_json()


def test_fractional_json_dimensions_are_400(client):
    r = client.post("/api/level/generate", json={"width": 10.7, "height": 6, "seed": 1})
    assert r.status_code == 400
    assert "width" in r.get_json()["error"]
    r = client.post("/api/level/generate", json={"width": 6.0, "height": 5, "seed": 1, "enable_obstacles": False})
    assert r.status_code == 200
    assert r.get_json()["width"] == 6


def test_cached_level_is_not_shared_between_callers(test_app):
    options = LevelOptions(enable_obstacles=False)
    with test_app.app_context():
        first = get_cached_level(31, 5, 5, 2, options)
        first["past"][0][0] = 99
        first["solution_path"].clear()
        second = get_cached_level(31, 5, 5, 2, options)
    assert second["past"][0][0] != 99
    assert second["solution_path"]


def test_non_object_body_is_400(client):
    r = client.post("/api/level/generate", json=[1, 2, 3])
    assert r.status_code == 400


def test_verify_generated_solution(client):
    level = client.get("/api/level/generate?width=6&height=6&difficulty=2&seed=99").get_json()
    body = {k: level[k] for k in ("past", "future", "start", "goal", "obstacles")}
    body["path"] = level["solution_path"]
    r = client.post("/api/level/verify", json=body)
    assert r.status_code == 200
    result = r.get_json()
    assert result["solved"] is True
    assert result["steps"] == level["min_moves"]
    assert result["boxes_pushed"] == level["boxes_pushed"]
    assert result["final"]["past"] == level["goal"]

    body["path"] = level["solution_path"][:-1]
    assert client.post("/api/level/verify", json=body).get_json()["solved"] is False


def test_verify_hand_built_layout(client):
    body = {
        "past": [[2, 0, 0], [0, 0, 0], [0, 0, 4]],
        "future": [[2, 0, 0], [0, 0, 0], [0, 0, 4]],
        "start": [0, 0],
        "goal": [2, 2],
        "path": ["right", "right", "down", "down"],
    }
    result = client.post("/api/level/verify", json=body).get_json()
    assert result["solved"] is True
    assert result["boxes_pushed"] == 0
    assert result["final"]["future"] == [2, 2]


def test_verify_rejects_bad_input(client):
    good = {
        "past": [[2, 0], [0, 4]],
        "future": [[2, 0], [0, 4]],
        "start": [0, 0],
        "goal": [1, 1],
        "path": ["down"],
    }
    bad_bodies = [
        {k: v for k, v in good.items() if k != "path"},
        dict(good, path=["north"]),
        dict(good, start=[5, 5]),
        dict(good, goal="corner"),
        dict(good, future=[[2, 0, 0], [0, 4, 0]]),
        dict(good, past=[[2, 0], [0]]),
        dict(good, past="grid"),
        dict(good, path="down"),
    ]
    for body in bad_bodies:
        r = client.post("/api/level/verify", json=body)
        assert r.status_code == 400, body
        assert "error" in r.get_json()
    assert client.post("/api/level/verify", data="nope", content_type="text/plain").status_code == 400


def test_unknown_route_is_json_404(client):
    r = client.get("/api/level/nope")
    assert r.status_code == 404
    assert r.get_json()["error"] == "not found"
