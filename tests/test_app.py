import pytest
from css_filter import generator
from css_filter.app import create_app, parse_flag
from css_filter.generator import FORCE_BLACK_PREFIX
from css_filter.pipeline import FilterParams
from css_filter.spsa import SolverResult


@pytest.fixture
def client():
    app = create_app({"TESTING": True, "FILTER_MAX_ATTEMPTS": 1})
    return app.test_client()


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_filter_invalid_color(client):
    resp = client.get("/filter", query_string={"color": "invalid"})
    assert resp.status_code == 400
    assert "Invalid color format" in resp.get_json()["error"]


def test_filter_bad_numbers(client):
    resp = client.get("/filter", query_string={"color": "#fff", "max_loss": "lots"})
    assert resp.status_code == 400


def test_filter_solves_with_default_force_black(client):
    resp = client.get("/filter", query_string={"color": "#ff0000", "max_loss": 1000})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["attempts"] == 1
    assert body["filter_raw"].startswith(FORCE_BLACK_PREFIX)
    assert body["rgb"] == {"r": 255, "g": 0, "b": 0}
    assert body["target_hex"] == "#ff0000"
    assert body["rendered_hex"].startswith("#")
    assert body["delta_e"] >= 0
    assert set(body["values"]) == {
        "invert", "sepia", "saturate", "hue_rotate", "brightness", "contrast"
    }


def test_filter_force_black_off(client, monkeypatch):
    monkeypatch.setattr(
        generator,
        "solve",
        lambda target, rng=None: SolverResult(FilterParams(0, 0, 0, 0, 0, 100), 3.0),
    )
    resp = client.get("/filter", query_string={"color": "0,0,0", "force_black": "0"})
    body = resp.get_json()
    assert not body["filter_raw"].startswith(FORCE_BLACK_PREFIX)
    assert body["loss"] == 3.0


def test_filter_server_error_is_json(client, monkeypatch):
    def boom(target, rng=None):
        raise RuntimeError("solver exploded")

    monkeypatch.setattr(generator, "solve", boom)
    resp = client.get("/filter", query_string={"color": "#123456"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "solver exploded"


@pytest.mark.parametrize(
    "val, default, expected",
    [("1", False, True), ("Yes", False, True), ("off", True, False), (None, True, True), ("?", False, False)],
)
def test_parse_flag(val, default, expected):
    assert parse_flag(val, default) is expected


def test_filter_clamps_max_attempts(monkeypatch):
    calls = []

    def always_poor(target, rng=None):
        calls.append(target)
        return SolverResult(FilterParams(0, 0, 0, 0, 0, 100), 50.0)

    monkeypatch.setattr(generator, "solve", always_poor)
    client = create_app({"TESTING": True, "FILTER_MAX_ATTEMPTS_CAP": 3}).test_client()
    resp = client.get(
        "/filter",
        query_string={"color": "#ff0000", "max_attempts": 1000000, "max_loss": -1},
    )
    assert resp.status_code == 200
    assert resp.get_json()["attempts"] == 3
    assert len(calls) == 3


def test_default_cap_bounds_attempts():
    from css_filter.app import MAX_ATTEMPTS_CAP

    app = create_app()
    assert app.config["FILTER_MAX_ATTEMPTS_CAP"] == MAX_ATTEMPTS_CAP
    assert app.config["FILTER_MAX_ATTEMPTS"] <= MAX_ATTEMPTS_CAP
