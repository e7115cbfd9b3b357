import pytest

import app as app_module
from config import CFG

TROMINO = {
    "pieces": [[[0, 0], [0, 1], [0, 2]], [[0, 0], [0, 1], [1, 1]]],
    "mask": ["XXX", "XX.", "X.."],
}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(CFG, "ISOLATE", False)
    monkeypatch.setattr(CFG, "WRITE_OUTPUTS", False)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


def test_solve_returns_tiling(client):
    resp = client.post("/solve", json=TROMINO)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    assert body["error"] is None
    assert body["piece_indices"] == [0, 1]
    covered = sorted(tuple(c) for piece in body["pieces"] for c in piece)
    assert covered == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (2, 0)]


def test_solve_reports_unsatisfiable_as_ok_response(client):
    resp = client.post("/solve", json={"pieces": [[[0, 0]]], "mask": ["XX"]})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is False
    assert body["error"] == "unsatisfiable"


def test_empty_piece_is_client_error(client):
    resp = client.post("/solve", json={"pieces": [[]], "mask": ["X"]})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "empty_piece"


def test_ragged_mask_is_client_error(client):
    resp = client.post("/solve", json={"pieces": [[[0, 0]]], "mask": ["XX", "X"]})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "malformed_mask"


def test_missing_fields_are_bad_requests(client):
    resp = client.post("/solve", json={"mask": ["X"]})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_request"
    assert client.post("/solve", data="not json").status_code == 400


def test_verbose_flag_adds_rendering(client):
    resp = client.post("/solve", json=dict(TROMINO, verbose=True))
    meta = resp.get_json()["meta"]
    assert "timings" in meta
    assert meta["rendering"].count("A") == 3


def test_puzzle_catalogue(client):
    body = client.get("/puzzles").get_json()
    assert set(body) == {"tromino", "tetromino", "pentomino"}
    assert body["pentomino"]["allow_reflections"] is True
    assert len(body["pentomino"]["pieces"]) == 12


def test_solve_named_puzzle(client):
    resp = client.get("/puzzles/tromino?verbose=1")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["ok"] is True
    assert "rendering" in body["meta"]


def test_unknown_puzzle(client):
    resp = client.get("/puzzles/hexomino")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


def test_latest_result_page_follows_last_solve(client):
    client.post("/solve", json=TROMINO)
    page = client.get("/result/latest").get_data(as_text=True)
    assert "Solved: 2 pieces" in page
    assert "<svg" in page

    client.post("/solve", json={"pieces": [[[0, 0]]], "mask": ["XX"]})
    page = client.get("/result/latest").get_data(as_text=True)
    assert "No solution" in page


def test_progress_is_not_cached(client):
    client.post("/solve", json=TROMINO)
    resp = client.get("/progress")
    assert resp.headers["Cache-Control"].startswith("no-store")
    snap = resp.get_json()
    assert snap["status"] == "Solved"
    assert snap["done"] is True


def test_outputs_written_when_enabled(client, monkeypatch, tmp_path):
    monkeypatch.setattr(CFG, "WRITE_OUTPUTS", True)
    monkeypatch.setattr(CFG, "COORDS_OUT", str(tmp_path / "coords.txt"))
    monkeypatch.setattr(CFG, "LAYOUT_HTML", str(tmp_path / "layout.html"))
    client.post("/solve", json=TROMINO)
    assert (tmp_path / "coords.txt").read_text(encoding="utf-8").startswith("A @ ")
    assert "<svg" in (tmp_path / "layout.html").read_text(encoding="utf-8")


@pytest.mark.parametrize("seconds,text", [(0.2, "200ms"), (5, "5s"), (65, "1m 5s"), (3725, "1h 2m 5s")])
def test_elapsed_formatting(seconds, text):
    assert app_module._fmt_elapsed(seconds) == text


def test_isolated_service_run_forwards_verbose(client, monkeypatch):
    monkeypatch.setattr(CFG, "ISOLATE", True)
    monkeypatch.setattr(CFG, "ISOLATE_SECONDS", 60.0)
    resp = client.post("/solve", json=dict(TROMINO, verbose=True))
    assert resp.status_code == 200
    assert "rendering" in resp.get_json()["meta"]
