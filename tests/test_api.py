"""Tests for the FastAPI endpoints."""

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_controller
from salesboard.charts import SpecCanvas
from salesboard.data import DataCache
from salesboard.errors import LoadError
from salesboard.selection import SelectionController
from salesboard.settings import CHART_IDS


@pytest.fixture
def controller(sales, clock, timer_factory):
    return SelectionController(DataCache(lambda: sales, clock=clock), SpecCanvas(), timer_factory=timer_factory)


@pytest.fixture
def client(controller):
    app.dependency_overrides[get_controller] = lambda: controller
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_categories(client):
    resp = client.get("/meta/categories")
    assert resp.status_code == 200
    assert resp.json() == {"values": ["Coffee", "Tea"]}


def test_initial_charts_render_all(client):
    resp = client.get("/charts")
    assert resp.status_code == 200
    body = resp.json()
    assert body["selection"] is None
    assert list(body["charts"]) == list(CHART_IDS)


def test_select_and_toggle(client):
    resp = client.post("/selection", json={"category": "Coffee"})
    assert resp.json() == {"category": "Coffee", "version": 1, "rendered": True}

    resp = client.post("/selection/toggle", json={"category": "Coffee"})
    assert resp.json()["category"] is None

    resp = client.post("/selection/toggle", json={"category": "Tea"})
    assert resp.json()["category"] == "Tea"
    assert client.get("/selection").json()["category"] == "Tea"


def test_reset(client):
    client.post("/selection", json={"category": "Tea"})
    resp = client.post("/selection/reset")
    assert resp.json()["category"] is None


def test_aggregations_follow_selection(client):
    client.post("/selection", json={"category": "Coffee"})
    body = client.get("/aggregations").json()
    assert body["selection"] == "Coffee"
    assert body["by_category"] == {"Coffee": 5}
    assert body["summary"]["units"] == 5


def test_export_csv(client):
    client.post("/selection", json={"category": "Tea"})
    resp = client.get("/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert len(lines) == 2
    assert "Tea" in lines[1]


def test_resize_schedules_refresh(client, controller, timer_factory):
    resp = client.post("/resize")
    assert resp.status_code == 202
    assert len(timer_factory.timers) == 1
    timer_factory.timers[0].fire()
    assert controller.version == 1


def test_load_error_returns_500(clock):
    def loader():
        raise LoadError("unreadable")

    broken = SelectionController(DataCache(loader, clock=clock), SpecCanvas())
    app.dependency_overrides[get_controller] = lambda: broken
    try:
        client = TestClient(app)
        resp = client.get("/aggregations")
        assert resp.status_code == 500
        assert resp.json()["type"] == "LoadError"
        assert client.get("/charts").status_code == 500
        assert client.post("/selection", json={"category": "Tea"}).json()["rendered"] is False
    finally:
        app.dependency_overrides.clear()


class ClearedDuringLookup(dict):
    """Specs mapping whose histogram entry is cleared right after a membership check."""

    def __contains__(self, key):
        present = super().__contains__(key)
        if key == "distribution-chart":
            self.pop(key, None)
        return present


def test_charts_tolerate_concurrent_clear(client, controller):
    controller.select(None)
    controller.canvas.specs = ClearedDuringLookup(controller.canvas.specs)
    resp = client.get("/charts")
    assert resp.status_code == 200
    assert list(resp.json()["charts"]) == ["bar-chart", "line-chart", "scatter-plot", "distribution-chart"]
