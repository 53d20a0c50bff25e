import time

import pytest

import wind_webserver
from wind_errors import PersistenceError


@pytest.fixture
def client(store, monkeypatch):
    monkeypatch.setattr(wind_webserver, "store", store)
    wind_webserver.app.config["TESTING"] = True
    return wind_webserver.app.test_client()


def test_index_page(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"Wind Speed" in response.data


def test_last_data(client, store):
    store.insert_at(1700000000.5, 4.2, 0)
    response = client.get("/wind/last_data")
    assert response.status_code == 200
    assert response.get_json() == {"ts": 1700000000.5, "vel": 4.2, "direction": 0}
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_oldest_data(client, store):
    store.insert_at(10.0, 1.0, 0)
    store.insert_at(20.0, 2.0, 0)
    assert client.get("/wind/oldest_data").get_json()["ts"] == 10.0


@pytest.mark.parametrize("path", ["/wind/current", "/wind/last_data", "/wind/oldest_data"])
def test_empty_store_is_not_found(client, path):
    response = client.get(path)
    assert response.status_code == 404
    assert "error" in response.get_json()


def test_current_ignores_stale_data(client, store):
    store.insert_at(time.time() - 3600, 2.0, 0)
    assert client.get("/wind/current").status_code == 404
    store.insert(3.0, 0)
    assert client.get("/wind/current").get_json()["vel"] == 3.0


def test_data_since_buckets(client, store):
    now = time.time()
    store.insert_at(now - 5, 2.0, 0)
    store.insert_at(now - 4, 4.0, 0)
    response = client.get("/wind/data_since?duration=600&interval=60")
    assert response.status_code == 200
    data = response.get_json()
    assert len(data) == 1
    assert data[0]["vel"] == pytest.approx(3.0)
    assert data[0]["ts"] == pytest.approx(now - 4)


def test_data_since_without_data(client):
    assert client.get("/wind/data_since?duration=600&interval=60").status_code == 404


@pytest.mark.parametrize("query", [
    "",
    "?duration=600",
    "?duration=abc&interval=60",
    "?duration=600&interval=0",
    "?duration=-1&interval=60",
    "?duration=600&interval=nan",
    "?duration=inf&interval=60",
])
def test_data_since_bad_arguments(client, query):
    assert client.get(f"/wind/data_since{query}").status_code == 400


def test_store_failure_is_unavailable(client, store):
    store.close()
    response = client.get("/wind/last_data")
    assert response.status_code == 503


def test_store_failure_is_logged(client, store, monkeypatch, caplog):
    def broken():
        raise PersistenceError("database is locked")

    monkeypatch.setattr(store, "latest", broken)
    assert client.get("/wind/last_data").status_code == 503
    assert "database is locked" in caplog.text
