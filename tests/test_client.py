import requests

import wind_client


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Client Error")

    def json(self):
        return self.payload


def fake_get(calls, response):
    def get(url, params=None, timeout=None):
        calls.append((url, params))
        return response
    return get


def test_current(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(wind_client.requests, "get",
                        fake_get(calls, FakeResponse({"ts": 0.0, "vel": 2.5, "direction": 0})))
    assert wind_client.main(["--host", "pi", "current"]) == 0
    assert calls == [("http://pi:8080/wind/current", None)]
    assert "vel: 2.5m/s" in capsys.readouterr().out


def test_oldest_uses_oldest_endpoint(monkeypatch):
    calls = []
    monkeypatch.setattr(wind_client.requests, "get",
                        fake_get(calls, FakeResponse({"ts": 0.0, "vel": 1.0, "direction": 0})))
    wind_client.main(["oldest"])
    assert calls[0][0].endswith("/wind/oldest_data")


def test_history_prints_each_bucket(monkeypatch, capsys):
    calls = []
    payload = [{"ts": 0.0, "vel": 1.0, "direction": 0}, {"ts": 60.0, "vel": 2.0, "direction": 0}]
    monkeypatch.setattr(wind_client.requests, "get", fake_get(calls, FakeResponse(payload)))
    assert wind_client.main(["history", "--duration", "600", "--interval", "60"]) == 0
    assert calls[0][1] == {"duration": 600.0, "interval": 60.0}
    assert len(capsys.readouterr().out.strip().splitlines()) == 2


def test_http_error_exits_non_zero(monkeypatch, capsys):
    monkeypatch.setattr(wind_client.requests, "get",
                        fake_get([], FakeResponse({"error": "No data"}, status=404)))
    assert wind_client.main(["last"]) == 1
    assert "Error querying wind server" in capsys.readouterr().err
