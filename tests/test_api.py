"""API-level tests for the Flask app."""

from datetime import datetime, timedelta

import pytest

from app import app


@pytest.fixture(autouse=True)
def env_setup(monkeypatch):
    monkeypatch.delenv("ETG_DEFAULT_THRESHOLD", raising=False)
    yield


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def _ago(hours):
    return (datetime.now() - timedelta(hours=hours)).strftime("%Y-%m-%dT%H:%M")


def _ahead(hours):
    return (datetime.now() + timedelta(hours=hours)).strftime("%Y-%m-%dT%H:%M")


def calculate(client, sessions, **extra):
    body = {
        "weight": 70,
        "weight_unit": "kg",
        "gender": "male",
        "metabolism_rate": "average",
        "test_threshold": 500,
        "sessions": sessions,
    }
    body.update(extra)
    return client.post("/api/calculate", json=body)


def test_healthz(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True}


def test_drink_types(client):
    res = client.get("/api/drink-types")
    assert res.status_code == 200
    data = res.get_json()
    keys = [d["key"] for d in data["drink_types"]]
    assert keys == ["beer", "wine", "liquor", "custom"]
    assert data["amount_units"] == ["ml", "oz", "drinks"]
    assert data["metabolism_rates"] == ["slow", "average", "fast"]
    assert data["default_threshold"] == 500


def test_default_threshold_from_env(client, monkeypatch):
    monkeypatch.setenv("ETG_DEFAULT_THRESHOLD", "300")
    data = client.get("/api/drink-types").get_json()
    assert data["default_threshold"] == 300

    res = calculate(client, [{"drink_type": "beer", "amount": 3, "unit": "drinks", "time": _ago(30), "duration": 2}],
                    test_threshold=None)
    assert res.status_code == 200
    assert res.get_json()["threshold"] == 300


def test_calculate_light_night_is_safe(client):
    res = calculate(
        client,
        [{"drink_type": "beer", "amount": 3, "unit": "drinks", "time": _ago(30), "duration": 2}],
        test_time=_ahead(24),
    )
    assert res.status_code == 200
    data = res.get_json()
    assert data["total_alcohol_grams"] == 42.0
    assert data["total_standard_drinks"] == 3.0
    assert data["peak_etg"] == 1470
    assert data["current_status"] == "below"
    assert data["hours_until_safe"] == 0
    assert data["test_prediction"]["likely_pass"] is True
    assert data["advice"]["status"] == "ok"


def test_calculate_heavy_recent_night_fails_soon_test(client):
    res = calculate(
        client,
        [
            {"drink_type": "liquor", "amount": 12, "unit": "drinks", "time": _ago(3), "duration": 2},
            {"drink_type": "wine", "amount": 750, "unit": "ml", "time": _ago(6), "duration": 2},
        ],
        test_time=_ahead(2),
    )
    assert res.status_code == 200
    data = res.get_json()
    assert data["session_count"] == 2
    assert data["hours_since_last_drink"] == pytest.approx(1, abs=0.05)
    assert data["hours_until_safe"] > 5
    assert data["test_prediction"]["likely_pass"] is False
    assert data["test_prediction"]["estimated_etg"] > 500
    assert data["advice"]["status"] == "likely_fail"


def test_calculate_rising_level_below_threshold_passes(client):
    # 3 beers ending half an hour ago, test in half an hour
    res = calculate(
        client,
        [{"drink_type": "beer", "amount": 3, "unit": "drinks", "time": _ago(1), "duration": 0.5}],
        test_time=_ahead(0.5),
    )
    assert res.status_code == 200
    data = res.get_json()
    assert data["current_etg"] < 500
    assert data["hours_until_safe"] == 0
    assert data["test_prediction"]["likely_pass"] is True
    assert data["advice"]["status"] == "ok"


def test_calculate_rejects_huge_amount(client):
    res = calculate(client, [{"drink_type": "beer", "amount": 1e308, "unit": "drinks", "time": _ago(5)}])
    assert res.status_code == 400
    assert "too large" in res.get_json()["error"]


def test_calculate_rejects_huge_duration(client):
    res = calculate(client, [{"drink_type": "beer", "amount": 1, "time": _ago(5), "duration": 1e12}])
    assert res.status_code == 400
    assert "at most" in res.get_json()["error"]


def test_calculate_rejects_bad_weight(client):
    res = calculate(client, [{"amount": 1, "time": _ago(5)}], weight=0)
    assert res.status_code == 400
    assert "body weight" in res.get_json()["error"]


def test_calculate_requires_valid_session(client):
    res = calculate(client, [{"drink_type": "beer", "amount": 0, "time": _ago(5)}])
    assert res.status_code == 400
    assert "at least one drinking session" in res.get_json()["error"]


def test_calculate_rejects_custom_without_abv(client):
    res = calculate(client, [{"drink_type": "custom", "amount": 330, "unit": "ml", "time": _ago(5)}])
    assert res.status_code == 400
    assert "custom ABV" in res.get_json()["error"]


def test_calculate_rejects_non_json(client):
    res = client.post("/api/calculate", data="weight=70", content_type="text/plain")
    assert res.status_code == 400
    assert "error" in res.get_json()


def test_curve(client):
    res = client.post(
        "/api/curve?step_hours=1",
        json={
            "weight": 70,
            "sessions": [{"drink_type": "beer", "amount": 4, "unit": "drinks", "time": _ago(8), "duration": 1}],
        },
    )
    assert res.status_code == 200
    data = res.get_json()
    assert data["threshold"] == 500
    curve = data["curve"]
    assert curve[0] == {"t": 0, "etg": 0}
    assert curve[5]["etg"] == pytest.approx(4 * 14 * 35)


def test_curve_rejects_negative_step(client):
    res = client.post("/api/curve?step_hours=-1", json={"weight": 70, "sessions": []})
    assert res.status_code == 400
