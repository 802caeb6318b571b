from __future__ import annotations

from _helpers import feature, unwrap


def _features_payload():
    return {
        "countsByDay": [
            {"dateISO": "2026-01-05", "documented": True, "headache": True, "treatment": True, "painMax": 6, "acuteMedUsed": True},
            {"dateISO": "2026-01-06", "documented": True, "headache": False, "treatment": False, "painMax": 0},
            {"dateISO": "2026-01-07", "documented": False, "headache": False, "treatment": False},
        ],
        "entries": [
            {"selected_date": "2026-01-05", "selected_time": "08:00", "entry_kind": "pain", "pain_level": "stark", "weather_id": 7},
        ],
        "weatherLogs": [
            {"id": 7, "snapshot_date": "2026-01-05", "pressure_mb": 1001, "pressure_change_24h": -9},
            {"id": 8, "snapshot_date": "2026-01-05", "pressure_mb": 1020, "pressure_change_24h": 1},
            {"id": 9, "snapshot_date": "2026-01-06", "requested_at": "2026-01-06T11:00:00Z", "pressure_mb": 1012},
        ],
        "timezone": "Europe/Berlin",
    }


def test_features_endpoint_returns_list(client):
    r = client.post("/api/weather/features", json=_features_payload())
    assert r.status_code == 200, r.text
    data = unwrap(r.json())
    assert [f["date"] for f in data] == ["2026-01-05", "2026-01-06"]

    first, second = data
    assert first["weatherCoverage"] == "entry"
    assert first["pressureMb"] == 1001
    assert first["pressureChange24h"] == -9
    assert first["hadHeadache"] is True and first["hadAcuteMed"] is True
    assert second["weatherCoverage"] == "snapshot"
    assert second["pressureChange24h"] is None


def test_features_endpoint_with_counts(client):
    r = client.post("/api/weather/features", params={"returnCounts": "true"}, json=_features_payload())
    assert r.status_code == 200
    body = r.json()
    assert body["meta"]["params"] == {"return_counts": True}
    data = unwrap(body)
    assert len(data["features"]) == 2
    assert data["coverageCounts"] == {
        "daysWithEntryWeather": 1,
        "daysWithSnapshotWeather": 1,
        "daysWithNoWeather": 0,
    }


def test_association_endpoint(client):
    features = [feature(i, delta=-10, headache=i < 8, pain=6 if i < 8 else 0) for i in range(10)]
    features += [feature(10 + i, delta=0, headache=i < 6, pain=4 if i < 6 else 0) for i in range(30)]
    r = client.post("/api/weather/association", json={"features": features})
    assert r.status_code == 200, r.text
    data = unwrap(r.json())

    delta = data["pressureDelta24h"]
    assert delta["enabled"] is True
    assert delta["confidence"] == "medium"
    assert delta["relativeRisk"]["rr"] == 4.0
    assert delta["relativeRisk"]["absDiff"] == 0.6
    assert data["absolutePressure"] is None
    assert data["coverage"]["daysDocumented"] == 40
    assert data["disclaimer"]


def test_association_endpoint_insufficient(client):
    r = client.post("/api/weather/association", json={"features": [feature(0, delta=-4)]})
    data = unwrap(r.json())
    assert data["pressureDelta24h"]["enabled"] is False
    assert data["pressureDelta24h"]["confidence"] == "insufficient"
    assert data["pressureDelta24h"]["buckets"] == []
