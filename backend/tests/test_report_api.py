from __future__ import annotations

from _helpers import entry, round_trip_rows, unwrap

RANGE = {"startISO": "2026-01-01", "endISO": "2026-01-10", "timezone": "Europe/Berlin", "mode": "CUSTOM"}


def _segments(chart):
    return {s["key"]: s["days"] for s in chart["segments"]}


def test_compute_report_contract(client):
    payload = {
        "range": dict(RANGE, totalDaysInRange=10),
        "entries": [
            entry("2026-01-01", 6, acute=True, triptan=True),
            entry("2026-01-02", 3),
            entry("2026-01-02", 5),
            entry("2026-01-03", 0),
        ],
    }
    r = client.post("/api/reports/compute", json=payload)
    assert r.status_code == 200, r.text
    report = unwrap(r.json())

    assert set(report) == {"meta", "kpis", "charts", "raw"}
    assert report["meta"]["basis"] == {"totalDaysInRange": 10, "documentedDays": 3, "undocumentedDays": 7}
    assert report["meta"]["range"]["startISO"] == "2026-01-01"
    assert report["meta"]["generatedAtISO"].endswith("Z")

    kpis = report["kpis"]
    assert kpis["headacheDays"] == 2
    assert kpis["avgPain"] == 5.5
    assert kpis["maxPain"] == 6
    assert kpis["triptanDays"] == 1
    assert kpis["acuteMedDays"] == 1
    assert kpis["mohRiskFlag"] == "none"

    charts = report["charts"]
    assert _segments(charts["headacheDaysDonut"]) == {"headache": 2, "no_headache": 1, "undocumented": 7}
    assert _segments(charts["legacyHeadacheDaysPie"]) == {"painFree": 8, "painNoTriptan": 1, "triptan": 1}
    assert [b["bucket"] for b in charts["timeOfDayDistribution"]["buckets"]] == ["night", "morning", "afternoon", "evening"]
    assert len(report["raw"]["countsByDay"]) == 3


def test_compute_report_without_me_cfs_option(client):
    payload = {"range": RANGE, "options": {"includeMeCfs": False}, "entries": [entry("2026-01-01", 2)]}
    report = unwrap(client.post("/api/reports/compute", json=payload).json())
    assert report["charts"]["meCfs"] is None


def test_compute_report_swaps_inverted_range(client):
    payload = {"range": {"startISO": "2026-01-10", "endISO": "2026-01-01"}, "entries": []}
    report = unwrap(client.post("/api/reports/compute", json=payload).json())
    assert report["meta"]["range"]["startISO"] == "2026-01-01"
    assert report["meta"]["range"]["endISO"] == "2026-01-10"


def test_moh_flag_over_api(client):
    entries = [entry(f"2026-01-{d:02d}", 5, acute=True, triptan=True) for d in range(1, 10)]
    payload = {"range": {"startISO": "2026-01-01", "endISO": "2026-01-31", "totalDaysInRange": 31}, "entries": entries}
    report = unwrap(client.post("/api/reports/compute", json=payload).json())
    assert report["kpis"]["mohRiskFlag"] == "possible"


def test_pdf_and_app_analysis_agree(client):
    rows, effects = round_trip_rows()
    pdf = unwrap(client.post("/api/reports/pdf", json={"range": RANGE, "entries": rows, "medicationEffects": effects}).json())
    app = unwrap(client.post(
        "/api/reports/app-analysis",
        json={"range": RANGE, "painEntries": rows, "medicationEffects": effects},
    ).json())

    for result in (pdf, app):
        report = result["report"]
        assert report["meta"]["basis"]["documentedDays"] == 4
        assert report["meta"]["basis"]["undocumentedDays"] == 6
        assert report["kpis"]["headacheDays"] == 2
        assert report["kpis"]["avgPain"] == 4.5
        assert report["charts"]["medications"]["items"][0]["medicationId"] == "med-suma"

    assert len(pdf["report"]["raw"]["countsByDay"]) == 4
    assert len(app["report"]["raw"]["countsByDay"]) == 10


def test_coverage_endpoint(client):
    r = client.post(
        "/api/reports/coverage",
        json={"daysInRange": 30, "documentedDays": 12, "weatherDaysAvailable": 20},
    )
    assert r.status_code == 200
    data = unwrap(r.json())
    assert data["diary"] == {"available": 12, "total": 30, "ratio": 0.4}
    assert data["weather"]["ratio"] == 0.667
    assert data["mecfs"] is None
    assert [w["module"] for w in data["warnings"]] == ["diary"]


def test_coverage_request_is_validated(client):
    r = client.post("/api/reports/coverage", json={"daysInRange": -1, "documentedDays": 0})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


def test_coverage_request_model_accepts_snake_case():
    from miary.schemas.report import CoverageRequest

    req = CoverageRequest(days_in_range=7, documented_days=3)
    assert req.to_wire() == {
        "daysInRange": 7,
        "documentedDays": 3,
        "weatherDaysAvailable": None,
        "mecfsDaysDocumented": None,
    }
