from datetime import date, timedelta


def unwrap(j):
    """Return API data payload regardless of envelope/legacy shape."""
    if isinstance(j, dict) and "ok" in j and "data" in j:
        return j["data"]
    return j


def is_enveloped(j) -> bool:
    return isinstance(j, dict) and "ok" in j and "data" in j


def day_iso(start: str, offset: int) -> str:
    return (date.fromisoformat(start) + timedelta(days=offset)).isoformat()


def entry(date_iso, pain=None, *, acute=False, triptan=False, documented=True, levels=None, meds=None):
    """ReportEntryInput payload in wire (camelCase) shape."""
    row = {
        "dateISO": date_iso,
        "painMax": pain,
        "acuteMedUsed": acute,
        "triptanUsed": triptan,
        "documented": documented,
    }
    if levels is not None:
        row["meCfsLevels"] = levels
    if meds is not None:
        row["medications"] = meds
    return row


def feature(i, *, delta=None, pressure=None, headache=False, acute=False, pain=0, documented=True, coverage="snapshot"):
    """WeatherDayFeature payload for day ``i`` of a synthetic series."""
    return {
        "date": day_iso("2026-01-01", i),
        "documented": documented,
        "painMax": pain,
        "hadHeadache": headache,
        "hadAcuteMed": acute,
        "pressureMb": pressure,
        "pressureChange24h": delta,
        "temperatureC": None,
        "humidity": None,
        "weatherCoverage": coverage,
    }


def round_trip_rows():
    """Four diary rows over 2026-01-01..2026-01-10: stark+triptan, leicht, keine, lifestyle-only."""
    entries = [
        {
            "id": 1,
            "selected_date": "2026-01-02",
            "selected_time": "08:00",
            "pain_level": "stark",
            "entry_kind": "pain",
            "medications": ["Sumatriptan 50mg"],
            "medication_intakes": [{"medication_name": "Sumatriptan 50mg", "medication_id": "med-suma", "dose_quarters": 4}],
        },
        {"id": 2, "selected_date": "2026-01-04", "pain_level": "leicht", "entry_kind": "pain"},
        {"id": 3, "selected_date": "2026-01-06", "pain_level": "keine", "entry_kind": "pain"},
        {"id": 4, "selected_date": "2026-01-08", "entry_kind": "lifestyle"},
    ]
    effects = [{"entry_id": 1, "med_name": "Sumatriptan 50mg", "effect_rating": "good"}]
    return entries, effects
