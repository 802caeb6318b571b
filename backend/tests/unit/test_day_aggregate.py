from _helpers import entry

from miary import compute_miary_report
from miary.schemas.report import ComputeReportInput, MeCfsSeverity, MohRiskFlag, RangeMode
from miary.services.aggregate import aggregate_days
from miary.schemas.report import ReportEntryInput


def _report(entries, *, start="2026-01-01", end="2026-01-31", total=None, **extra):
    rng = {"startISO": start, "endISO": end, "timezone": "Europe/Berlin", "mode": "CUSTOM"}
    if total is not None:
        rng["totalDaysInRange"] = total
    return compute_miary_report({"range": rng, "entries": entries, **extra})


def test_entries_on_same_day_are_merged():
    days = aggregate_days([
        ReportEntryInput(date_iso="2026-01-02", pain_max=3, acute_med_used=False, me_cfs_levels=["mild"]),
        ReportEntryInput(date_iso="2026-01-02", pain_max=None, acute_med_used=True, triptan_used=True),
        ReportEntryInput(date_iso="2026-01-02", pain_max=6, me_cfs_levels=[None, "moderate"]),
        ReportEntryInput(date_iso="2026-01-01", pain_max=0),
    ])
    assert [d.date_iso for d in days] == ["2026-01-01", "2026-01-02"]
    merged = days[1]
    assert merged.pain_max == 6
    assert merged.headache and merged.treatment and merged.triptan_used
    assert merged.me_cfs_max is MeCfsSeverity.MODERATE
    assert days[0].headache is False and days[0].documented is True
    assert days[0].me_cfs_max is None


def test_null_pain_does_not_override_known_pain():
    days = aggregate_days([
        ReportEntryInput(date_iso="2026-01-05", pain_max=4),
        ReportEntryInput(date_iso="2026-01-05", pain_max=None),
    ])
    assert days[0].pain_max == 4


def test_documented_is_or_of_entries():
    days = aggregate_days([
        ReportEntryInput(date_iso="2026-01-05", documented=False),
        ReportEntryInput(date_iso="2026-01-05", documented=True),
    ])
    assert days[0].documented is True


def test_counts_by_day_sorted_and_basis_from_distinct_dates():
    report = _report([entry("2026-01-03", 2), entry("2026-01-01", 0), entry("2026-01-02", None, documented=False)])
    dates = [d.date_iso for d in report.raw.counts_by_day]
    assert dates == sorted(dates)
    basis = report.meta.basis
    assert basis.total_days_in_range == 3
    assert basis.documented_days == 2
    assert basis.undocumented_days == 1


def test_total_days_override_is_authoritative():
    report = _report([entry("2026-01-03", 5)], total=30)
    basis = report.meta.basis
    assert basis.total_days_in_range == 30
    assert basis.documented_days + basis.undocumented_days == 30


def test_empty_input_does_not_crash():
    report = _report([])
    assert report.meta.basis.total_days_in_range == 0
    assert report.kpis.avg_pain is None
    assert report.kpis.max_pain is None
    assert report.kpis.moh_risk_flag is MohRiskFlag.NONE
    assert report.raw.counts_by_day == []


def test_inverted_range_is_swapped():
    report = _report([entry("2026-01-10", 1)], start="2026-01-31", end="2026-01-01")
    assert report.meta.range.start_iso == "2026-01-01"
    assert report.meta.range.end_iso == "2026-01-31"


def test_range_defaults_and_model_input():
    payload = ComputeReportInput.model_validate({
        "range": {"startISO": "2026-02-01", "endISO": "2026-02-28"},
        "entries": [entry("2026-02-02", 4)],
        "preventiveMedActive": True,
    })
    report = compute_miary_report(payload)
    assert report.meta.range.timezone == "Europe/Berlin"
    assert report.meta.range.mode is RangeMode.CUSTOM
    assert report.kpis.preventive_med_active is True


def test_generated_at_is_utc_iso():
    report = _report([entry("2026-01-01", 1)])
    assert report.meta.generated_at_iso.endswith("Z")
    assert "T" in report.meta.generated_at_iso


def test_report_is_deterministic_apart_from_timestamp():
    entries = [entry("2026-01-01", 3, acute=True), entry("2026-01-02", 0)]
    a = _report(entries).to_wire()
    b = _report(entries).to_wire()
    a["meta"].pop("generatedAtISO")
    b["meta"].pop("generatedAtISO")
    assert a == b


def test_wire_shape_uses_camel_case():
    wire = _report([entry("2026-01-01", 3)]).to_wire()
    assert set(wire) == {"meta", "kpis", "charts", "raw"}
    assert "countsByDay" in wire["raw"]
    day = wire["raw"]["countsByDay"][0]
    assert day["dateISO"] == "2026-01-01"
    assert "meCfsMax" in day
    assert "legacyHeadacheDaysPie" in wire["charts"]
    assert wire["meta"]["basis"]["totalDaysInRange"] == 1
