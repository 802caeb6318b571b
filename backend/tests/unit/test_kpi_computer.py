from _helpers import day_iso, entry

from miary import compute_miary_report
from miary.schemas.report import DayCountRecord, MohRiskFlag
from miary.services.kpi import compute_basis, compute_kpis


def _day(date_iso, *, pain=None, documented=True, acute=False, triptan=False):
    return DayCountRecord(
        date_iso=date_iso,
        documented=documented,
        headache=pain is not None and pain > 0,
        treatment=acute,
        pain_max=pain,
        acute_med_used=acute,
        triptan_used=triptan,
    )


def test_kpis_only_count_documented_days():
    days = [
        _day("2026-01-01", pain=7, acute=True, triptan=True),
        _day("2026-01-02", pain=2),
        _day("2026-01-03", pain=0),
        _day("2026-01-04", pain=9, documented=False, acute=True),
    ]
    kpis = compute_kpis(days, 4)
    assert kpis.headache_days == 2
    assert kpis.treatment_days == 1
    assert kpis.acute_med_days == 1
    assert kpis.triptan_days == 1
    assert kpis.avg_pain == 4.5
    assert kpis.max_pain == 7


def test_avg_pain_rounds_to_one_decimal_half_up():
    days = [_day("2026-01-01", pain=3), _day("2026-01-02", pain=4), _day("2026-01-03", pain=4)]
    # 11 / 3 = 3.666...
    assert compute_kpis(days, 3).avg_pain == 3.7
    days = [_day("2026-01-01", pain=2), _day("2026-01-02", pain=2.5)]
    assert compute_kpis(days, 2).avg_pain == 2.3


def test_no_headache_days_gives_null_pain_stats():
    kpis = compute_kpis([_day("2026-01-01", pain=0)], 1)
    assert kpis.avg_pain is None
    assert kpis.max_pain is None


def test_preventive_flag_is_pass_through():
    assert compute_kpis([], 0, preventive_med_active=True).preventive_med_active is True
    assert compute_kpis([], 0).preventive_med_active is False


def test_basis_invariant():
    days = [_day("2026-01-01", pain=1), _day("2026-01-02", documented=False)]
    basis = compute_basis(days)
    assert basis.total_days_in_range == 2
    assert basis.documented_days + basis.undocumented_days == basis.total_days_in_range
    basis = compute_basis(days, 10)
    assert (basis.documented_days, basis.undocumented_days) == (1, 9)


def test_moh_flag_from_report():
    entries = [entry(day_iso("2026-01-01", i), 6, acute=True, triptan=True) for i in range(10)]
    report = compute_miary_report({"range": {"startISO": "2026-01-01", "endISO": "2026-01-30", "totalDaysInRange": 30}, "entries": entries})
    assert report.kpis.triptan_days == 10
    assert report.kpis.moh_risk_flag is MohRiskFlag.LIKELY
