from __future__ import annotations

from typing import Optional, Sequence

from miary.schemas.report import DayCountRecord, ReportBasis, ReportKpis
from miary.services.definitions import compute_moh_risk_flag
from miary.utils.numeric import mean


def compute_basis(counts_by_day: Sequence[DayCountRecord], total_days_in_range: Optional[int] = None) -> ReportBasis:
    """
    Day basis of a report. An explicit ``total_days_in_range`` wins over the
    number of distinct days seen.
    """
    documented = sum(1 for d in counts_by_day if d.documented)
    total = total_days_in_range if total_days_in_range is not None else len(counts_by_day)
    return ReportBasis(
        total_days_in_range=total,
        documented_days=documented,
        undocumented_days=total - documented,
    )


def compute_kpis(
    counts_by_day: Sequence[DayCountRecord],
    range_days: int,
    preventive_med_active: bool = False,
) -> ReportKpis:
    headache_days = treatment_days = acute_days = triptan_days = 0
    pains: list[float] = []

    for day in counts_by_day:
        if not day.documented:
            continue
        if day.headache:
            headache_days += 1
            if day.pain_max is not None:
                pains.append(day.pain_max)
        if day.treatment:
            treatment_days += 1
        if day.acute_med_used:
            acute_days += 1
        if day.triptan_used:
            triptan_days += 1

    moh = compute_moh_risk_flag(
        {"triptanDays": triptan_days, "acuteMedDays": acute_days, "headacheDays": headache_days},
        range_days,
    )

    return ReportKpis(
        headache_days=headache_days,
        treatment_days=treatment_days,
        avg_pain=mean(pains, digits=1),
        max_pain=max(pains) if pains else None,
        triptan_days=triptan_days,
        acute_med_days=acute_days,
        preventive_med_active=preventive_med_active,
        moh_risk_flag=moh,
    )
