from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional, Sequence

from miary.schemas.report import (
    DayCountRecord,
    DonutSegment,
    HeadacheDaysDonut,
    HeadacheDonutKey,
    LegacyHeadacheDaysPie,
    LegacyPieKey,
    LegacyPieSegment,
    MeCfsChart,
    MeCfsDonutKey,
    MeCfsDonutSegment,
    MedicationChart,
    MedicationChartItem,
    PainIntensityTrend,
    PainTrendPoint,
    ReportBasis,
    ReportCharts,
    ReportEntryInput,
    ReportOptions,
    TimeOfDayBucket,
    TimeOfDayDistribution,
    TimeOfDayEntry,
)
from miary.utils.numeric import mean


def build_headache_donut(basis: ReportBasis, headache_days: int) -> HeadacheDaysDonut:
    return HeadacheDaysDonut(segments=[
        DonutSegment(key=HeadacheDonutKey.HEADACHE, days=headache_days),
        DonutSegment(key=HeadacheDonutKey.NO_HEADACHE, days=basis.documented_days - headache_days),
        DonutSegment(key=HeadacheDonutKey.UNDOCUMENTED, days=basis.undocumented_days),
    ])


def build_pain_trend(counts_by_day: Sequence[DayCountRecord]) -> PainIntensityTrend:
    ordered = sorted(counts_by_day, key=lambda d: d.date_iso)
    return PainIntensityTrend(points=[PainTrendPoint(date_iso=d.date_iso, value=d.pain_max) for d in ordered])


def build_time_of_day() -> TimeOfDayDistribution:
    # entries carry no time of day yet; keep the four buckets so renderers stay stable
    return TimeOfDayDistribution(buckets=[TimeOfDayEntry(bucket=b, headache_days=0) for b in TimeOfDayBucket])


def build_medication_chart(entries: Sequence[ReportEntryInput]) -> MedicationChart:
    """
    Per medication id: distinct days used and the mean rated effect (1 decimal).
    Most-used first; ties keep first-seen order.
    """
    names: Dict[str, str] = {}
    days: Dict[str, set] = {}
    effects: Dict[str, List[float]] = {}

    for entry in entries:
        for med in entry.medications or ():
            if med.medication_id not in names:
                names[med.medication_id] = med.name
                days[med.medication_id] = set()
                effects[med.medication_id] = []
            days[med.medication_id].add(entry.date_iso)
            if med.effect is not None:
                effects[med.medication_id].append(med.effect)

    items = [
        MedicationChartItem(
            medication_id=med_id,
            name=name,
            days_used=len(days[med_id]),
            avg_effect=mean(effects[med_id], digits=1),
        )
        for med_id, name in names.items()
    ]
    items.sort(key=lambda item: item.days_used, reverse=True)
    return MedicationChart(items=items)


def build_me_cfs_donut(counts_by_day: Sequence[DayCountRecord], total_days_in_range: int) -> MeCfsChart:
    counts: Counter = Counter()
    for day in counts_by_day:
        if day.documented and day.me_cfs_max is not None:
            counts[MeCfsDonutKey(day.me_cfs_max.value)] += 1
        else:
            counts[MeCfsDonutKey.UNDOCUMENTED] += 1

    # days of the range that never showed up in the input are undocumented too
    missing = total_days_in_range - len(counts_by_day)
    if missing > 0:
        counts[MeCfsDonutKey.UNDOCUMENTED] += missing

    return MeCfsChart(donut=[MeCfsDonutSegment(key=key, days=counts[key]) for key in MeCfsDonutKey])


def build_legacy_pie(counts_by_day: Sequence[DayCountRecord], total_days_in_range: int) -> LegacyHeadacheDaysPie:
    """
    Three-way day split with priority triptan > pain without triptan > pain free.
    Every record is classified, documented or not. Pain free is the remainder
    so the segments always add up to the range.
    """
    triptan = pain_no_triptan = 0
    for day in counts_by_day:
        if day.triptan_used:
            triptan += 1
        elif day.headache:
            pain_no_triptan += 1

    return LegacyHeadacheDaysPie(segments=[
        LegacyPieSegment(key=LegacyPieKey.PAIN_FREE, days=total_days_in_range - triptan - pain_no_triptan),
        LegacyPieSegment(key=LegacyPieKey.PAIN_NO_TRIPTAN, days=pain_no_triptan),
        LegacyPieSegment(key=LegacyPieKey.TRIPTAN, days=triptan),
    ])


def build_charts(
    *,
    counts_by_day: Sequence[DayCountRecord],
    entries: Sequence[ReportEntryInput],
    basis: ReportBasis,
    headache_days: int,
    options: Optional[ReportOptions] = None,
) -> ReportCharts:
    options = options or ReportOptions()
    total = basis.total_days_in_range

    return ReportCharts(
        headache_days_donut=build_headache_donut(basis, headache_days),
        pain_intensity_trend=build_pain_trend(counts_by_day),
        time_of_day_distribution=build_time_of_day(),
        medications=build_medication_chart(entries) if options.include_medications else MedicationChart(),
        me_cfs=build_me_cfs_donut(counts_by_day, total) if options.include_me_cfs else None,
        legacy_headache_days_pie=build_legacy_pie(counts_by_day, total),
    )
