"""
Report assembly.

``compute_miary_report`` is the one entry point every consumer (app screens,
PDF export, server-side report job) goes through, so all of them agree on
the numbers. It is a pure function of its input apart from ``generatedAtISO``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from miary.observability.instrument import log_computation
from miary.schemas.report import (
    ComputeReportInput,
    DayCountRecord,
    MedicationUse,
    MiaryReportV2,
    ReportEntryInput,
    ReportMeta,
    ReportRaw,
)
from miary.services.charts import build_charts
from miary.services.definitions import (
    compute_me_cfs_max,
    is_documented_day,
    is_headache_day,
    is_treatment_day,
)
from miary.services.kpi import compute_basis, compute_kpis
from miary.utils.timezones import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass
class _DayAccumulator:
    documented: bool = False
    pain_max: Optional[float] = None
    acute_med_used: bool = False
    triptan_used: bool = False
    me_cfs_levels: List[Any] = field(default_factory=list)
    medications: List[MedicationUse] = field(default_factory=list)

    def add(self, entry: ReportEntryInput) -> None:
        self.documented = self.documented or entry.documented
        if entry.pain_max is not None:
            self.pain_max = entry.pain_max if self.pain_max is None else max(self.pain_max, entry.pain_max)
        self.acute_med_used = self.acute_med_used or entry.acute_med_used
        self.triptan_used = self.triptan_used or entry.triptan_used
        self.me_cfs_levels.extend(entry.me_cfs_levels or ())
        self.medications.extend(entry.medications or ())

    def to_record(self, date_iso: str) -> DayCountRecord:
        return DayCountRecord(
            date_iso=date_iso,
            documented=is_documented_day(self.documented),
            headache=is_headache_day(self.pain_max),
            treatment=is_treatment_day(self.acute_med_used),
            pain_max=self.pain_max,
            me_cfs_max=compute_me_cfs_max(self.me_cfs_levels) if self.me_cfs_levels else None,
            acute_med_used=self.acute_med_used,
            triptan_used=self.triptan_used,
        )


def aggregate_days(entries: List[ReportEntryInput]) -> List[DayCountRecord]:
    """Merge entries sharing a date into one record per day, ascending by date."""
    days: Dict[str, _DayAccumulator] = {}
    for entry in entries:
        days.setdefault(entry.date_iso, _DayAccumulator()).add(entry)
    return [days[date_iso].to_record(date_iso) for date_iso in sorted(days)]


@log_computation("miary_report")
def compute_miary_report(data: Union[ComputeReportInput, Mapping[str, Any]]) -> MiaryReportV2:
    payload = data if isinstance(data, ComputeReportInput) else ComputeReportInput.model_validate(data)

    counts_by_day = aggregate_days(payload.entries)
    basis = compute_basis(counts_by_day, payload.range.total_days_in_range)
    if basis.undocumented_days < 0:
        logger.warning(
            "totalDaysInRange=%s is smaller than the %s documented days",
            basis.total_days_in_range,
            basis.documented_days,
        )

    kpis = compute_kpis(counts_by_day, basis.total_days_in_range, payload.preventive_med_active)
    charts = build_charts(
        counts_by_day=counts_by_day,
        entries=payload.entries,
        basis=basis,
        headache_days=kpis.headache_days,
        options=payload.options,
    )

    return MiaryReportV2(
        meta=ReportMeta(generated_at_iso=utc_now_iso(), range=payload.range, basis=basis),
        kpis=kpis,
        charts=charts,
        raw=ReportRaw(counts_by_day=counts_by_day),
    )
