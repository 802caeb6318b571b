# miary/schemas/report.py
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import ConfigDict, Field, model_validator

from miary.config import get_settings
from miary.schemas.common import CamelModel


class RangeMode(str, Enum):
    LAST_30_DAYS = "LAST_30_DAYS"
    CUSTOM = "CUSTOM"
    CALENDAR_MONTH = "CALENDAR_MONTH"


class MeCfsSeverity(str, Enum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class MohRiskFlag(str, Enum):
    NONE = "none"
    POSSIBLE = "possible"
    LIKELY = "likely"


class HeadacheDonutKey(str, Enum):
    HEADACHE = "headache"
    NO_HEADACHE = "no_headache"
    UNDOCUMENTED = "undocumented"


class MeCfsDonutKey(str, Enum):
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"
    UNDOCUMENTED = "undocumented"


class LegacyPieKey(str, Enum):
    PAIN_FREE = "painFree"
    PAIN_NO_TRIPTAN = "painNoTriptan"
    TRIPTAN = "triptan"


class TimeOfDayBucket(str, Enum):
    NIGHT = "night"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


# ---------- input ----------

class ReportRange(CamelModel):
    start_iso: str
    end_iso: str
    timezone: str = Field(default_factory=lambda: get_settings().DEFAULT_TIMEZONE)
    mode: RangeMode = RangeMode.CUSTOM
    total_days_in_range: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _swap_inverted(self):
        # YYYY-MM-DD compares lexicographically
        if self.start_iso > self.end_iso:
            self.start_iso, self.end_iso = self.end_iso, self.start_iso
        return self


class ReportOptions(CamelModel):
    include_me_cfs: bool = True
    include_symptoms: bool = True
    include_medications: bool = True
    include_time_of_day: bool = True
    include_weather: bool = True


class MedicationUse(CamelModel):
    medication_id: str
    name: str
    effect: Optional[float] = None


class ReportEntryInput(CamelModel):
    date_iso: str
    pain_max: Optional[float] = None
    acute_med_used: bool = False
    triptan_used: bool = False
    me_cfs_levels: Optional[List[Optional[str]]] = None
    medications: Optional[List[MedicationUse]] = None
    documented: bool = True


class ComputeReportInput(CamelModel):
    range: ReportRange
    options: Optional[ReportOptions] = None
    entries: List[ReportEntryInput] = Field(default_factory=list)
    preventive_med_active: bool = False


# ---------- output ----------

class DayCountRecord(CamelModel):
    model_config = ConfigDict(frozen=True)

    date_iso: str
    documented: bool
    headache: bool
    treatment: bool
    pain_max: Optional[float] = None
    me_cfs_max: Optional[MeCfsSeverity] = None
    acute_med_used: bool = False
    triptan_used: bool = False


class ReportBasis(CamelModel):
    total_days_in_range: int
    documented_days: int
    undocumented_days: int


class ReportMeta(CamelModel):
    generated_at_iso: str
    range: ReportRange
    basis: ReportBasis


class ReportKpis(CamelModel):
    headache_days: int
    treatment_days: int
    avg_pain: Optional[float] = None
    max_pain: Optional[float] = None
    triptan_days: int
    acute_med_days: int
    preventive_med_active: bool = False
    moh_risk_flag: MohRiskFlag = MohRiskFlag.NONE


class DonutSegment(CamelModel):
    key: HeadacheDonutKey
    days: int


class HeadacheDaysDonut(CamelModel):
    segments: List[DonutSegment]


class PainTrendPoint(CamelModel):
    date_iso: str
    value: Optional[float] = None


class PainIntensityTrend(CamelModel):
    points: List[PainTrendPoint]


class TimeOfDayEntry(CamelModel):
    bucket: TimeOfDayBucket
    headache_days: int = 0


class TimeOfDayDistribution(CamelModel):
    buckets: List[TimeOfDayEntry]


class MedicationChartItem(CamelModel):
    medication_id: str
    name: str
    days_used: int
    avg_effect: Optional[float] = None


class MedicationChart(CamelModel):
    items: List[MedicationChartItem] = Field(default_factory=list)


class MeCfsDonutSegment(CamelModel):
    key: MeCfsDonutKey
    days: int


class MeCfsChart(CamelModel):
    donut: List[MeCfsDonutSegment]


class LegacyPieSegment(CamelModel):
    key: LegacyPieKey
    days: int


class LegacyHeadacheDaysPie(CamelModel):
    segments: List[LegacyPieSegment]


class ReportCharts(CamelModel):
    headache_days_donut: HeadacheDaysDonut
    pain_intensity_trend: PainIntensityTrend
    time_of_day_distribution: TimeOfDayDistribution
    medications: MedicationChart
    me_cfs: Optional[MeCfsChart] = None
    legacy_headache_days_pie: LegacyHeadacheDaysPie


class ReportRaw(CamelModel):
    counts_by_day: List[DayCountRecord]


class MiaryReportV2(CamelModel):
    meta: ReportMeta
    kpis: ReportKpis
    charts: ReportCharts
    raw: ReportRaw


# ---------- coverage ----------

class CoverageModule(CamelModel):
    available: int
    total: int
    ratio: float


class CoverageWarning(CamelModel):
    module: str
    message: str
    ratio: float


class AnalysisCoverage(CamelModel):
    diary: CoverageModule
    weather: Optional[CoverageModule] = None
    mecfs: Optional[CoverageModule] = None
    warnings: List[CoverageWarning] = Field(default_factory=list)


class CoverageRequest(CamelModel):
    days_in_range: int = Field(..., ge=0)
    documented_days: int = Field(..., ge=0)
    weather_days_available: Optional[int] = Field(None, ge=0)
    mecfs_days_documented: Optional[int] = Field(None, ge=0)
