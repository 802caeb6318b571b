# miary/schemas/weather.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from miary.schemas.common import CamelModel
from miary.schemas.report import DayCountRecord


class WeatherCoverage(str, Enum):
    ENTRY = "entry"
    SNAPSHOT = "snapshot"
    NONE = "none"


class WeatherConfidence(str, Enum):
    INSUFFICIENT = "insufficient"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class WeatherBucketKey(str, Enum):
    STRONG_DROP = "strong_drop"
    MODERATE_DROP = "moderate_drop"
    STABLE_OR_RISE = "stable_or_rise"
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


# ---------- database-shaped rows (snake_case, as stored) ----------

Timestamp = Union[datetime, str]


class WeatherLogForFeature(BaseModel):
    id: int
    snapshot_date: Optional[str] = None
    requested_at: Optional[Timestamp] = None
    pressure_mb: Optional[float] = None
    pressure_change_24h: Optional[float] = None
    temperature_c: Optional[float] = None
    humidity: Optional[float] = None


class EntryForWeatherJoin(BaseModel):
    selected_date: Optional[str] = None
    selected_time: Optional[str] = None
    occurred_at: Optional[Timestamp] = None
    timestamp_created: Optional[Timestamp] = None
    weather_id: Optional[int] = None
    entry_kind: Optional[str] = None
    pain_level: Optional[Union[str, float]] = None


# ---------- features ----------

class WeatherDayFeature(CamelModel):
    date: str
    documented: bool = True
    pain_max: float = 0
    had_headache: bool = False
    had_acute_med: bool = False
    pressure_mb: Optional[float] = None
    pressure_change_24h: Optional[float] = None
    temperature_c: Optional[float] = None
    humidity: Optional[float] = None
    weather_coverage: WeatherCoverage = WeatherCoverage.NONE


class WeatherCoverageCounts(CamelModel):
    days_with_entry_weather: int = 0
    days_with_snapshot_weather: int = 0
    days_with_no_weather: int = 0


class BuildWeatherDayFeaturesInput(CamelModel):
    counts_by_day: List[DayCountRecord] = Field(default_factory=list)
    entries: List[EntryForWeatherJoin] = Field(default_factory=list)
    weather_logs: List[WeatherLogForFeature] = Field(default_factory=list)
    timezone: Optional[str] = None
    prefer_pain_as_target: Optional[bool] = None


class BuildWeatherDayFeaturesResult(CamelModel):
    features: List[WeatherDayFeature]
    coverage_counts: WeatherCoverageCounts


# ---------- association ----------

class WeatherBucketResult(CamelModel):
    key: WeatherBucketKey
    label: str
    n_days: int
    headache_rate: float
    mean_pain_max: Optional[float] = None
    acute_med_rate: float


class RelativeRiskResult(CamelModel):
    reference_label: str
    compare_label: str
    rr: Optional[float] = None
    abs_diff: float


class WeatherCoverageInfo(CamelModel):
    days_documented: int
    days_with_weather: int
    days_with_delta_24h: int
    ratio_weather: float
    ratio_delta_24h: float
    days_with_entry_weather: int
    days_with_snapshot_weather: int
    days_with_no_weather: int


class WeatherPressureDelta24h(CamelModel):
    enabled: bool
    confidence: WeatherConfidence
    buckets: List[WeatherBucketResult] = Field(default_factory=list)
    relative_risk: Optional[RelativeRiskResult] = None
    notes: List[str] = Field(default_factory=list)


class WeatherAbsolutePressure(CamelModel):
    enabled: bool
    confidence: WeatherConfidence
    buckets: List[WeatherBucketResult] = Field(default_factory=list)
    notes: List[str] = Field(default_factory=list)


class WeatherAnalysisV2(CamelModel):
    coverage: WeatherCoverageInfo
    pressure_delta_24h: WeatherPressureDelta24h
    absolute_pressure: Optional[WeatherAbsolutePressure] = None
    disclaimer: str


class WeatherAssociationRequest(CamelModel):
    features: List[WeatherDayFeature] = Field(default_factory=list)
    coverage_counts: Optional[WeatherCoverageCounts] = None
