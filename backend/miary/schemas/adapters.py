# miary/schemas/adapters.py
from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, Field

from miary.schemas.common import CamelModel
from miary.schemas.report import MiaryReportV2, RangeMode


class MedicationIntake(BaseModel):
    medication_name: str
    medication_id: Optional[str] = None
    dose_quarters: Optional[int] = None


class RawPainEntry(BaseModel):
    """A diary row as it comes out of the entries table."""
    id: Union[int, str]
    selected_date: Optional[str] = None
    selected_time: Optional[str] = None
    timestamp_created: Optional[str] = None
    pain_level: Optional[Union[str, float]] = None
    entry_kind: Optional[str] = None
    medications: Optional[List[str]] = None
    medication_intakes: Optional[List[MedicationIntake]] = None
    me_cfs_severity_score: Optional[float] = None
    me_cfs_severity_level: Optional[str] = None


class RawMedicationEffect(BaseModel):
    entry_id: Union[int, str]
    med_name: str
    effect_rating: Optional[str] = None
    effect_score: Optional[float] = None


class AdapterRange(CamelModel):
    start_iso: str
    end_iso: str
    timezone: Optional[str] = None
    mode: RangeMode = RangeMode.CUSTOM
    total_days_in_range: Optional[int] = Field(default=None, ge=0)


class BuildPdfReportArgs(CamelModel):
    range: AdapterRange
    entries: List[RawPainEntry] = Field(default_factory=list)
    medication_effects: List[RawMedicationEffect] = Field(default_factory=list)
    preventive_med_active: bool = False


class AppAnalysisReportArgs(CamelModel):
    range: AdapterRange
    pain_entries: List[RawPainEntry] = Field(default_factory=list)
    medication_effects: List[RawMedicationEffect] = Field(default_factory=list)
    preventive_med_active: bool = False


class PdfReportResult(CamelModel):
    report: MiaryReportV2


class AppAnalysisResult(CamelModel):
    report: MiaryReportV2
