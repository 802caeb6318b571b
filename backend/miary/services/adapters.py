"""
Adapters from raw diary rows to the report engine.

Both adapters only map rows into ``ReportEntryInput`` and delegate to
``compute_miary_report``; they hold no counting logic of their own.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from miary.schemas.adapters import (
    AdapterRange,
    AppAnalysisReportArgs,
    AppAnalysisResult,
    BuildPdfReportArgs,
    PdfReportResult,
    RawMedicationEffect,
    RawPainEntry,
)
from miary.schemas.report import ComputeReportInput, MedicationUse, MeCfsSeverity, ReportEntryInput, ReportRange
from miary.services.aggregate import compute_miary_report
from miary.utils.numeric import clamp, coerce_float
from miary.utils.timezones import inclusive_day_count, iter_date_isos, resolve_zone, to_local_date_iso

TRIPTAN_KEYWORDS: Tuple[str, ...] = (
    "triptan", "almotriptan", "eletriptan", "frovatriptan",
    "naratriptan", "rizatriptan", "sumatriptan", "zolmitriptan",
    "suma", "riza", "zolmi", "nara", "almo", "ele", "frova",
    "imigran", "maxalt", "ascotop", "naramig", "almogran",
    "relpax", "allegro", "dolotriptan", "formigran",
)

PAIN_LEVEL_WORDS: Dict[str, int] = {
    "-": 0,
    "keine": 0,
    "leicht": 2,
    "schwach": 2,
    "gering": 2,
    "mittel": 5,
    "moderat": 5,
    "mäßig": 5,
    "stark": 7,
    "heftig": 8,
    "sehr stark": 9,
    "extrem": 10,
    "unerträglich": 10,
}

EFFECT_RATING_SCORES: Dict[str, float] = {
    "none": 0,
    "poor": 2.5,
    "moderate": 5,
    "good": 7.5,
    "very_good": 10,
}

_LEADING_INT = re.compile(r"^\s*(-?\d+)")


def normalize_pain_level(level: Union[str, int, float, None]) -> Optional[float]:
    """
    Map a stored pain level to 0..10. Numbers are clamped, the German
    descriptors used by the diary form map to fixed values, anything
    unreadable is None.
    """
    if level is None or isinstance(level, bool):
        return None
    if isinstance(level, (int, float)):
        value = coerce_float(level)
        return clamp(value, 0, 10) if value is not None else None

    text = str(level).strip().lower().replace("_", " ")
    if not text:
        return None
    if text in PAIN_LEVEL_WORDS:
        return PAIN_LEVEL_WORDS[text]
    if "sehr" in text and "stark" in text:
        return 9
    if "stark" in text:
        return 7
    if "mittel" in text:
        return 5
    if "leicht" in text:
        return 2

    m = _LEADING_INT.match(text)
    if m:
        return clamp(int(m.group(1)), 0, 10)
    return None


def is_triptan(name: Optional[str]) -> bool:
    if not name:
        return False
    lower = name.lower()
    return any(keyword in lower for keyword in TRIPTAN_KEYWORDS)


def is_pain_entry(entry: RawPainEntry) -> bool:
    if entry.entry_kind:
        return entry.entry_kind == "pain"
    return entry.pain_level is not None and entry.pain_level != ""


def map_effect_rating_to_score(rating: Optional[str]) -> Optional[float]:
    if not rating:
        return None
    return EFFECT_RATING_SCORES.get(rating)


def _effects_by_entry(effects: Iterable[RawMedicationEffect]) -> Dict[Tuple[str, str], float]:
    lookup: Dict[Tuple[str, str], float] = {}
    for eff in effects:
        score = eff.effect_score if eff.effect_score is not None else map_effect_rating_to_score(eff.effect_rating)
        if score is None:
            continue
        # last rating for an (entry, medication) pair wins
        lookup[(str(eff.entry_id), eff.med_name)] = score
    return lookup


def _me_cfs_levels(entry: RawPainEntry) -> Optional[List[str]]:
    level = entry.me_cfs_severity_level
    if level in {s.value for s in MeCfsSeverity}:
        return [level]
    return None


def _entry_date(entry: RawPainEntry, zone) -> Optional[str]:
    if entry.selected_date:
        return entry.selected_date[:10]
    return to_local_date_iso(entry.timestamp_created, zone)


def _to_report_entry(
    entry: RawPainEntry,
    date_iso: str,
    pain_max: Optional[float],
    effects: Mapping[Tuple[str, str], float],
) -> ReportEntryInput:
    meds = entry.medications or []
    intakes = {i.medication_name: i for i in entry.medication_intakes or ()}

    medications = []
    for name in meds:
        intake = intakes.get(name)
        medications.append(MedicationUse(
            medication_id=(intake.medication_id if intake and intake.medication_id else name),
            name=name,
            effect=effects.get((str(entry.id), name)),
        ))

    return ReportEntryInput(
        date_iso=date_iso,
        pain_max=pain_max,
        acute_med_used=bool(meds),
        triptan_used=any(is_triptan(name) for name in meds),
        me_cfs_levels=_me_cfs_levels(entry),
        medications=medications or None,
        documented=True,
    )


def _report_range(rng: AdapterRange, total_days_in_range: Optional[int]) -> ReportRange:
    kwargs: Dict[str, Any] = {
        "start_iso": rng.start_iso,
        "end_iso": rng.end_iso,
        "mode": rng.mode,
        "total_days_in_range": total_days_in_range,
    }
    if rng.timezone:
        kwargs["timezone"] = rng.timezone
    return ReportRange(**kwargs)


def build_pdf_report(args: Union[BuildPdfReportArgs, Mapping[str, Any]]) -> PdfReportResult:
    """
    PDF export path. Non-pain entries carry no pain value; the day basis is the
    declared ``totalDaysInRange`` or the inclusive length of the range.
    """
    payload = args if isinstance(args, BuildPdfReportArgs) else BuildPdfReportArgs.model_validate(args)
    rng = _report_range(payload.range, None)
    zone = resolve_zone(rng.timezone)
    effects = _effects_by_entry(payload.medication_effects)

    total = payload.range.total_days_in_range
    if total is None:
        total = max(1, inclusive_day_count(rng.start_iso, rng.end_iso) or 1)

    entries: List[ReportEntryInput] = []
    for entry in payload.entries:
        date_iso = _entry_date(entry, zone)
        if not date_iso or not (rng.start_iso <= date_iso <= rng.end_iso):
            continue
        if is_pain_entry(entry):
            pain_max = normalize_pain_level(entry.pain_level) if entry.pain_level is not None else 0
        else:
            pain_max = None
        entries.append(_to_report_entry(entry, date_iso, pain_max, effects))

    report = compute_miary_report(ComputeReportInput(
        range=rng.model_copy(update={"total_days_in_range": total}),
        entries=entries,
        preventive_med_active=payload.preventive_med_active,
    ))
    return PdfReportResult(report=report)


def build_app_analysis_report(args: Union[AppAnalysisReportArgs, Mapping[str, Any]]) -> AppAnalysisResult:
    """
    In-app analysis path. Every day of the range is present: days without an
    entry become undocumented placeholders. Non-pain entries count as pain 0.
    """
    payload = args if isinstance(args, AppAnalysisReportArgs) else AppAnalysisReportArgs.model_validate(args)
    rng = _report_range(payload.range, payload.range.total_days_in_range)
    zone = resolve_zone(rng.timezone)
    effects = _effects_by_entry(payload.medication_effects)

    entries: List[ReportEntryInput] = []
    documented_dates = set()
    for entry in payload.pain_entries:
        date_iso = _entry_date(entry, zone)
        if not date_iso or not (rng.start_iso <= date_iso <= rng.end_iso):
            continue
        documented_dates.add(date_iso)
        pain_max = (normalize_pain_level(entry.pain_level) or 0) if is_pain_entry(entry) else 0
        entries.append(_to_report_entry(entry, date_iso, pain_max, effects))

    for date_iso in iter_date_isos(rng.start_iso, rng.end_iso):
        if date_iso not in documented_dates:
            entries.append(ReportEntryInput(date_iso=date_iso, pain_max=None, documented=False))

    report = compute_miary_report(ComputeReportInput(
        range=rng,
        entries=entries,
        preventive_med_active=payload.preventive_med_active,
    ))
    return AppAnalysisResult(report=report)
