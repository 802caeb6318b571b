"""
Counting rules for the report engine.

Every medical counting decision (what is a headache day, a treatment day,
when medication overuse becomes a risk) lives here and nowhere else.
"""
from __future__ import annotations

from typing import Iterable, Mapping, Optional

from miary.schemas.report import MeCfsSeverity, MohRiskFlag

# ordinal used for "worst level of the day"
SEVERITY_ORDER: Mapping[MeCfsSeverity, int] = {
    MeCfsSeverity.NONE: 0,
    MeCfsSeverity.MILD: 1,
    MeCfsSeverity.MODERATE: 2,
    MeCfsSeverity.SEVERE: 3,
}

MOH_TRIPTAN_LIKELY = 10
MOH_ACUTE_LIKELY = 15
MOH_TRIPTAN_POSSIBLE = 8
MOH_ACUTE_POSSIBLE = 12


def is_documented_day(has_any_entry: bool) -> bool:
    """A day counts as documented as soon as one entry exists, even an all-"none" one."""
    return bool(has_any_entry)


def is_headache_day(pain_max: Optional[float]) -> bool:
    return pain_max is not None and pain_max > 0


def is_treatment_day(acute_med_used: bool) -> bool:
    return bool(acute_med_used)


def _as_severity(level) -> Optional[MeCfsSeverity]:
    if level is None:
        return None
    try:
        return MeCfsSeverity(level)
    except ValueError:
        return None


def compute_me_cfs_max(levels: Optional[Iterable]) -> Optional[MeCfsSeverity]:
    """
    Highest severity among the given levels. None and unknown values are
    skipped; an empty or all-None input yields None.
    """
    best: Optional[MeCfsSeverity] = None
    for raw in levels or ():
        level = _as_severity(raw)
        if level is None:
            continue
        if best is None or SEVERITY_ORDER[level] > SEVERITY_ORDER[best]:
            best = level
    return best


def compute_moh_risk_flag(counts: Mapping[str, int], range_days: Optional[int] = None) -> MohRiskFlag:
    """
    Medication-overuse heuristic on absolute day counts.

    ``counts`` carries ``triptanDays``/``acuteMedDays``/``headacheDays`` (the
    snake_case keys are accepted too). ``range_days`` is reserved for a future
    rate-based rule and is intentionally not used.
    """
    triptan_days = _count(counts, "triptanDays", "triptan_days")
    acute_days = _count(counts, "acuteMedDays", "acute_med_days")

    if triptan_days >= MOH_TRIPTAN_LIKELY or acute_days >= MOH_ACUTE_LIKELY:
        return MohRiskFlag.LIKELY
    if triptan_days >= MOH_TRIPTAN_POSSIBLE or acute_days >= MOH_ACUTE_POSSIBLE:
        return MohRiskFlag.POSSIBLE
    return MohRiskFlag.NONE


def _count(counts: Mapping[str, int], *keys: str) -> int:
    for key in keys:
        value = counts.get(key)
        if value is not None:
            return int(value)
    return 0


__all__ = [
    "SEVERITY_ORDER",
    "is_documented_day",
    "is_headache_day",
    "is_treatment_day",
    "compute_me_cfs_max",
    "compute_moh_risk_flag",
]
