from __future__ import annotations

from typing import List, Optional

from miary.schemas.report import AnalysisCoverage, CoverageModule, CoverageWarning
from miary.utils.numeric import round_half_up

LOW_DIARY_COVERAGE_THRESHOLD = 0.5
LOW_WEATHER_COVERAGE_THRESHOLD = 0.5


def build_module(available: int, total: int) -> CoverageModule:
    return CoverageModule(
        available=available,
        total=total,
        ratio=round_half_up(available / total, 3) if total > 0 else 0.0,
    )


def compute_coverage(
    days_in_range: int,
    documented_days: int,
    weather_days_available: Optional[int] = None,
    mecfs_days_documented: Optional[int] = None,
) -> AnalysisCoverage:
    """
    How much of the range each data source covers. ``None`` for weather or
    ME/CFS means the module is not in use and yields no module entry.
    """
    warnings: List[CoverageWarning] = []

    diary = build_module(documented_days, days_in_range)
    if days_in_range > 0 and diary.ratio < LOW_DIARY_COVERAGE_THRESHOLD:
        warnings.append(CoverageWarning(
            module="diary",
            message=(
                f"Only {documented_days} of {days_in_range} days documented "
                f"({int(round_half_up(diary.ratio * 100))}%). Limited significance."
            ),
            ratio=diary.ratio,
        ))

    weather = None
    if weather_days_available is not None:
        weather = build_module(weather_days_available, days_in_range)
        if days_in_range > 0 and weather.ratio < LOW_WEATHER_COVERAGE_THRESHOLD:
            warnings.append(CoverageWarning(
                module="weather",
                message=(
                    f"Weather data available for only {weather_days_available} of "
                    f"{days_in_range} days. Weather analysis is limited."
                ),
                ratio=weather.ratio,
            ))

    mecfs = build_module(mecfs_days_documented, days_in_range) if mecfs_days_documented is not None else None

    return AnalysisCoverage(diary=diary, weather=weather, mecfs=mecfs, warnings=warnings)
