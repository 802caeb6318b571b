"""
Weather / headache association.

Buckets documented days by 24h pressure change (and, with enough data, by
absolute pressure), reports headache and acute-medication rates per bucket
and a relative risk of a pressure-drop bucket against the stable one.
Small samples never raise: they downgrade ``confidence`` and add notes.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

from miary.observability.instrument import log_computation
from miary.schemas.weather import (
    RelativeRiskResult,
    WeatherAbsolutePressure,
    WeatherAnalysisV2,
    WeatherBucketKey,
    WeatherBucketResult,
    WeatherConfidence,
    WeatherCoverage,
    WeatherCoverageCounts,
    WeatherCoverageInfo,
    WeatherDayFeature,
    WeatherPressureDelta24h,
)
from miary.utils.numeric import mean, round_half_up, safe_divide

logger = logging.getLogger(__name__)

MIN_DAYS_FOR_STATEMENT = 20
MEDIUM_CONFIDENCE_DAYS = 30
HIGH_CONFIDENCE_DAYS = 60
MIN_DAYS_PER_BUCKET = 5
MIN_DAYS_ABSOLUTE_PRESSURE = 60
LOW_DELTA_COVERAGE_RATIO = 0.5
CONFOUND_RATE_SPREAD = 0.2

# hPa
DELTA_STRONG_DROP = -8
DELTA_MODERATE_DROP = -3
PRESSURE_LOW = 1005
PRESSURE_HIGH = 1025

BUCKET_LABELS = {
    WeatherBucketKey.STRONG_DROP: "Strong drop (<= -8 hPa)",
    WeatherBucketKey.MODERATE_DROP: "Moderate drop (-8 to -3 hPa)",
    WeatherBucketKey.STABLE_OR_RISE: "Stable / rise (> -3 hPa)",
    WeatherBucketKey.LOW: "Low pressure (< 1005 hPa)",
    WeatherBucketKey.NORMAL: "Normal pressure (1005-1025 hPa)",
    WeatherBucketKey.HIGH: "High pressure (> 1025 hPa)",
}

WEATHER_DISCLAIMER = (
    "Orientation only, based on your own diary. Correlation is not causation. "
    "This is not a diagnosis."
)

FeatureLike = Union[WeatherDayFeature, Mapping[str, Any]]


def _round2(value: float) -> float:
    return round_half_up(value, 2)


def determine_confidence(n_days: int) -> WeatherConfidence:
    if n_days >= HIGH_CONFIDENCE_DAYS:
        return WeatherConfidence.HIGH
    if n_days >= MEDIUM_CONFIDENCE_DAYS:
        return WeatherConfidence.MEDIUM
    if n_days >= MIN_DAYS_FOR_STATEMENT:
        return WeatherConfidence.LOW
    return WeatherConfidence.INSUFFICIENT


def has_any_weather_value(feature: WeatherDayFeature) -> bool:
    return any(v is not None for v in (feature.pressure_mb, feature.temperature_c, feature.humidity))


def has_delta(feature: WeatherDayFeature) -> bool:
    return feature.pressure_change_24h is not None


def build_bucket(key: WeatherBucketKey, days: Sequence[WeatherDayFeature]) -> WeatherBucketResult:
    n = len(days)
    headache = [d for d in days if d.had_headache]
    acute = sum(1 for d in days if d.had_acute_med)
    return WeatherBucketResult(
        key=key,
        label=BUCKET_LABELS[key],
        n_days=n,
        headache_rate=_round2(len(headache) / n) if n else 0.0,
        mean_pain_max=mean((d.pain_max for d in headache), digits=2),
        acute_med_rate=_round2(acute / n) if n else 0.0,
    )


def compute_relative_risk(reference: WeatherBucketResult, compare: WeatherBucketResult) -> Optional[RelativeRiskResult]:
    """
    Relative risk of ``compare`` against ``reference``. ``absDiff`` is always
    compare minus reference; ``rr`` is None when the reference rate is zero.
    """
    if reference.n_days < MIN_DAYS_PER_BUCKET or compare.n_days < MIN_DAYS_PER_BUCKET:
        return None
    ratio = safe_divide(compare.headache_rate, reference.headache_rate)
    return RelativeRiskResult(
        reference_label=reference.label,
        compare_label=compare.label,
        rr=_round2(ratio) if ratio is not None else None,
        abs_diff=_round2(compare.headache_rate - reference.headache_rate),
    )


def _split(
    days: Iterable[WeatherDayFeature],
    value: Callable[[WeatherDayFeature], float],
    rules: Sequence[tuple[WeatherBucketKey, Callable[[float], bool]]],
) -> List[WeatherBucketResult]:
    days = list(days)
    return [build_bucket(key, [d for d in days if accept(value(d))]) for key, accept in rules]


def _small_bucket_notes(buckets: Sequence[WeatherBucketResult]) -> List[str]:
    return [
        f"{b.label}: only {b.n_days} days (< {MIN_DAYS_PER_BUCKET}), limited significance."
        for b in buckets
        if 0 < b.n_days < MIN_DAYS_PER_BUCKET
    ]


def analyze_pressure_delta(days: Sequence[WeatherDayFeature], coverage: WeatherCoverageInfo) -> WeatherPressureDelta24h:
    paired = [d for d in days if has_delta(d)]
    confidence = determine_confidence(len(paired))

    if confidence is WeatherConfidence.INSUFFICIENT:
        if not paired:
            note = "No 24h pressure change data available."
        else:
            note = f"Only {len(paired)} days with 24h pressure change data. At least {MIN_DAYS_FOR_STATEMENT} needed."
        return WeatherPressureDelta24h(enabled=False, confidence=confidence, buckets=[], relative_risk=None, notes=[note])

    strong, moderate, stable = _split(
        paired,
        lambda d: d.pressure_change_24h,
        [
            (WeatherBucketKey.STRONG_DROP, lambda v: v <= DELTA_STRONG_DROP),
            (WeatherBucketKey.MODERATE_DROP, lambda v: DELTA_STRONG_DROP < v <= DELTA_MODERATE_DROP),
            (WeatherBucketKey.STABLE_OR_RISE, lambda v: v > DELTA_MODERATE_DROP),
        ],
    )
    buckets = [strong, moderate, stable]
    notes = _small_bucket_notes(buckets)

    relative_risk = None
    if stable.n_days >= MIN_DAYS_PER_BUCKET:
        compare = strong if strong.n_days >= MIN_DAYS_PER_BUCKET else moderate
        relative_risk = compute_relative_risk(stable, compare)

    if coverage.ratio_delta_24h < LOW_DELTA_COVERAGE_RATIO:
        notes.append("24h pressure change is only available for part of the days. Significance may be limited.")

    rates = [b.acute_med_rate for b in buckets if b.n_days >= MIN_DAYS_PER_BUCKET]
    if len(rates) >= 2 and max(rates) - min(rates) > CONFOUND_RATE_SPREAD:
        notes.append(
            "Acute medication rate differs between pressure groups. "
            "Medication may mask the natural pain pattern."
        )

    return WeatherPressureDelta24h(
        enabled=True,
        confidence=confidence,
        buckets=buckets,
        relative_risk=relative_risk,
        notes=notes,
    )


def analyze_absolute_pressure(days: Sequence[WeatherDayFeature]) -> Optional[WeatherAbsolutePressure]:
    paired = [d for d in days if d.pressure_mb is not None]
    if len(paired) < MIN_DAYS_ABSOLUTE_PRESSURE:
        return None

    buckets = _split(
        paired,
        lambda d: d.pressure_mb,
        [
            (WeatherBucketKey.LOW, lambda v: v < PRESSURE_LOW),
            (WeatherBucketKey.NORMAL, lambda v: PRESSURE_LOW <= v <= PRESSURE_HIGH),
            (WeatherBucketKey.HIGH, lambda v: v > PRESSURE_HIGH),
        ],
    )
    return WeatherAbsolutePressure(
        enabled=True,
        confidence=determine_confidence(len(paired)),
        buckets=buckets,
        notes=_small_bucket_notes(buckets),
    )


def compute_coverage_info(
    days: Sequence[WeatherDayFeature],
    coverage_counts: Optional[WeatherCoverageCounts] = None,
) -> WeatherCoverageInfo:
    documented = len(days)
    with_weather = sum(1 for d in days if has_any_weather_value(d))
    with_delta = sum(1 for d in days if has_delta(d))

    if coverage_counts is None:
        coverage_counts = WeatherCoverageCounts(
            days_with_entry_weather=sum(1 for d in days if d.weather_coverage is WeatherCoverage.ENTRY),
            days_with_snapshot_weather=sum(1 for d in days if d.weather_coverage is WeatherCoverage.SNAPSHOT),
            days_with_no_weather=sum(1 for d in days if d.weather_coverage is WeatherCoverage.NONE),
        )

    return WeatherCoverageInfo(
        days_documented=documented,
        days_with_weather=with_weather,
        days_with_delta_24h=with_delta,
        ratio_weather=_round2(with_weather / documented) if documented else 0.0,
        ratio_delta_24h=_round2(with_delta / documented) if documented else 0.0,
        days_with_entry_weather=coverage_counts.days_with_entry_weather,
        days_with_snapshot_weather=coverage_counts.days_with_snapshot_weather,
        days_with_no_weather=coverage_counts.days_with_no_weather,
    )


@log_computation("weather_association")
def compute_weather_association(
    features: Iterable[FeatureLike],
    *,
    coverage_counts: Optional[Union[WeatherCoverageCounts, Mapping[str, Any]]] = None,
) -> WeatherAnalysisV2:
    parsed = [f if isinstance(f, WeatherDayFeature) else WeatherDayFeature.model_validate(f) for f in features]
    documented = [f for f in parsed if f.documented]
    if coverage_counts is not None and not isinstance(coverage_counts, WeatherCoverageCounts):
        coverage_counts = WeatherCoverageCounts.model_validate(coverage_counts)

    coverage = compute_coverage_info(documented, coverage_counts)
    delta = analyze_pressure_delta(documented, coverage)
    logger.debug("weather association: %d paired days, confidence=%s", coverage.days_with_delta_24h, delta.confidence.value)

    return WeatherAnalysisV2(
        coverage=coverage,
        pressure_delta_24h=delta,
        absolute_pressure=analyze_absolute_pressure(documented),
        disclaimer=WEATHER_DISCLAIMER,
    )
