"""
Joins per-day records with diary entries and weather logs.

For every documented day a target time is resolved (earliest pain entry,
else earliest timed entry, else local noon) and the weather reading nearest
to it is picked: the one linked from an entry first, a same-day snapshot
second. Times count at minute precision; a linked entry without a readable
time sits at local noon. Equal distances resolve to the lowest id.
"""
from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Union, overload
from zoneinfo import ZoneInfo

from miary.config import get_settings
from miary.observability.instrument import log_computation
from miary.schemas.weather import (
    BuildWeatherDayFeaturesInput,
    BuildWeatherDayFeaturesResult,
    EntryForWeatherJoin,
    WeatherCoverage,
    WeatherCoverageCounts,
    WeatherDayFeature,
    WeatherLogForFeature,
)
from miary.utils.timezones import (
    NOON,
    ClockTime,
    local_time_to_epoch_ms,
    parse_selected_time,
    resolve_zone,
    to_epoch_ms,
    to_local_date_iso,
)

logger = logging.getLogger(__name__)

FeaturesInput = Union[BuildWeatherDayFeaturesInput, Mapping[str, Any]]


def resolve_entry_day(entry: EntryForWeatherJoin, zone: ZoneInfo) -> Optional[str]:
    """selected_date, else local date of occurred_at, else local date of timestamp_created."""
    if entry.selected_date:
        return entry.selected_date
    for instant in (entry.occurred_at, entry.timestamp_created):
        day = to_local_date_iso(instant, zone)
        if day:
            return day
    return None


def is_pain_entry(entry: EntryForWeatherJoin) -> bool:
    if entry.entry_kind:
        return entry.entry_kind == "pain"
    return entry.pain_level is not None and entry.pain_level != ""


def has_valid_time(entry: EntryForWeatherJoin) -> bool:
    return bool(entry.selected_date) and parse_selected_time(entry.selected_time) is not None


def entry_epoch_ms(entry: EntryForWeatherJoin, zone: ZoneInfo) -> Optional[float]:
    """
    Instant of selected_date + selected_time at minute precision. An entry
    without a readable time sits at local noon; None only without a date.
    """
    if not entry.selected_date:
        return None
    clock = parse_selected_time(entry.selected_time) or NOON
    return local_time_to_epoch_ms(entry.selected_date, ClockTime(clock.hour, clock.minute), zone)


def resolve_target_ms(
    day_entries: Sequence[EntryForWeatherJoin],
    date_iso: str,
    zone: ZoneInfo,
    prefer_pain: bool = True,
) -> float:
    timed = [
        (entry, ms)
        for entry in day_entries
        if has_valid_time(entry) and (ms := entry_epoch_ms(entry, zone)) is not None
    ]

    if prefer_pain:
        pain_times = [ms for entry, ms in timed if is_pain_entry(entry)]
        if pain_times:
            return min(pain_times)
    if timed:
        return min(ms for _, ms in timed)

    noon = local_time_to_epoch_ms(date_iso, NOON, zone)
    # day keys that are not dates cannot be anchored; every candidate is then equally far
    return noon if noon is not None else 0.0


def _distance(ms: Optional[float], target_ms: float) -> float:
    return math.inf if ms is None else abs(ms - target_ms)


def pick_nearest_entry(
    entries: Sequence[EntryForWeatherJoin],
    target_ms: float,
    zone: ZoneInfo,
) -> Optional[EntryForWeatherJoin]:
    if not entries:
        return None
    return min(
        entries,
        key=lambda e: (
            _distance(entry_epoch_ms(e, zone), target_ms),
            e.weather_id if e.weather_id is not None else math.inf,
        ),
    )


def pick_nearest_weather_log(logs: Sequence[WeatherLogForFeature], target_ms: float) -> Optional[WeatherLogForFeature]:
    if not logs:
        return None
    timed = [wl for wl in logs if wl.requested_at is not None]
    if not timed:
        return min(logs, key=lambda wl: wl.id)
    return min(timed, key=lambda wl: (_distance(to_epoch_ms(wl.requested_at), target_ms), wl.id))


def _weather_log_day(log: WeatherLogForFeature, zone: ZoneInfo) -> Optional[str]:
    if log.snapshot_date:
        return log.snapshot_date
    return to_local_date_iso(log.requested_at, zone)


@overload
def build_weather_day_features(data: FeaturesInput, return_counts: Literal[False] = ...) -> List[WeatherDayFeature]: ...


@overload
def build_weather_day_features(data: FeaturesInput, return_counts: Literal[True]) -> BuildWeatherDayFeaturesResult: ...


@log_computation("weather_day_features")
def build_weather_day_features(
    data: FeaturesInput,
    return_counts: bool = False,
) -> Union[List[WeatherDayFeature], BuildWeatherDayFeaturesResult]:
    payload = data if isinstance(data, BuildWeatherDayFeaturesInput) else BuildWeatherDayFeaturesInput.model_validate(data)
    settings = get_settings()
    zone = resolve_zone(payload.timezone)
    prefer_pain = (
        payload.prefer_pain_as_target
        if payload.prefer_pain_as_target is not None
        else settings.PREFER_PAIN_AS_TARGET
    )

    known_days = {d.date_iso for d in payload.counts_by_day}
    logs_by_id: Dict[int, WeatherLogForFeature] = {}
    for wl in payload.weather_logs:
        logs_by_id.setdefault(wl.id, wl)

    entries_by_day: Dict[str, List[EntryForWeatherJoin]] = defaultdict(list)
    for entry in payload.entries:
        day = resolve_entry_day(entry, zone)
        if day in known_days:
            entries_by_day[day].append(entry)

    snapshots_by_day: Dict[str, List[WeatherLogForFeature]] = defaultdict(list)
    for wl in payload.weather_logs:
        day = _weather_log_day(wl, zone)
        if day:
            snapshots_by_day[day].append(wl)

    features: List[WeatherDayFeature] = []
    counts = WeatherCoverageCounts()

    for day in payload.counts_by_day:
        if not day.documented:
            continue

        day_entries = entries_by_day.get(day.date_iso, [])
        target_ms = resolve_target_ms(day_entries, day.date_iso, zone, prefer_pain)

        log: Optional[WeatherLogForFeature] = None
        coverage = WeatherCoverage.NONE

        linked = pick_nearest_entry([e for e in day_entries if e.weather_id is not None], target_ms, zone)
        if linked is not None and linked.weather_id in logs_by_id:
            log = logs_by_id[linked.weather_id]
            coverage = WeatherCoverage.ENTRY
        else:
            log = pick_nearest_weather_log(snapshots_by_day.get(day.date_iso, []), target_ms)
            if log is not None:
                coverage = WeatherCoverage.SNAPSHOT

        if coverage is WeatherCoverage.ENTRY:
            counts.days_with_entry_weather += 1
        elif coverage is WeatherCoverage.SNAPSHOT:
            counts.days_with_snapshot_weather += 1
        else:
            counts.days_with_no_weather += 1

        features.append(WeatherDayFeature(
            date=day.date_iso,
            documented=True,
            pain_max=day.pain_max if day.pain_max is not None else 0,
            had_headache=day.headache,
            had_acute_med=day.acute_med_used,
            pressure_mb=log.pressure_mb if log else None,
            pressure_change_24h=log.pressure_change_24h if log else None,
            temperature_c=log.temperature_c if log else None,
            humidity=log.humidity if log else None,
            weather_coverage=coverage,
        ))

    logger.debug(
        "weather features: %d days, entry=%d snapshot=%d none=%d",
        len(features),
        counts.days_with_entry_weather,
        counts.days_with_snapshot_weather,
        counts.days_with_no_weather,
    )

    if return_counts:
        return BuildWeatherDayFeaturesResult(features=features, coverage_counts=counts)
    return features
