# miary/routers/weather.py
from __future__ import annotations

from fastapi import APIRouter, Query

from miary.schemas.common import ok, meta_now
from miary.schemas.weather import BuildWeatherDayFeaturesInput, WeatherAssociationRequest
from miary.services.weather_association import compute_weather_association
from miary.services.weather_features import build_weather_day_features

router = APIRouter(prefix="/api/weather", tags=["weather"])


@router.post("/features")
def weather_day_features(
    body: BuildWeatherDayFeaturesInput,
    return_counts: bool = Query(False, alias="returnCounts"),
):
    if return_counts:
        result = build_weather_day_features(body, return_counts=True)
        data = result.to_wire()
    else:
        data = [f.to_wire() for f in build_weather_day_features(body)]
    return ok(
        data=data,
        meta=meta_now(operation="build_weather_day_features", return_counts=return_counts),
    )


@router.post("/association")
def weather_association(body: WeatherAssociationRequest):
    analysis = compute_weather_association(body.features, coverage_counts=body.coverage_counts)
    return ok(
        data=analysis.to_wire(),
        meta=meta_now(operation="compute_weather_association", features=len(body.features)),
    )
