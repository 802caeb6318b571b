"""Deterministic headache-diary report engine."""
from miary.services.adapters import build_app_analysis_report, build_pdf_report
from miary.services.aggregate import compute_miary_report
from miary.services.coverage import compute_coverage
from miary.services.weather_association import compute_weather_association
from miary.services.weather_features import build_weather_day_features

__version__ = "2.0.0"

__all__ = [
    "compute_miary_report",
    "build_weather_day_features",
    "compute_weather_association",
    "build_pdf_report",
    "build_app_analysis_report",
    "compute_coverage",
]
