# miary/routers/report.py
from __future__ import annotations

from fastapi import APIRouter

from miary.schemas.adapters import AppAnalysisReportArgs, BuildPdfReportArgs
from miary.schemas.common import ok, meta_now
from miary.schemas.report import ComputeReportInput, CoverageRequest
from miary.services.adapters import build_app_analysis_report, build_pdf_report
from miary.services.aggregate import compute_miary_report
from miary.services.coverage import compute_coverage

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("/compute")
def compute_report(body: ComputeReportInput):
    report = compute_miary_report(body)
    return ok(
        data=report.to_wire(),
        meta=meta_now(operation="compute_miary_report", entries=len(body.entries)),
    )


@router.post("/pdf")
def pdf_report(body: BuildPdfReportArgs):
    result = build_pdf_report(body)
    return ok(
        data=result.to_wire(),
        meta=meta_now(operation="build_pdf_report", entries=len(body.entries)),
    )


@router.post("/app-analysis")
def app_analysis_report(body: AppAnalysisReportArgs):
    result = build_app_analysis_report(body)
    return ok(
        data=result.to_wire(),
        meta=meta_now(operation="build_app_analysis_report", entries=len(body.pain_entries)),
    )


@router.post("/coverage")
def coverage_summary(body: CoverageRequest):
    coverage = compute_coverage(
        body.days_in_range,
        body.documented_days,
        weather_days_available=body.weather_days_available,
        mecfs_days_documented=body.mecfs_days_documented,
    )
    return ok(data=coverage.to_wire(), meta=meta_now(operation="compute_coverage"))
