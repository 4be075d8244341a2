"""Executive report endpoint."""

import time

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_report_job
from src.api.models import ReportErrorResponse, ReportNotFoundResponse, ReportResponse
from src.observability.metrics import get_metrics
from src.reports.job import ReportJob

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post(
    "/generate-report",
    response_model=ReportResponse,
    responses={
        404: {"model": ReportNotFoundResponse, "description": "No reviews stored yet"},
        500: {"model": ReportErrorResponse, "description": "Storage or AI failure"},
    },
    summary="Generate an executive report",
    description="""
    Summarize the 50 most recent reviews into a markdown report with four
    sections: sentiment trend, critical issue, top delight, and a
    recommended action.
    """,
)
async def generate_report(
    job: ReportJob = Depends(get_report_job),
) -> JSONResponse:
    start_time = time.perf_counter()

    try:
        result = await job.generate()
    except Exception as e:
        get_metrics().record_report("error")
        logger.error("generate_report_failed", error=str(e), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ReportErrorResponse(error="Internal Server Error").model_dump(),
        )

    if result.no_data:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ReportNotFoundResponse(message="No reviews found to analyze.").model_dump(),
        )

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Report generated",
        review_count=result.review_count,
        latency_ms=round(latency_ms, 2),
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=ReportResponse(report=result.markdown).model_dump(),
    )
