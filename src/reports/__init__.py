"""Executive report generation over recent reviews.

Usage:
    from src.reports import ReportJob

    job = ReportJob(gateway, repository)
    result = await job.generate()
    if not result.no_data:
        print(result.markdown)
"""

from src.reports.config import ReportConfig
from src.reports.job import ReportEntry, ReportJob, ReportResult, normalize_review

__all__ = [
    "ReportConfig",
    "ReportEntry",
    "ReportJob",
    "ReportResult",
    "normalize_review",
]
