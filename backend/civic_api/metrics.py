"""Prometheus counters for the report, image upload and quiz flows."""

from prometheus_client import Counter


REPORTS_SUBMITTED = Counter(
    "reports_submitted_total",
    "Total number of reports created",
    ["category"],
)
IMAGE_UPLOAD_ATTEMPTS = Counter(
    "report_image_upload_attempts_total",
    "Total number of report image upload attempts",
)
IMAGE_UPLOAD_SUCCESSES = Counter(
    "report_image_upload_success_total",
    "Total number of report images stored",
)
IMAGE_UPLOAD_FAILURES = Counter(
    "report_image_upload_failure_total",
    "Total number of report images skipped because validation or upload failed",
    ["reason"],
)
QUIZ_ANSWERS = Counter(
    "quiz_answers_total",
    "Total number of quiz answers checked",
    ["correct"],
)
