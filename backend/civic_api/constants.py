"""Schema constants and display mappings for reports, roles and the quiz bank.

The enumerations mirror the database enums; models store the plain string
value and request schemas validate against these classes.
"""

from enum import Enum
from typing import Dict, List


class ReportCategory(str, Enum):
    garbage = "garbage"
    pothole = "pothole"
    streetlight = "streetlight"
    traffic = "traffic"
    vandalism = "vandalism"
    water_supply = "water_supply"
    drainage = "drainage"
    other = "other"


class ReportSeverity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class ReportStatus(str, Enum):
    submitted = "submitted"
    in_review = "in_review"
    assigned = "assigned"
    in_progress = "in_progress"
    resolved = "resolved"
    rejected = "rejected"


class AppRole(str, Enum):
    admin = "admin"
    moderator = "moderator"
    user = "user"


# Storage key -> display label
CATEGORY_LABELS: Dict[str, str] = {
    "garbage": "Garbage & Waste",
    "pothole": "Potholes & Roads",
    "streetlight": "Streetlights",
    "traffic": "Traffic Issues",
    "water_supply": "Water Supply",
    "vandalism": "Vandalism",
    "drainage": "Drainage",
    "other": "Other",
}

SEVERITY_LABELS: Dict[str, str] = {
    "low": "Low - Minor inconvenience",
    "medium": "Medium - Moderate impact",
    "high": "High - Significant problem",
    "critical": "Critical - Urgent attention needed",
}

STATUS_LABELS: Dict[str, str] = {
    "submitted": "Submitted",
    "in_review": "In Review",
    "assigned": "Assigned",
    "in_progress": "In Progress",
    "resolved": "Resolved",
    "rejected": "Rejected",
}

# Progress timeline shown to reporters. "rejected" is terminal and sits
# outside the sequence.
STATUS_ORDER: List[str] = ["submitted", "in_review", "assigned", "in_progress", "resolved"]

# Statuses grouped under the "in progress" tile of the admin dashboard
IN_PROGRESS_BUCKET = frozenset({"in_review", "assigned", "in_progress"})

DEFAULT_SEVERITY = ReportSeverity.medium.value
DEFAULT_STATUS = ReportStatus.submitted.value

REPORT_NUMBER_PREFIX = "CIV"
DEFAULT_QUIZ_POINTS = 10
