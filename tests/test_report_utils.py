import re
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from civic_api.constants import STATUS_ORDER
from civic_api.report_utils import (
    build_timeline,
    compute_stats,
    generate_report_number,
    search_reports,
    status_index,
)


def test_report_number_format():
    number = generate_report_number(datetime(2024, 12, 23, 8, 0, tzinfo=timezone.utc))
    assert re.fullmatch(r"CIV20241223-\d{5}", number)


def test_status_index_outside_sequence():
    assert status_index("submitted") == 0
    assert status_index("resolved") == 4
    assert status_index("rejected") == -1
    assert status_index(None) == -1


@pytest.mark.parametrize("status", STATUS_ORDER)
def test_timeline_marks_steps_up_to_current(status):
    timeline = build_timeline(status)
    current = STATUS_ORDER.index(status)

    assert [s["status"] for s in timeline["steps"]] == STATUS_ORDER
    assert [s["completed"] for s in timeline["steps"]] == [i <= current for i in range(5)]
    assert [s["current"] for s in timeline["steps"]] == [i == current for i in range(5)]
    assert timeline["progress"] == pytest.approx(current / 4)
    assert timeline["is_rejected"] is False


def test_rejected_is_a_badge_not_a_timeline_position():
    timeline = build_timeline("rejected")
    assert timeline["is_rejected"] is True
    assert timeline["label"] == "Rejected"
    assert timeline["progress"] == 0
    assert not any(s["completed"] or s["current"] for s in timeline["steps"])


def test_stats_partition_statuses():
    statuses = [
        "submitted", "submitted",
        "in_review", "assigned", "in_progress",
        "resolved",
        "rejected", "rejected",
    ]
    stats = compute_stats(statuses)
    assert stats == {"total": 8, "submitted": 2, "in_progress": 3, "resolved": 1}
    # rejected rows are only part of the total
    assert stats["total"] - (stats["submitted"] + stats["in_progress"] + stats["resolved"]) == 2


def test_stats_empty():
    assert compute_stats([]) == {"total": 0, "submitted": 0, "in_progress": 0, "resolved": 0}


def _report(title, number, city):
    return SimpleNamespace(title=title, report_number=number, city=city)


def test_search_matches_title_number_and_city_case_insensitively():
    reports = [
        _report("Pothole on MG Road", "CIV20260101-00001", "Pune"),
        _report("Broken streetlight", "CIV20260101-00002", "Mumbai"),
        _report("Overflowing bin", "CIV20260101-00003", None),
    ]
    assert search_reports(reports, "pothole") == [reports[0]]
    assert search_reports(reports, "civ20260101-00002") == [reports[1]]
    assert search_reports(reports, "MUMBAI") == [reports[1]]
    assert search_reports(reports, "nowhere") == []


def test_blank_search_keeps_everything():
    reports = [_report("a", "b", None)]
    assert search_reports(reports, None) == reports
    assert search_reports(reports, "   ") == reports
