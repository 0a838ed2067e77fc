"""Admin triage: report listing with dashboard stats, updates, comments and the contact inbox."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, constr
from sqlmodel import select

from .. import auth
from ..constants import AppRole, ReportCategory, ReportStatus
from ..database import get_session
from ..models import ContactMessage, Report, ReportComment, User
from ..report_utils import compute_stats, search_reports

logger = logging.getLogger("app.admin")

require_admin = auth.require_role(AppRole.admin.value)

router = APIRouter(prefix="/api/v1/admin", dependencies=[Depends(require_admin)])

_CATEGORIES = {c.value for c in ReportCategory}
_STATUSES = {s.value for s in ReportStatus}


class ReportStats(BaseModel):
    total: int
    submitted: int
    in_progress: int
    resolved: int


class AdminReportList(BaseModel):
    items: List[Report]
    stats: ReportStats


class ReportAdminUpdate(BaseModel):
    # Blank values mean "leave unchanged"
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    remarks: Optional[str] = None


class CommentCreate(BaseModel):
    comment: constr(strip_whitespace=True, min_length=1, max_length=2000)


def _filter_value(value: Optional[str], allowed: set, name: str) -> Optional[str]:
    if value is None or value == "" or value == "all":
        return None
    if value not in allowed:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {name}. Allowed: all, {', '.join(sorted(allowed))}",
        )
    return value


async def _load_report(session, report_id: str) -> Report:
    report = await session.get(Report, report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get("/reports", response_model=AdminReportList)
async def list_reports(
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Search title, report number or city"),
    session=Depends(get_session),
):
    """
    List reports newest first.

    Category/status filters run in the query. Stats are counted over the
    filtered rows before the text search is applied, so they describe the
    filtered set rather than the whole table.
    """
    category = _filter_value(category, _CATEGORIES, "category")
    status = _filter_value(status, _STATUSES, "status")

    statement = select(Report).order_by(Report.created_at.desc())
    if category:
        statement = statement.where(Report.category == category)
    if status:
        statement = statement.where(Report.status == status)

    result = await session.exec(statement)
    reports = result.all()

    stats = compute_stats(r.status for r in reports)
    return AdminReportList(items=search_reports(reports, q), stats=ReportStats(**stats))


@router.patch("/reports/{report_id}", response_model=Report)
async def update_report(
    report_id: str,
    body: ReportAdminUpdate,
    user: User = Depends(require_admin),
    session=Depends(get_session),
):
    """Partial update of status, assignee and remarks.

    Only non-blank fields are written. Moving to `resolved` stamps
    `resolved_at`. Last writer wins.
    """
    report = await _load_report(session, report_id)

    new_status = (body.status or "").strip()
    assigned_to = (body.assigned_to or "").strip()
    remarks = (body.remarks or "").strip()

    if new_status and new_status not in _STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Allowed: {', '.join(sorted(_STATUSES))}",
        )

    now = datetime.now(timezone.utc)
    if new_status:
        report.status = new_status
        if new_status == ReportStatus.resolved.value:
            report.resolved_at = now
    if assigned_to:
        report.assigned_to = assigned_to
    if remarks:
        report.authority_remarks = remarks
    report.updated_at = now

    session.add(report)
    await session.commit()
    await session.refresh(report)
    logger.info("Report %s updated by %s (status=%s)", report.report_number, user.id, report.status)
    return report


@router.post("/reports/{report_id}/comments", status_code=201, response_model=ReportComment)
async def add_authority_comment(
    report_id: str,
    body: CommentCreate,
    user: User = Depends(require_admin),
    session=Depends(get_session),
):
    report = await _load_report(session, report_id)
    comment = ReportComment(
        report_id=report.id,
        user_id=user.id,
        comment=body.comment,
        is_authority=True,
    )
    session.add(comment)
    await session.commit()
    await session.refresh(comment)
    return comment


@router.get("/contact-messages", response_model=List[ContactMessage])
async def list_contact_messages(
    unread_only: bool = Query(False),
    session=Depends(get_session),
):
    statement = select(ContactMessage).order_by(ContactMessage.created_at.desc())
    if unread_only:
        statement = statement.where(ContactMessage.is_read == False)  # noqa: E712
    result = await session.exec(statement)
    return result.all()


@router.patch("/contact-messages/{message_id}/read", response_model=ContactMessage)
async def mark_contact_message_read(message_id: str, session=Depends(get_session)):
    message = await session.get(ContactMessage, message_id)
    if not message:
        raise HTTPException(status_code=404, detail="Message not found")
    message.is_read = True
    session.add(message)
    await session.commit()
    await session.refresh(message)
    return message
