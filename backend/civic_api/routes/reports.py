"""Report submission, tracking and reverse geocoding routes."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from .. import auth
from ..config import get_settings
from ..constants import (
    CATEGORY_LABELS,
    DEFAULT_SEVERITY,
    DEFAULT_STATUS,
    SEVERITY_LABELS,
    ReportCategory,
    ReportSeverity,
)
from ..database import get_session
from ..geocoding import reverse_geocode
from ..metrics import (
    IMAGE_UPLOAD_ATTEMPTS,
    IMAGE_UPLOAD_FAILURES,
    IMAGE_UPLOAD_SUCCESSES,
    REPORTS_SUBMITTED,
)
from ..models import Report, ReportComment, User
from ..photo_utils import detect_mime_type, validate_image
from ..report_utils import build_timeline, generate_report_number
from ..storage import upload_report_image
from ..storage_s3 import StorageError

logger = logging.getLogger("app.reports")

router = APIRouter(prefix="/api/v1")

# Tracking numbers carry five random digits; retry a few times on collision.
REPORT_NUMBER_ATTEMPTS = 5

_CATEGORIES = {c.value for c in ReportCategory}
_SEVERITIES = {s.value for s in ReportSeverity}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ReportPublic(BaseModel):
    """Report as shown on the public tracking page; owner fields are left out."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    report_number: str
    category: str
    severity: Optional[str] = None
    status: Optional[str] = None
    title: str
    description: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_urls: Optional[List[str]] = None
    authority_remarks: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None


class TrackResponse(BaseModel):
    report: ReportPublic
    timeline: Dict[str, Any]


class CommentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    comment: str
    is_authority: Optional[bool] = False
    created_at: Optional[datetime] = None


class Option(BaseModel):
    value: str
    label: str


class ReportOptions(BaseModel):
    categories: List[Option]
    severities: List[Option]
    default_severity: str
    max_images: int


async def _store_images(owner_id: str, images: List[UploadFile]) -> List[str]:
    """Validate and upload images, returning URLs of the ones that were stored.

    Images that fail validation or upload are skipped; they never abort the
    submission.
    """
    limit = get_settings().max_report_images
    if len(images) > limit:
        logger.info("Ignoring %d image(s) beyond the limit of %d", len(images) - limit, limit)

    urls: List[str] = []
    for upload in images[:limit]:
        IMAGE_UPLOAD_ATTEMPTS.inc()
        file_name = upload.filename or "image"
        data = await upload.read()

        is_valid, error = await run_in_threadpool(validate_image, data, file_name)
        if not is_valid:
            IMAGE_UPLOAD_FAILURES.labels(reason="invalid").inc()
            logger.warning("Skipping image %s: %s", file_name, error)
            continue

        content_type = await run_in_threadpool(detect_mime_type, data, file_name)
        try:
            url = await run_in_threadpool(upload_report_image, owner_id, file_name, data, content_type)
        except StorageError as exc:
            IMAGE_UPLOAD_FAILURES.labels(reason="storage").inc()
            logger.warning("Skipping image %s: %s", file_name, exc)
            continue

        IMAGE_UPLOAD_SUCCESSES.inc()
        urls.append(url)
    return urls


@router.post("/reports", status_code=status.HTTP_201_CREATED, response_model=Report)
async def submit_report(
    category: str = Form(""),
    title: str = Form(""),
    description: str = Form(""),
    severity: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    state: Optional[str] = Form(None),
    pincode: Optional[str] = Form(None),
    latitude: Optional[float] = Form(None, ge=-90, le=90),
    longitude: Optional[float] = Form(None, ge=-180, le=180),
    images: Optional[List[UploadFile]] = File(None),
    user: User = Depends(auth.get_current_user),
    session=Depends(get_session),
):
    """Create a report: upload images first, then insert the row referencing them."""
    # A rollback on tracking number collision expires `user`; keep the id
    owner_id = user.id
    category = category.strip()
    if not category or not title.strip() or not description.strip():
        raise HTTPException(
            status_code=400,
            detail="Missing information: please fill in all required fields",
        )
    if category not in _CATEGORIES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid category. Allowed: {', '.join(sorted(_CATEGORIES))}",
        )
    severity = _clean(severity) or DEFAULT_SEVERITY
    if severity not in _SEVERITIES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid severity. Allowed: {', '.join(sorted(_SEVERITIES))}",
        )
    if (latitude is None) != (longitude is None):
        raise HTTPException(
            status_code=400,
            detail="Location needs both latitude and longitude",
        )

    location = {
        "address": _clean(address),
        "city": _clean(city),
        "state": _clean(state),
        "pincode": _clean(pincode),
    }
    if latitude is not None and longitude is not None and not any(location.values()):
        geo = await reverse_geocode(latitude, longitude)
        if geo.resolved:
            location.update(
                address=geo.address, city=geo.city, state=geo.state, pincode=geo.pincode
            )

    image_urls = await _store_images(owner_id, images or [])

    for attempt in range(1, REPORT_NUMBER_ATTEMPTS + 1):
        report = Report(
            report_number=generate_report_number(),
            user_id=owner_id,
            category=category,
            severity=severity,
            status=DEFAULT_STATUS,
            title=title.strip(),
            description=description.strip(),
            latitude=latitude,
            longitude=longitude,
            image_urls=image_urls,
            **location,
        )
        session.add(report)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            logger.warning("Tracking number collision on attempt %d", attempt)
            continue
        await session.refresh(report)
        break
    else:
        raise HTTPException(status_code=500, detail="Could not allocate a tracking number, please try again")

    REPORTS_SUBMITTED.labels(category=category).inc()
    logger.info("Report %s submitted with %d image(s)", report.report_number, len(image_urls))
    return report


@router.get("/reports/options", response_model=ReportOptions)
def report_options():
    """Categories and severities with display labels for the report form."""
    return ReportOptions(
        categories=[Option(value=c.value, label=CATEGORY_LABELS[c.value]) for c in ReportCategory],
        severities=[Option(value=s.value, label=SEVERITY_LABELS[s.value]) for s in ReportSeverity],
        default_severity=DEFAULT_SEVERITY,
        max_images=get_settings().max_report_images,
    )


@router.get("/reports/mine", response_model=List[Report])
async def list_my_reports(
    user: User = Depends(auth.get_current_user),
    session=Depends(get_session),
):
    statement = (
        select(Report)
        .where(Report.user_id == user.id)
        .order_by(Report.created_at.desc())
    )
    result = await session.exec(statement)
    return result.all()


async def _report_by_number(session, report_number: str) -> Report:
    number = report_number.strip()
    report = None
    if number:
        result = await session.exec(select(Report).where(Report.report_number == number))
        report = result.first()
    if not report:
        raise HTTPException(
            status_code=404,
            detail="Report not found. Please check the report ID and try again.",
        )
    return report


@router.get("/reports/track/{report_number}", response_model=TrackResponse)
async def track_report(report_number: str, session=Depends(get_session)):
    report = await _report_by_number(session, report_number)
    return TrackResponse(
        report=ReportPublic.model_validate(report),
        timeline=build_timeline(report.status),
    )


@router.get("/reports/track/{report_number}/comments", response_model=List[CommentPublic])
async def list_report_comments(report_number: str, session=Depends(get_session)):
    report = await _report_by_number(session, report_number)
    statement = (
        select(ReportComment)
        .where(ReportComment.report_id == report.id)
        .order_by(ReportComment.created_at.asc())
    )
    result = await session.exec(statement)
    return result.all()


@router.get("/geocode/reverse")
async def geocode_reverse(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
):
    """Best-effort address lookup; unresolved results come back with nulls."""
    result = await reverse_geocode(lat, lon)
    return result.to_dict()
