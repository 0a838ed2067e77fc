"""Leaderboard and badge routes (read-only)."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlmodel import col, select

from .. import auth
from ..config import get_settings
from ..database import get_session
from ..leaderboard_utils import count_badges, find_entry, rank_profiles
from ..models import Badge, Profile, User, UserBadge

router = APIRouter(prefix="/api/v1")


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    full_name: Optional[str] = None
    city: Optional[str] = None
    points: int
    badge_count: int


class MyStanding(BaseModel):
    rank: int
    points: int


class LeaderboardResponse(BaseModel):
    entries: List[LeaderboardEntry]
    me: Optional[MyStanding] = None


class EarnedBadge(BaseModel):
    badge_id: str
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None
    earned_at: Optional[str] = None


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    user: Optional[User] = Depends(auth.get_optional_user),
    session=Depends(get_session),
):
    """Top profiles by points with badge counts.

    Equal points are ordered by when the profile was created, then by id.
    """
    limit = get_settings().leaderboard_limit
    statement = (
        select(Profile)
        .order_by(
            func.coalesce(Profile.points, 0).desc(),
            col(Profile.created_at).asc(),
            col(Profile.id).asc(),
        )
        .limit(limit)
    )
    result = await session.exec(statement)
    profiles = result.all()

    user_ids = [p.user_id for p in profiles]
    badge_rows: List[str] = []
    if user_ids:
        result = await session.exec(select(UserBadge.user_id).where(col(UserBadge.user_id).in_(user_ids)))
        badge_rows = result.all()

    entries = rank_profiles(profiles, count_badges(badge_rows))

    me = None
    if user:
        mine = find_entry(entries, user.id)
        if mine:
            me = MyStanding(rank=mine["rank"], points=mine["points"])

    return LeaderboardResponse(entries=[LeaderboardEntry(**e) for e in entries], me=me)


@router.get("/leaderboard/me/badges", response_model=List[EarnedBadge])
async def get_my_badges(
    user: User = Depends(auth.get_current_user),
    session=Depends(get_session),
):
    statement = (
        select(UserBadge, Badge)
        .join(Badge, Badge.id == UserBadge.badge_id)
        .where(UserBadge.user_id == user.id)
        .order_by(col(UserBadge.earned_at).asc())
    )
    result = await session.exec(statement)
    return [
        EarnedBadge(
            badge_id=badge.id,
            name=badge.name,
            icon=badge.icon,
            description=badge.description,
            earned_at=earned.earned_at.isoformat() if earned.earned_at else None,
        )
        for earned, badge in result.all()
    ]


@router.get("/badges", response_model=List[Badge])
async def list_badges(session=Depends(get_session)):
    statement = select(Badge).order_by(
        func.coalesce(Badge.points_required, 0).asc(), col(Badge.name).asc()
    )
    result = await session.exec(statement)
    return result.all()
