from typing import Optional, List
from datetime import datetime, timezone
import uuid

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, UniqueConstraint

from .constants import DEFAULT_QUIZ_POINTS, DEFAULT_SEVERITY, DEFAULT_STATUS


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """Account record used for authentication (email + password hash)."""
    __tablename__ = "users"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    email: str = Field(sa_column_kwargs={"unique": True}, index=True)
    password_hash: str
    created_at: Optional[datetime] = Field(default_factory=_now)
    updated_at: Optional[datetime] = None


class Profile(SQLModel, table=True):
    __tablename__ = "profiles"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", sa_column_kwargs={"unique": True}, index=True)
    full_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    avatar_url: Optional[str] = None
    # Credited by processes outside this API; never written by request handlers.
    points: Optional[int] = Field(default=0)
    created_at: Optional[datetime] = Field(default_factory=_now)
    updated_at: Optional[datetime] = Field(default_factory=_now)


class UserRole(SQLModel, table=True):
    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    # 'admin', 'moderator' or 'user'
    role: str = Field(default="user")
    created_at: Optional[datetime] = Field(default_factory=_now)


class Report(SQLModel, table=True):
    __tablename__ = "reports"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    # Public tracking number, e.g. CIV20241223-12345
    report_number: str = Field(sa_column_kwargs={"unique": True}, index=True)
    # Nullable: anonymous rows are allowed by the schema even though the API
    # requires sign-in to submit.
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    category: str
    severity: Optional[str] = Field(default=DEFAULT_SEVERITY)
    status: Optional[str] = Field(default=DEFAULT_STATUS, index=True)
    title: str
    description: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_urls: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    assigned_to: Optional[str] = None
    authority_remarks: Optional[str] = None
    created_at: Optional[datetime] = Field(default_factory=_now, index=True)
    updated_at: Optional[datetime] = Field(default_factory=_now)
    resolved_at: Optional[datetime] = None


class ReportComment(SQLModel, table=True):
    __tablename__ = "report_comments"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    report_id: str = Field(foreign_key="reports.id", index=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id")
    comment: str
    is_authority: Optional[bool] = Field(default=False)
    created_at: Optional[datetime] = Field(default_factory=_now)


class Badge(SQLModel, table=True):
    __tablename__ = "badges"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    points_required: Optional[int] = None
    created_at: Optional[datetime] = Field(default_factory=_now)


class UserBadge(SQLModel, table=True):
    __tablename__ = "user_badges"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    badge_id: str = Field(foreign_key="badges.id")
    earned_at: Optional[datetime] = Field(default_factory=_now)


class QuizCategory(SQLModel, table=True):
    __tablename__ = "quiz_categories"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    created_at: Optional[datetime] = Field(default_factory=_now)


class Quiz(SQLModel, table=True):
    __tablename__ = "quizzes"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    category_id: str = Field(foreign_key="quiz_categories.id", index=True)
    question: str
    options: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # Index into `options`
    correct_answer: int
    points: Optional[int] = Field(default=DEFAULT_QUIZ_POINTS)
    created_at: Optional[datetime] = Field(default_factory=_now)


class UserQuizProgress(SQLModel, table=True):
    __tablename__ = "user_quiz_progress"
    # One outcome per user per question; the constraint makes the
    # answer-once insert atomic.
    __table_args__ = (UniqueConstraint("user_id", "quiz_id", name="uq_user_quiz_progress_user_quiz"),)
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    quiz_id: str = Field(foreign_key="quizzes.id")
    is_correct: bool
    answered_at: Optional[datetime] = Field(default_factory=_now)


class ContactMessage(SQLModel, table=True):
    __tablename__ = "contact_messages"
    id: Optional[str] = Field(default_factory=_uuid, primary_key=True)
    name: str
    email: str
    subject: str
    message: str
    is_read: Optional[bool] = Field(default=False)
    created_at: Optional[datetime] = Field(default_factory=_now)
