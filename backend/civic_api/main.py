from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.security import OAuth2PasswordRequestForm
from fastapi.staticfiles import StaticFiles
from datetime import datetime, timezone
from typing import List, Optional
import logging

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, constr
from sqlmodel import select

from . import auth
from .config import get_settings
from .constants import AppRole
from .database import get_session, init_db
from .models import Profile, User
from .observability import (
    get_health_check,
    init_sentry,
    metrics_response,
    setup_logging,
    setup_metrics_middleware,
)
from .routes import admin as admin_routes
from .routes import contact as contact_routes
from .routes import education as education_routes
from .routes import leaderboard as leaderboard_routes
from .routes import reports as reports_routes
from .storage import LOCAL_STORAGE_PATH

setup_logging()
init_sentry()

logger = logging.getLogger("app")

settings = get_settings()

app = FastAPI(title="Civic Engagement API")

setup_metrics_middleware(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for dev; restrict in prod
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=list(settings.allowed_hosts) or ["*"])

app.include_router(reports_routes.router)
app.include_router(admin_routes.router)
app.include_router(leaderboard_routes.router)
app.include_router(education_routes.router)
app.include_router(contact_routes.router)

# Local image storage (used when STORAGE_PROVIDER=local or as S3 fallback)
app.mount("/storage", StaticFiles(directory=str(LOCAL_STORAGE_PATH)), name="storage")


class SignupRequest(BaseModel):
    email: str
    password: str
    full_name: Optional[constr(strip_whitespace=True, max_length=100)] = None


class SessionInfo(BaseModel):
    id: str
    email: str
    roles: List[str]
    is_admin: bool


class ProfilePublic(BaseModel):
    user_id: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    avatar_url: Optional[str] = None
    points: int


class ProfileUpdate(BaseModel):
    full_name: Optional[constr(strip_whitespace=True, max_length=100)] = None
    phone: Optional[constr(strip_whitespace=True, max_length=20)] = None
    city: Optional[constr(strip_whitespace=True, max_length=100)] = None
    state: Optional[constr(strip_whitespace=True, max_length=100)] = None
    avatar_url: Optional[constr(strip_whitespace=True, max_length=500)] = None


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


async def _login_response(session, user: User) -> dict:
    roles = await auth.get_roles(session, user.id)
    token = auth.create_access_token(subject=user.id, roles=roles)
    return {
        "access_token": token,
        "token_type": "bearer",
        "id": str(user.id),
        "roles": roles,
    }


@app.post("/auth/signup", status_code=201)
async def signup(request_data: SignupRequest, session=Depends(get_session)):
    """Create an account with its profile and the default `user` role."""
    try:
        email = validate_email(request_data.email.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise HTTPException(status_code=400, detail=f"Invalid email address: {str(e)}")

    is_valid, error_msg = auth.validate_password_strength(request_data.password)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error_msg)

    try:
        user = await auth.create_user(
            session,
            email=email,
            password=request_data.password,
            full_name=request_data.full_name or None,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    return await _login_response(session, user)


@app.post("/auth/login", response_model=dict)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(), session=Depends(get_session)
):
    user = await auth.authenticate_user(form_data.username, form_data.password, session)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return await _login_response(session, user)


@app.post("/auth/login-json", response_model=dict)
async def login_json(
    username: str = Body(...), password: str = Body(...), session=Depends(get_session)
):
    user = await auth.authenticate_user(username, password, session)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return await _login_response(session, user)


@app.get("/auth/session", response_model=SessionInfo)
async def get_session_info(
    user: User = Depends(auth.get_current_user), session=Depends(get_session)
):
    """Identity and roles of the caller, used by clients to gate private views."""
    roles = await auth.get_roles(session, user.id)
    return SessionInfo(
        id=user.id,
        email=user.email,
        roles=roles,
        is_admin=AppRole.admin.value in roles,
    )


async def _load_profile(session, user: User) -> Profile:
    result = await session.exec(select(Profile).where(Profile.user_id == user.id))
    profile = result.first()
    if not profile:
        # Accounts created outside /auth/signup may lack a profile row
        profile = Profile(user_id=user.id, points=0)
        session.add(profile)
        await session.commit()
        await session.refresh(profile)
    return profile


def _profile_public(user: User, profile: Profile) -> ProfilePublic:
    return ProfilePublic(
        user_id=user.id,
        email=user.email,
        full_name=profile.full_name,
        phone=profile.phone,
        city=profile.city,
        state=profile.state,
        avatar_url=profile.avatar_url,
        points=profile.points or 0,
    )


@app.get("/api/v1/profile/me", response_model=ProfilePublic)
async def get_my_profile(
    user: User = Depends(auth.get_current_user), session=Depends(get_session)
):
    profile = await _load_profile(session, user)
    return _profile_public(user, profile)


@app.patch("/api/v1/profile/me", response_model=ProfilePublic)
async def update_my_profile(
    request_data: ProfileUpdate,
    user: User = Depends(auth.get_current_user),
    session=Depends(get_session),
):
    """Update contact and location details. Points cannot be changed here."""
    profile = await _load_profile(session, user)
    for field, value in request_data.model_dump(exclude_unset=True).items():
        setattr(profile, field, value or None)
    profile.updated_at = datetime.now(timezone.utc)
    session.add(profile)
    await session.commit()
    await session.refresh(profile)
    return _profile_public(user, profile)


@app.post("/api/v1/profile/change-password")
async def change_password(
    request_data: ChangePasswordRequest,
    user: User = Depends(auth.get_current_user),
    session=Depends(get_session),
):
    if not auth.verify_password(request_data.current_password, user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    is_valid, error_msg = auth.validate_password_strength(request_data.new_password)
    if not is_valid:
        raise HTTPException(status_code=400, detail=error_msg)

    if auth.verify_password(request_data.new_password, user.password_hash):
        raise HTTPException(
            status_code=400,
            detail="New password must be different from current password",
        )

    user.password_hash = auth.get_password_hash(request_data.new_password)
    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    await session.commit()

    logger.info("Password changed for user %s", user.id)
    return {"message": "Password changed successfully"}


@app.on_event("startup")
async def on_startup():
    await init_db()


@app.get("/health")
def health():
    """Health check endpoint."""
    return get_health_check()


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    return metrics_response()
