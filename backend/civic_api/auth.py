from typing import List, Optional, Tuple
from datetime import datetime, timedelta, timezone
import logging
import re

from pydantic import BaseModel
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlmodel import select

from .config import get_settings
from .constants import AppRole
from .database import get_session
from .models import Profile, User, UserRole

logger = logging.getLogger("app.auth")

SECRET_KEY = get_settings().jwt_secret
if not SECRET_KEY:
    # Fail closed rather than signing tokens with a guessable default.
    raise ValueError("JWT_SECRET not found in environment or .env file.")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = get_settings().jwt_access_minutes

# pbkdf2_sha256 avoids depending on the bcrypt C-extension
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
# auto_error=False so handlers can return a consistent 401 with X-Auth-Reason
security = HTTPBearer(auto_error=False)


class TokenPayload(BaseModel):
    sub: str
    roles: List[str] = []
    exp: Optional[int] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def validate_password_strength(password: str) -> Tuple[bool, Optional[str]]:
    """Return (is_valid, error_message) for a candidate password."""
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"
    if not re.search(r"[A-Za-z]", password):
        return False, "Password must contain at least one letter"
    if not re.search(r"\d", password):
        return False, "Password must contain at least one digit"
    return True, None


def create_access_token(subject: str, roles: Optional[List[str]] = None, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = {"sub": str(subject), "roles": list(roles or [])}
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode["exp"] = int(expire.timestamp())
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenPayload:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return TokenPayload(**payload)
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"X-Auth-Reason": "Invalid token"},
        ) from exc


async def get_roles(session, user_id: str) -> List[str]:
    result = await session.exec(select(UserRole.role).where(UserRole.user_id == user_id))
    return sorted(set(result.all()))


async def has_role(session, user_id: str, role: str) -> bool:
    statement = select(UserRole).where(UserRole.user_id == user_id, UserRole.role == role)
    result = await session.exec(statement)
    return result.first() is not None


async def grant_role(session, user_id: str, role: str) -> None:
    if await has_role(session, user_id, role):
        return
    session.add(UserRole(user_id=user_id, role=role))
    await session.commit()


async def authenticate_user(email: str, password: str, session) -> Optional[User]:
    result = await session.exec(select(User).where(User.email == email.strip().lower()))
    user = result.first()
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


async def create_user(session, email: str, password: str, full_name: Optional[str] = None, role: str = AppRole.user.value) -> User:
    """Create a user with its profile and initial role. Returns the User.

    Raises ValueError when the email is already registered.
    """
    email = email.strip().lower()
    result = await session.exec(select(User).where(User.email == email))
    if result.first():
        raise ValueError("A user with this email already exists")

    user = User(email=email, password_hash=get_password_hash(password))
    session.add(user)
    # Flush so the profile and role rows can reference the new id
    await session.flush()
    session.add(Profile(user_id=user.id, full_name=full_name, points=0))
    session.add(UserRole(user_id=user.id, role=AppRole.user.value))
    if role != AppRole.user.value:
        session.add(UserRole(user_id=user.id, role=role))
    await session.commit()
    await session.refresh(user)
    logger.info("Created user %s", user.id)
    return user


async def _user_from_token(token: str, session) -> User:
    payload = decode_access_token(token)
    user = await session.get(User, payload.sub)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"X-Auth-Reason": "Token subject not found"},
        )
    return user


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security), session=Depends(get_session)) -> User:
    if not credentials or not getattr(credentials, "credentials", None):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"X-Auth-Reason": "No credentials"},
        )
    return await _user_from_token(credentials.credentials, session)


async def get_optional_user(credentials: HTTPAuthorizationCredentials = Depends(security), session=Depends(get_session)) -> Optional[User]:
    """Like get_current_user, but anonymous callers get None.

    A token that is present but invalid is still rejected with 401.
    """
    if not credentials or not getattr(credentials, "credentials", None):
        return None
    return await _user_from_token(credentials.credentials, session)


def require_role(required_role: str):
    async def role_checker(user: User = Depends(get_current_user), session=Depends(get_session)) -> User:
        if not await has_role(session, user.id, required_role):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient privileges")
        return user
    return role_checker
