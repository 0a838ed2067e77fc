"""Public contact form."""

from __future__ import annotations

import logging

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, constr, field_validator

from ..database import get_session
from ..models import ContactMessage

logger = logging.getLogger("app.contact")

router = APIRouter(prefix="/api/v1")


class ContactMessageCreate(BaseModel):
    name: constr(strip_whitespace=True, min_length=2, max_length=100)
    email: constr(strip_whitespace=True, min_length=3, max_length=255)
    subject: constr(strip_whitespace=True, min_length=5, max_length=200)
    message: constr(strip_whitespace=True, min_length=10, max_length=1000)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        try:
            return validate_email(v, check_deliverability=False).normalized
        except EmailNotValidError as exc:
            raise ValueError(f"Please enter a valid email address: {exc}") from exc


@router.post("/contact", status_code=status.HTTP_201_CREATED)
async def submit_contact_message(body: ContactMessageCreate, session=Depends(get_session)):
    message = ContactMessage(**body.model_dump())
    session.add(message)
    await session.commit()
    await session.refresh(message)
    logger.info("Contact message %s received", message.id)
    return {"id": message.id, "message": "Message sent! We will get back to you soon."}
