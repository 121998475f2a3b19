# backend/phishlens/schemas.py
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(ts: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a ``Z`` suffix (``2025-01-01T00:00:00.000Z``)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------
# Accounts
# ---------------------------------------------------
class PublicUser(BaseModel):
    id: str
    email: str
    name: str


class Account(BaseModel):
    id: str
    email: str
    password_hash: str
    name: str
    created_at: datetime = Field(default_factory=utcnow)

    def public(self) -> PublicUser:
        return PublicUser(id=self.id, email=self.email, name=self.name)


# ---------------------------------------------------
# Request bodies
# Fields are optional so missing values surface as our own 400 messages.
# ---------------------------------------------------
class RegisterBody(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginBody(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AnalyzeUrlBody(BaseModel):
    url: Optional[str] = None


class AnalyzeEmailBody(BaseModel):
    emailText: Optional[str] = None


# ---------------------------------------------------
# Responses
# ---------------------------------------------------
class UserResponse(BaseModel):
    user: PublicUser


class AuthResponse(BaseModel):
    message: str
    user: PublicUser


class MessageResponse(BaseModel):
    message: str


class HistorySummaryItem(BaseModel):
    type: str
    timestamp: str
    content: str
    summary: str
    risk: str


class HistorySummaryResponse(BaseModel):
    items: List[HistorySummaryItem]
