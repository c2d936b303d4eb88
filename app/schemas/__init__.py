from pydantic import BaseModel, EmailStr, Field, ConfigDict, model_validator, field_validator
from typing import Optional, List, Generic, TypeVar
from uuid import UUID
from datetime import datetime
from enum import Enum

from app.db.models.event import EventCategory
from app.db.models.participant import ParticipationStatus
from app.db.models.invitation import RSVPResponse
from app.db.models.notification import NotificationType

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope shared by every route."""
    success: bool = True
    message: str = "OK"
    content: Optional[T] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    code: str


class PaginationMetadata(BaseModel):
    total: int
    page: int
    per_page: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, total: int, page: int, per_page: int) -> "PaginationMetadata":
        total_pages = (total + per_page - 1) // per_page
        return cls(
            total=total,
            page=page,
            per_page=per_page,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    items: List[T]
    pagination: PaginationMetadata


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


# ---- auth & users -------------------------------------------------------

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = Field(None, max_length=255)


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=255)
    bio: Optional[str] = Field(None, max_length=1000)
    avatar_url: Optional[str] = Field(None, max_length=512)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


# ---- events -------------------------------------------------------------

class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    category: EventCategory = EventCategory.OTHER
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=200)
    images: List[str] = Field(default_factory=list)
    capacity: Optional[int] = Field(0, ge=0)
    is_public: bool = False
    is_open: bool = True

    @model_validator(mode="after")
    def check_dates(self):
        if self.starts_at and self.ends_at and self.ends_at < self.starts_at:
            raise ValueError("ends_at must not be before starts_at")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[EventCategory] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=200)
    images: Optional[List[str]] = None
    capacity: Optional[int] = Field(None, ge=0)
    is_public: Optional[bool] = None

    @field_validator("title", "category", "images", "is_public")
    @classmethod
    def reject_null(cls, value, info):
        # these columns are NOT NULL; omit the field to leave it unchanged
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class EventOpenUpdate(BaseModel):
    is_open: bool


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: Optional[str] = None
    category: EventCategory
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    location: Optional[str] = None
    images: List[str] = []
    capacity: Optional[int] = None
    organizer_id: UUID
    is_public: bool
    is_open: bool
    created_at: Optional[datetime] = None


# ---- participation ------------------------------------------------------

class JoinDecision(str, Enum):
    ACCEPTED = "ACCEPTED"
    DENIED = "DENIED"


class RespondJoinRequest(BaseModel):
    user_id: UUID
    status: JoinDecision


class ParticipantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    user_id: UUID
    status: ParticipationStatus
    invited_at: datetime
    responded_at: Optional[datetime] = None


# ---- invitations & rsvps -----------------------------------------------

class InvitationCreate(BaseModel):
    event_id: UUID
    invitee_id: UUID
    content: Optional[str] = Field(None, max_length=1000)


class InvitationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    invitor_id: UUID
    invitee_id: UUID
    content: Optional[str] = None
    sent_at: datetime


class RSVPCreate(BaseModel):
    response: RSVPResponse

    @model_validator(mode="after")
    def check_final_response(self):
        if self.response == RSVPResponse.PENDING:
            raise ValueError("response must be ACCEPTED or DENIED")
        return self


class RSVPOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invitation_id: UUID
    response: RSVPResponse
    responded_at: Optional[datetime] = None


# ---- notifications ------------------------------------------------------

class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: NotificationType
    title: str
    content: str
    created_at: datetime


class UserNotificationOut(NotificationOut):
    is_read: bool = False
    read_at: Optional[datetime] = None


# ---- discussions --------------------------------------------------------

class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    images: List[str] = Field(default_factory=list)


class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    author_id: UUID
    content: str
    images: List[str] = []
    created_at: datetime


class ReplyCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class ReplyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    author_id: UUID
    content: str
    created_at: datetime


# ---- event chat ---------------------------------------------------------

class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be blank")
        return value


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    sender_id: UUID
    content: str
    sent_at: datetime


class MessageSeenOut(BaseModel):
    message_id: UUID
    seen_by: List[UUID]
