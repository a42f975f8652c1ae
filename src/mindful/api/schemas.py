"""Pydantic schemas for the HTTP API."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Chat
# ============================================================================

class SendMessageRequest(BaseModel):
    """Both fields are optional here so a missing one surfaces as invalid_input."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[UUID] = Field(None, alias="sessionId")
    message: Optional[str] = None


class SendMessageResponse(BaseModel):
    reply: str
    mode: str
    sentiment: float
    remainingMessages: int


class ModeSwitchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[UUID] = Field(None, alias="sessionId")
    new_mode: Optional[str] = Field(None, alias="newMode")
    message: Optional[str] = None


class ModeSwitchResponse(BaseModel):
    previousMode: str
    currentMode: str
    changed: bool
    suggestedMode: Optional[str] = None


# ============================================================================
# Sessions
# ============================================================================

class SessionCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    mode: Optional[str] = None


class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    current_mode: str
    message_count: int
    opening_message: Optional[str] = None
    is_complete: bool
    created_at: datetime
    updated_at: datetime


class SessionListResponse(BaseModel):
    sessions: List[SessionResponse]


class MessageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    session_id: UUID
    role: str
    content: str
    mode: str
    sentiment_score: Optional[float] = None
    created_at: datetime


class MessageListResponse(BaseModel):
    messages: List[MessageResponse]


class TransitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    old_mode: str
    new_mode: str
    created_at: datetime


class TransitionListResponse(BaseModel):
    transitions: List[TransitionResponse]


class TitleResponse(BaseModel):
    title: str


# ============================================================================
# Usage / renewal
# ============================================================================

class DailyUsageResponse(BaseModel):
    messageCount: int
    remainingMessages: int
    isLimitReached: bool


class UserStatsResponse(BaseModel):
    messagesUsedToday: int
    remainingMessages: int
    isLimitReached: bool
    totalSessions: int
    isPremium: bool


class EligibilityResponse(BaseModel):
    eligible: bool
    nextEligibleTimestamp: Optional[str] = None
    resumableSessionId: Optional[str] = None


class RenewalResponse(BaseModel):
    newSessionId: str
    openingMessage: Optional[str] = None
    renewed: bool
    creditId: Optional[str] = None


class CreditCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_id: Optional[str] = Field(None, alias="paymentId")


class CreditResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    payment_id: Optional[str] = None
    status: str
    created_at: datetime
    redeemed_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
