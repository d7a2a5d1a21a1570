"""Pydantic schemas shared across the API."""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class User(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class ChildCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    date_of_birth: date
    gender: Optional[str] = None


class Child(BaseModel):
    id: str
    user_id: str
    name: str
    date_of_birth: date
    gender: Optional[str] = None
    created_at: Optional[datetime] = None
    age_label: Optional[str] = None


class LogPayload(BaseModel):
    """Base for feature-log form submissions."""

    model_config = ConfigDict(str_strip_whitespace=True)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


class LogRecord(BaseModel):
    id: str
    child_id: str
    created_at: Optional[datetime] = None


class FeedingType(str, Enum):
    BREASTFEEDING = "breastfeeding"
    BOTTLE = "bottle"
    SOLID_FOOD = "solid_food"
    SNACK = "snack"


class FeedingLogCreate(LogPayload):
    feeding_type: FeedingType
    amount: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    food_items: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    fed_at: datetime

    @field_validator("food_items", mode="before")
    @classmethod
    def _split_food_items(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            return [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return value


class FeedingLog(LogRecord):
    feeding_type: str
    amount: Optional[str] = None
    duration_minutes: Optional[int] = None
    food_items: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    fed_at: datetime


class SleepLogCreate(LogPayload):
    sleep_start: datetime
    sleep_end: datetime
    sleep_quality: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("sleep_start", "sleep_end")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # naive times are treated as UTC so start and end stay comparable
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_row(self) -> Dict[str, Any]:
        if self.sleep_end < self.sleep_start:
            raise ValueError("sleep_end must not be before sleep_start")
        row = super().to_row()
        row["duration_minutes"] = round(
            (self.sleep_end - self.sleep_start).total_seconds() / 60
        )
        return row


class SleepLog(LogRecord):
    sleep_start: datetime
    sleep_end: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    sleep_quality: Optional[str] = None
    notes: Optional[str] = None


class GrowthRecordCreate(LogPayload):
    measurement_date: date
    height_cm: Optional[float] = Field(default=None, ge=0)
    weight_kg: Optional[float] = Field(default=None, ge=0)
    head_circumference_cm: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class GrowthRecord(LogRecord):
    measurement_date: date
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    head_circumference_cm: Optional[float] = None
    notes: Optional[str] = None


class VaccineRecordCreate(LogPayload):
    vaccine_name: str = Field(..., min_length=1)
    scheduled_date: Optional[date] = None
    administered_date: Optional[date] = None
    next_dose_date: Optional[date] = None
    provider: Optional[str] = None
    notes: Optional[str] = None


class VaccineRecord(LogRecord):
    vaccine_name: str
    scheduled_date: Optional[date] = None
    administered_date: Optional[date] = None
    next_dose_date: Optional[date] = None
    provider: Optional[str] = None
    notes: Optional[str] = None


class PhotoEntryCreate(LogPayload):
    photo_url: str = Field(..., min_length=1)
    caption: Optional[str] = None
    date_taken: date


class PhotoEntry(LogRecord):
    photo_url: str
    caption: Optional[str] = None
    ai_tags: List[str] = Field(default_factory=list)
    date_taken: date


class DoctorNoteCreate(LogPayload):
    visit_date: date
    provider_name: Optional[str] = None
    reason: str = Field(..., min_length=1)
    diagnosis: Optional[str] = None
    prescriptions: List[Any] = Field(default_factory=list)
    follow_up_date: Optional[date] = None
    notes: Optional[str] = None


class DoctorNote(LogRecord):
    visit_date: date
    provider_name: Optional[str] = None
    reason: str
    diagnosis: Optional[str] = None
    prescriptions: List[Any] = Field(default_factory=list)
    follow_up_date: Optional[date] = None
    notes: Optional[str] = None


class DashboardResponse(BaseModel):
    user: User
    children: List[Child]
    insights: List[Dict[str, Any]] = Field(default_factory=list)


class ChatProxyRequest(BaseModel):
    message: Optional[str] = None
    conversation_history: Optional[List[Dict[str, Any]]] = Field(
        default=None, alias="conversationHistory"
    )

    model_config = ConfigDict(populate_by_name=True)


class Conversation(BaseModel):
    id: str
    user_id: str
    title: str
    created_at: Optional[datetime] = None


class ChatMessage(BaseModel):
    id: str
    conversation_id: str
    role: str
    content: str
    created_at: Optional[datetime] = None


class SendMessagePayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, description="Parent's question")


class ChatTurn(BaseModel):
    user_message: ChatMessage
    assistant_message: ChatMessage
    used_fallback: bool = False


class SleepInsights(BaseModel):
    insights: str
    sessions_analyzed: int = 0
    used_fallback: bool = False
