# ecovoice/schemas.py
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Category(str, Enum):
    transport = "transport"
    energy = "energy"
    food = "food"
    waste = "waste"


class Notice(BaseModel):
    title: str
    description: str = ""
    variant: str = "default"  # default | destructive


class ActivityRecord(BaseModel):
    """One logged activity. Never edited after it is created."""

    model_config = ConfigDict(frozen=True)

    category: Category
    subtype: str
    quantity: float
    secondary_key: Optional[str] = None  # transport fuel
    co2_kg: float
    timestamp: datetime
    source: str = "form"  # form | voice


# -----------------
# Forms
# -----------------
class TransportIn(BaseModel):
    mode: Optional[str] = None
    distance: Optional[float] = None
    fuel: str = "petrol"


class EnergyIn(BaseModel):
    usage: Optional[float] = None
    type: str = "electricity"


class FoodIn(BaseModel):
    type: Optional[str] = None
    portions: Optional[float] = 1.0


class WasteIn(BaseModel):
    type: Optional[str] = None
    weight: Optional[float] = None


class EstimateIn(BaseModel):
    category: Category
    subtype: str = ""
    quantity: float = Field(ge=0)
    secondary_key: Optional[str] = None


class EstimateOut(BaseModel):
    category: Category
    subtype: str
    quantity: float
    factor: float
    co2_kg: float


# -----------------
# Dashboard
# -----------------
class DayTotal(BaseModel):
    day: date
    label: str
    co2_kg: float


class GoalProgress(BaseModel):
    progress: float
    goal: float
    ratio: float
    percent_to_go: int


class DashboardSummary(BaseModel):
    today: date
    today_total: float
    remaining_today: float
    activity_count: int
    today_by_category: Dict[str, float]
    week_by_category: Dict[str, float]
    last_seven_days: List[DayTotal]
    weekly: GoalProgress


class ActivityLogged(BaseModel):
    record: ActivityRecord
    notice: Notice
    tip: str
    summary: DashboardSummary


class GoalIn(BaseModel):
    value: Optional[float] = None


class GoalOut(BaseModel):
    value: float


# -----------------
# Voice
# -----------------
class VoiceIn(BaseModel):
    transcript: str


class VoiceOut(BaseModel):
    response: str
    activity: Optional[ActivityRecord] = None
    notice: Optional[Notice] = None


# -----------------
# Persistence service
# -----------------
class ProfileIn(BaseModel):
    username: str = Field(min_length=1)


class ProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    total_points: int


class ChallengeOut(BaseModel):
    id: str
    title: str
    description: str
    difficulty: str
    points: int
    category: str
    status: str = "not_started"


class ChallengeAction(BaseModel):
    user_id: str


class LeaderboardRow(BaseModel):
    rank: int
    user_id: str
    username: str
    total_points: int


class InquiryIn(BaseModel):
    company_name: str = Field(min_length=1)
    contact_name: str = Field(min_length=1)
    email: EmailStr
    phone: str = ""
    message: str = Field(min_length=1)


class InquiryOut(BaseModel):
    inquiry_id: str
    notice: Notice
