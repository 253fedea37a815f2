"""
Data models for feed records, preferences and service payloads.

Feed records keep NeoWs field names so raw responses validate directly.
Service payloads use the camelCase keys stored in the JSON document.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


Role = Literal["researcher", "enthusiast"]
Unit = Literal["km", "mi"]


# === FEED RECORDS ===

class DiameterRange(BaseModel):
    estimated_diameter_min: float
    estimated_diameter_max: float


class EstimatedDiameter(BaseModel):
    kilometers: DiameterRange


class RelativeVelocity(BaseModel):
    """Velocity strings from the feed, parsed to floats."""
    kilometers_per_second: float
    kilometers_per_hour: float
    miles_per_hour: float


class MissDistance(BaseModel):
    """Miss distance strings from the feed, parsed to floats."""
    astronomical: float
    lunar: float
    kilometers: float
    miles: float


class CloseApproach(BaseModel):
    model_config = ConfigDict(extra="ignore")

    close_approach_date: str
    close_approach_date_full: Optional[str] = None
    epoch_date_close_approach: Optional[int] = None
    relative_velocity: RelativeVelocity
    miss_distance: MissDistance
    orbiting_body: str = "Earth"


class NearEarthObject(BaseModel):
    """One feed object plus its derived risk fields."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    is_potentially_hazardous_asteroid: bool = False
    absolute_magnitude_h: float
    estimated_diameter: EstimatedDiameter
    close_approach_data: List[CloseApproach] = Field(default_factory=list)
    orbital_data: Dict[str, Any] = Field(default_factory=dict)
    nasa_jpl_url: Optional[str] = None

    risk_score: int = 0
    risk_level: RiskLevel = RiskLevel.LOW

    @property
    def average_diameter_km(self) -> float:
        km = self.estimated_diameter.kilometers
        return (km.estimated_diameter_min + km.estimated_diameter_max) / 2

    @property
    def first_approach(self) -> Optional[CloseApproach]:
        return self.close_approach_data[0] if self.close_approach_data else None


# === PREFERENCES ===

class SessionUser(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    role: Role = "enthusiast"


class UserPreferences(BaseModel):
    user: Optional[SessionUser] = None
    token: Optional[str] = None
    watchlist: List[str] = Field(default_factory=list)
    unit: Unit = "km"


# === SERVICE PAYLOADS ===

class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=1)
    role: Role = "enthusiast"

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Name must not be blank")
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class PublicUser(BaseModel):
    id: str
    name: str
    email: str
    role: Role


class AuthResponse(BaseModel):
    token: str
    user: PublicUser


class AlertCreate(BaseModel):
    asteroidId: str = Field(..., min_length=1)
    asteroidName: str = Field(..., min_length=1)
    riskLevel: RiskLevel
    alertDate: Optional[datetime] = None


class AlertUpdate(BaseModel):
    """Fields a client may change on an existing alert. Anything else is rejected."""

    model_config = ConfigDict(extra="forbid")

    isRead: Optional[bool] = None
    riskLevel: Optional[RiskLevel] = None
    alertDate: Optional[datetime] = None
    asteroidName: Optional[str] = Field(None, min_length=1)
