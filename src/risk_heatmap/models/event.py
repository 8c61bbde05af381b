"""
Event Models
============

Data models for abnormal access events.

An Event is the point the density estimator consumes. Events are produced
by an external generator (or the mock generator in this package), appended
to the LivePointBuffer, and never mutated after creation.

Risk Score:
    risk_score is a deterministic function of risk_level and is never set
    independently:

        CRITICAL -> 5
        HIGH     -> 4
        other    -> 3

Inbound Contract (POST /events):
    {
        "id": "pt-42",
        "x": 21.4,
        "y": 78.9,
        "t": 1707321234567.0,
        "dimension": "BEHAVIOR",
        "risk_level": "CRITICAL",
        "abnormal_type": "Bulk archive download",
        "user_name": "Admin_01",
        "terminal": "Terminal-104",
        "details": "..."
    }
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field


class RiskLevel(str, Enum):
    """
    Categorical severity of an abnormal event.

    Ordered from most to least severe.
    """

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    NONE = "NONE"


class AbnormalDimension(str, Enum):
    """
    Behavioral dimension an abnormal event was detected on.

    Attributes:
        TIME: Temporal anomalies (off-hours access, login frequency)
        BEHAVIOR: Operation anomalies (bulk download, path jumps)
        SENSITIVITY: Access to sensitive material
        COMBINED: Multi-factor anomalies
    """

    TIME = "TIME"
    BEHAVIOR = "BEHAVIOR"
    SENSITIVITY = "SENSITIVITY"
    COMBINED = "COMBINED"


_RISK_SCORES = {
    RiskLevel.CRITICAL: 5,
    RiskLevel.HIGH: 4,
}
_DEFAULT_RISK_SCORE = 3

# 9999-12-31T23:59:59.999Z, last instant datetime can represent
MAX_TIMESTAMP_MS = 253_402_300_799_999.0


def risk_score_for(level: RiskLevel) -> int:
    """Severity weight used to scale a point's density contribution."""
    return _RISK_SCORES.get(RiskLevel(level), _DEFAULT_RISK_SCORE)


@dataclass(frozen=True, slots=True)
class Event:
    """
    Abnormal access event.

    Immutable (frozen). The risk_score field is derived from risk_level
    in __post_init__ and cannot be passed to the constructor.

    Attributes:
        id: Opaque unique identifier
        x: Spatial coordinate in [0, 100]
        y: Behavioral coordinate in [0, 100]
        t: Occurrence timestamp (epoch milliseconds)
        dimension: Behavioral dimension
        risk_level: Categorical severity
        risk_score: Derived severity weight
        abnormal_type: Human-readable anomaly name
        user_name: Subject identity (display only)
        terminal: Originating terminal (display only)
        details: Free-text rationale (display only)
    """

    id: str
    x: float
    y: float
    t: float
    dimension: AbnormalDimension
    risk_level: RiskLevel
    abnormal_type: str = ""
    user_name: str = ""
    terminal: str = ""
    details: str = ""
    risk_score: int = field(init=False)

    def __post_init__(self) -> None:
        # Frozen dataclass: assign derived field through object.__setattr__
        object.__setattr__(self, "dimension", AbnormalDimension(self.dimension))
        object.__setattr__(self, "risk_level", RiskLevel(self.risk_level))
        object.__setattr__(self, "risk_score", risk_score_for(self.risk_level))

    def __repr__(self) -> str:
        return (
            f"Event(id={self.id}, x={self.x:.2f}, y={self.y:.2f}, "
            f"t={self.t:.0f}, level={self.risk_level.value})"
        )

    def to_dict(self) -> dict:
        """Export as dictionary for the renderer and API responses."""
        return {
            "id": self.id,
            "x": round(self.x, 4),
            "y": round(self.y, 4),
            "t": self.t,
            "dimension": self.dimension.value,
            "risk_level": self.risk_level.value,
            "risk_score": self.risk_score,
            "abnormal_type": self.abnormal_type,
            "user_name": self.user_name,
            "terminal": self.terminal,
            "details": self.details,
        }


class EventMessage(BaseModel):
    """
    Schema for events submitted by an external generator.

    Validates coordinate ranges before the event reaches the buffer.
    A risk score is never accepted from outside; it is derived.
    """

    id: str = Field(..., min_length=1, description="Opaque unique event id")
    x: float = Field(..., ge=0.0, le=100.0, description="Spatial coordinate")
    y: float = Field(..., ge=0.0, le=100.0, description="Behavioral coordinate")
    t: float = Field(
        ...,
        ge=0.0,
        le=MAX_TIMESTAMP_MS,
        description="Epoch timestamp in milliseconds",
    )
    dimension: AbnormalDimension
    risk_level: RiskLevel
    abnormal_type: str = Field(default="", description="Anomaly name")
    user_name: str = Field(default="", description="Subject identity")
    terminal: str = Field(default="", description="Originating terminal")
    details: str = Field(default="", description="Rationale")

    def to_event(self) -> Event:
        """Convert the validated message into an immutable Event."""
        return Event(
            id=self.id,
            x=self.x,
            y=self.y,
            t=self.t,
            dimension=self.dimension,
            risk_level=self.risk_level,
            abnormal_type=self.abnormal_type,
            user_name=self.user_name,
            terminal=self.terminal,
            details=self.details,
        )
