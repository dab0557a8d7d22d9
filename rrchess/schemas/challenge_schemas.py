from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field, field_validator

from rrchess.core.constants import (
    CORRESPONDENCE_DAYS,
    MAX_CLOCK_INCREMENT_SECONDS,
    MAX_CLOCK_LIMIT_SECONDS,
    GameRule,
    Variant,
)


class ClockTimeControl(BaseModel):
    type: Literal["clock"] = "clock"
    limit: int = Field(..., ge=0, le=MAX_CLOCK_LIMIT_SECONDS, description="Initial clock in seconds")
    increment: int = Field(..., ge=0, le=MAX_CLOCK_INCREMENT_SECONDS, description="Increment per move in seconds")

    class Config:
        frozen = True


class CorrespondenceTimeControl(BaseModel):
    type: Literal["correspondence"] = "correspondence"
    days: int = Field(..., description="Days per move")

    class Config:
        frozen = True

    @field_validator("days")
    @classmethod
    def valid_days(cls, v):
        if v not in CORRESPONDENCE_DAYS:
            raise ValueError(f"Days per move must be one of {CORRESPONDENCE_DAYS}")
        return v


class UnlimitedTimeControl(BaseModel):
    type: Literal["unlimited"] = "unlimited"

    class Config:
        frozen = True


TimeControl = Annotated[
    Union[ClockTimeControl, CorrespondenceTimeControl, UnlimitedTimeControl],
    Field(discriminator="type"),
]


class ChallengeSettings(BaseModel):
    """Game settings handed to Lichess, unchanged, every time a match is challenged."""

    time_control: TimeControl = Field(default_factory=UnlimitedTimeControl)
    rated: bool = False
    variant: Variant = Variant.STANDARD
    rules: List[GameRule] = Field(default_factory=list)

    class Config:
        frozen = True
        use_enum_values = True

    @field_validator("rules")
    @classmethod
    def unique_rules(cls, v):
        # a set on the wire, kept as a sorted list so it serializes to JSON
        return sorted(set(v), key=lambda rule: getattr(rule, "value", rule))


class ChallengeResponse(BaseModel):
    url: str
    opponent: str
    color: Literal["white", "black"]
