"""Decision payload the models are asked to return."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class Prediction(BaseModel):
    """Falsifiable price call attached to a decision."""

    direction: Literal["bullish", "bearish", "neutral"]
    price_target: float
    timeframe_days: int = Field(ge=0)

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ParsedDecision(BaseModel):
    """One trading decision returned by the model."""

    action: Literal["BUY", "SELL", "HOLD"]
    symbol: str = Field(min_length=1)
    quantity_percent: float = Field(ge=0.0, le=100.0)
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    prediction: Prediction | None = None

    @field_validator("action", "symbol", mode="before")
    @classmethod
    def normalize_upper(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class DecisionResponse(BaseModel):
    """Full decision payload returned by the model."""

    decisions: list[ParsedDecision]
    market_outlook: str | None = None
    session_notes: str | None = None
