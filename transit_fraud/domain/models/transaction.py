"""Ticket transaction models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class TransactionStatus(str, Enum):
    PENDING = "pending"
    FLAGGED = "flagged"
    CLEARED = "cleared"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC.

    Raises:
        ValueError: If the UTC equivalent falls outside the datetime range.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    try:
        return value.astimezone(UTC)
    except OverflowError:
        raise ValueError("timestamp out of range") from None


class CamelModel(BaseModel):
    """Model exchanged with the dashboard in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TransactionInput(CamelModel):
    """A ticket transaction submitted for analysis."""

    ticket_id: str = Field(..., min_length=1, description="Ticket identifier")
    station: str = Field(..., min_length=1, description="Station where the ticket was used")
    amount: float = Field(..., allow_inf_nan=False, description="Ticket price")
    timestamp: datetime | None = Field(
        None, description="When the ticket was used; evaluation time if omitted"
    )

    @field_validator("ticket_id", "station")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount_not_bool(cls, v: object) -> object:
        # JSON true/false would otherwise coerce to 1.0/0.0
        if isinstance(v, bool):
            raise ValueError("must be a number")
        return v

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None


class FraudDetectionResult(CamelModel):
    """Outcome of analyzing one transaction."""

    ticket_id: str
    timestamp: datetime
    station: str
    amount: float
    fraud_score: float = Field(..., ge=0.0, le=1.0)
    status: TransactionStatus
    processed_at: datetime


class TransactionRecord(BaseModel):
    """Persisted row of table ticket_transactions, keyed by ticket_id."""

    ticket_id: str
    timestamp: datetime
    station: str
    amount: float
    fraud_score: float = Field(..., ge=0.0, le=1.0)
    status: TransactionStatus
    created_at: datetime

    @field_validator("timestamp", "created_at")
    @classmethod
    def validate_utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @classmethod
    def from_result(cls, result: FraudDetectionResult) -> TransactionRecord:
        return cls(
            ticket_id=result.ticket_id,
            timestamp=result.timestamp,
            station=result.station,
            amount=result.amount,
            fraud_score=result.fraud_score,
            status=result.status,
            created_at=result.processed_at,
        )

    def to_result(self) -> FraudDetectionResult:
        return FraudDetectionResult(
            ticket_id=self.ticket_id,
            timestamp=self.timestamp,
            station=self.station,
            amount=self.amount,
            fraud_score=self.fraud_score,
            status=self.status,
            processed_at=self.created_at,
        )
