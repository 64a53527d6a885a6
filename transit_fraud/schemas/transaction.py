"""Request/response schemas for the transactions API."""

from typing import Any

from pydantic import BaseModel, Field

from transit_fraud.domain.models.transaction import CamelModel, FraudDetectionResult


class AnalyzeRequest(CamelModel):
    """Documented shape of the analysis request body.

    The route validates the raw body itself so that missing fields are
    reported as a 400 "Missing required fields" error.
    """

    ticket_id: str = Field(..., examples=["T-1007"])
    timestamp: str | None = Field(None, examples=["2025-04-14T09:15:00Z"])
    station: str = Field(..., examples=["Central Station"])
    amount: float = Field(..., examples=[12.0])


class TransactionListResponse(BaseModel):
    items: list[FraudDetectionResult]
    total: int
    limit: int


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., description="New status: pending, flagged or cleared")


class ErrorResponse(BaseModel):
    detail: str
    errors: dict[str, Any] | None = None
