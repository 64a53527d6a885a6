"""Transaction analysis and review API routes.

Endpoints:
- POST /transactions/analyze - Score, classify and store a transaction
- GET /transactions - Recent transactions with filters
- GET /transactions/stats - Dashboard statistics
- GET /transactions/{ticket_id} - Single transaction
- PATCH /transactions/{ticket_id}/status - Operator clear/flag action
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Query
from pydantic import ValidationError as PydanticValidationError

from transit_fraud.core.dependencies import AnalysisServiceDep, TransactionServiceDep
from transit_fraud.core.errors import ValidationError
from transit_fraud.domain.filtering import DateRange, FilterCriteria
from transit_fraud.domain.models.transaction import FraudDetectionResult
from transit_fraud.domain.stats import DashboardStats
from transit_fraud.schemas.transaction import (
    AnalyzeRequest,
    ErrorResponse,
    StatusUpdateRequest,
    TransactionListResponse,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])


def build_criteria(
    station: str | None,
    status: str | None,
    from_date: datetime | None,
    to_date: datetime | None,
    query: str | None,
) -> FilterCriteria:
    date_range = None
    if from_date is not None or to_date is not None:
        try:
            date_range = DateRange(from_=from_date, to=to_date)
        except PydanticValidationError:
            raise ValidationError(
                "Invalid date range", details={"reason": "timestamp out of range"}
            ) from None
    return FilterCriteria(station=station, status=status, date_range=date_range, query=query)


@router.post(
    "/analyze",
    response_model=FraudDetectionResult,
    summary="Analyze transaction",
    description="Score a ticket transaction for fraud, classify it and store the result.",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        409: {"model": ErrorResponse, "description": "Ticket already analyzed"},
        503: {"model": ErrorResponse, "description": "Score computed but not stored"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {"schema": AnalyzeRequest.model_json_schema(by_alias=True)}
            },
        }
    },
)
async def analyze_transaction(
    analysis_service: AnalysisServiceDep,
    payload: Any = Body(None),
) -> FraudDetectionResult:
    """Run fraud detection on one ticket transaction."""
    return await analysis_service.analyze_payload(payload)


@router.get(
    "",
    response_model=TransactionListResponse,
    summary="List transactions",
    description="Most recent transactions (newest first) with optional filters.",
)
async def list_transactions(
    transaction_service: TransactionServiceDep,
    limit: int | None = Query(None, ge=1, description="Maximum records to retrieve"),
    station: str | None = Query(None, description='Exact station name or "All Stations"'),
    status: str | None = Query(None, description='pending, flagged, cleared or "all"'),
    from_date: datetime | None = Query(None, alias="from", description="Inclusive start"),
    to_date: datetime | None = Query(None, alias="to", description="Inclusive end"),
    q: str | None = Query(None, description="Search ticket id or station"),
) -> dict:
    criteria = build_criteria(station, status, from_date, to_date, q)
    effective_limit = transaction_service.effective_limit(limit)
    records = await transaction_service.list_transactions(criteria, effective_limit)
    return {
        "items": [record.to_result() for record in records],
        "total": len(records),
        "limit": effective_limit,
    }


@router.get(
    "/stats",
    response_model=DashboardStats,
    summary="Dashboard statistics",
    description="Counts per status, station and risk level plus a daily fraud-rate series.",
)
async def get_stats(
    transaction_service: TransactionServiceDep,
    limit: int | None = Query(None, ge=1),
    days: int = Query(14, ge=1, le=366),
    station: str | None = Query(None),
    from_date: datetime | None = Query(None, alias="from"),
    to_date: datetime | None = Query(None, alias="to"),
) -> DashboardStats:
    criteria = build_criteria(station, None, from_date, to_date, None)
    return await transaction_service.get_stats(criteria, limit=limit, days=days)


@router.get(
    "/{ticket_id}",
    response_model=FraudDetectionResult,
    responses={404: {"model": ErrorResponse, "description": "Transaction not found"}},
)
async def get_transaction(
    ticket_id: str,
    transaction_service: TransactionServiceDep,
) -> FraudDetectionResult:
    record = await transaction_service.get_transaction(ticket_id)
    return record.to_result()


@router.patch(
    "/{ticket_id}/status",
    response_model=FraudDetectionResult,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid status"},
        404: {"model": ErrorResponse, "description": "Transaction not found"},
    },
)
async def update_transaction_status(
    ticket_id: str,
    request: StatusUpdateRequest,
    transaction_service: TransactionServiceDep,
) -> FraudDetectionResult:
    """Mark a transaction as cleared, flagged or pending.

    The stored fraud score is left untouched.
    """
    record = await transaction_service.update_status(ticket_id, request.status)
    return record.to_result()
