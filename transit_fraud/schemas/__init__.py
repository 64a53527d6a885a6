"""Schemas package for request/response models."""

from transit_fraud.schemas.transaction import (
    AnalyzeRequest,
    ErrorResponse,
    StatusUpdateRequest,
    TransactionListResponse,
)

__all__ = [
    "AnalyzeRequest",
    "ErrorResponse",
    "StatusUpdateRequest",
    "TransactionListResponse",
]
