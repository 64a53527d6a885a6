"""Analysis pipeline: validate, score, classify and persist a transaction."""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from transit_fraud.core.errors import StoreError, ValidationError
from transit_fraud.core.logging import LoggerMixin, bind_log_context, clear_log_context
from transit_fraud.domain.classification import StatusThresholds, classify
from transit_fraud.domain.models.transaction import (
    FraudDetectionResult,
    TransactionInput,
    TransactionRecord,
)
from transit_fraud.domain.scoring import RiskScorer
from transit_fraud.persistence.base import TransactionStore

# (camelCase wire name, snake_case name)
REQUIRED_FIELDS = (("ticketId", "ticket_id"), ("station", "station"), ("amount", "amount"))


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_transaction_payload(payload: Any) -> TransactionInput:
    """Validate a raw request body before it reaches the scorer.

    Raises:
        ValidationError: "Missing required fields" when ticketId, station or
            amount is absent or blank; "Invalid transaction payload" when a
            value has the wrong shape.
    """
    if not isinstance(payload, Mapping):
        raise ValidationError(
            "Invalid transaction payload",
            details={"reason": "request body must be a JSON object"},
        )

    missing = [
        wire
        for wire, snake in REQUIRED_FIELDS
        if _is_missing(payload.get(wire)) and _is_missing(payload.get(snake))
    ]
    if missing:
        raise ValidationError("Missing required fields", details={"missing": missing})

    try:
        return TransactionInput.model_validate(dict(payload))
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid transaction payload",
            details={
                "errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in e.errors(include_url=False)
                ]
            },
        ) from None


class AnalysisService(LoggerMixin):
    """Scores transactions and records the outcome in the store.

    Evaluation time comes from the scorer's clock, so off-hours scoring and
    ``processed_at`` always agree.
    """

    def __init__(
        self,
        store: TransactionStore,
        scorer: RiskScorer,
        thresholds: StatusThresholds,
    ):
        self.store = store
        self.scorer = scorer
        self.thresholds = thresholds

    def evaluate(self, transaction: TransactionInput) -> FraudDetectionResult:
        """Score and classify without persisting."""
        now = self.scorer.clock()
        fraud_score = self.scorer.score(transaction, now=now)
        status = classify(fraud_score, self.thresholds)
        return FraudDetectionResult(
            ticket_id=transaction.ticket_id,
            timestamp=transaction.timestamp or now,
            station=transaction.station,
            amount=transaction.amount,
            fraud_score=fraud_score,
            status=status,
            processed_at=now,
        )

    async def analyze(self, transaction: TransactionInput) -> FraudDetectionResult:
        """Score, classify and persist one transaction.

        A store failure is re-raised with the computed result attached in
        ``details["result"]``; the score is never dropped silently.
        """
        bind_log_context(ticket_id=transaction.ticket_id)
        try:
            return await self._analyze(transaction)
        finally:
            clear_log_context()

    async def _analyze(self, transaction: TransactionInput) -> FraudDetectionResult:
        self.logger.info(
            "Running fraud detection",
            station=transaction.station,
            amount=transaction.amount,
        )
        result = self.evaluate(transaction)
        self.logger.info(
            "Fraud detection result",
            fraud_score=result.fraud_score,
            status=result.status.value,
            factors=[f.name for f in self.scorer.explain(transaction, now=result.processed_at)],
        )

        try:
            await self.store.insert(TransactionRecord.from_result(result))
        except StoreError as e:
            self.logger.error(
                "Fraud score computed but not recorded",
                fraud_score=result.fraud_score,
                status=result.status.value,
                error_type=type(e).__name__,
                error=e.message,
            )
            e.details["result"] = result.model_dump(mode="json", by_alias=True)
            raise

        return result

    async def analyze_payload(self, payload: Any) -> FraudDetectionResult:
        return await self.analyze(validate_transaction_payload(payload))
