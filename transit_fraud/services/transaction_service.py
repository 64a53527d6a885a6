"""Transaction query and review service."""

import logging

from transit_fraud.core.config import StoreConfig
from transit_fraud.core.errors import NotFoundError, ValidationError
from transit_fraud.domain.classification import RiskBands
from transit_fraud.domain.filtering import FilterCriteria, filter_records
from transit_fraud.domain.models.transaction import TransactionRecord, TransactionStatus
from transit_fraud.domain.stats import DashboardStats, summarize
from transit_fraud.persistence.base import TransactionStore

logger = logging.getLogger(__name__)

_ALLOWED_STATUSES = [s.value for s in TransactionStatus]


def parse_status(value: str | TransactionStatus) -> TransactionStatus:
    """Convert a status string to TransactionStatus or raise ValidationError."""
    if isinstance(value, TransactionStatus):
        return value
    try:
        return TransactionStatus(value)
    except ValueError:
        raise ValidationError(
            f"Invalid status: {value}",
            details={"status": value, "allowed": _ALLOWED_STATUSES},
        ) from None


class TransactionService:
    """Service for listing, reviewing and summarizing stored transactions."""

    def __init__(self, store: TransactionStore, config: StoreConfig, bands: RiskBands):
        self.store = store
        self.config = config
        self.bands = bands

    def effective_limit(self, limit: int | None) -> int:
        if limit is None:
            return self.config.default_limit
        return max(1, min(limit, self.config.max_limit))

    async def list_transactions(
        self,
        criteria: FilterCriteria | None = None,
        limit: int | None = None,
    ) -> list[TransactionRecord]:
        """Retrieve the most recent transactions and apply the filters to them."""
        records = await self.store.list_recent(self.effective_limit(limit))
        return filter_records(records, criteria)

    async def get_transaction(self, ticket_id: str) -> TransactionRecord:
        record = await self.store.get(ticket_id)
        if record is None:
            raise NotFoundError("Transaction not found", details={"ticket_id": ticket_id})
        return record

    async def update_status(
        self, ticket_id: str, status: str | TransactionStatus
    ) -> TransactionRecord:
        """Apply an operator decision (clear, flag or back to pending)."""
        new_status = parse_status(status)
        record = await self.store.update_status(ticket_id, new_status)
        logger.info(
            "Transaction status updated",
            extra={"ticket_id": ticket_id, "status": new_status.value},
        )
        return record

    async def get_stats(
        self,
        criteria: FilterCriteria | None = None,
        limit: int | None = None,
        days: int = 14,
    ) -> DashboardStats:
        records = await self.list_transactions(criteria, limit)
        return summarize(records, bands=self.bands, days=days)
