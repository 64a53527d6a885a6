"""In-memory transaction store for local development and tests."""

import asyncio
import logging

from transit_fraud.core.errors import DuplicateKeyError, NotFoundError
from transit_fraud.domain.models.transaction import TransactionRecord, TransactionStatus
from transit_fraud.persistence.base import sort_key

logger = logging.getLogger(__name__)


class InMemoryTransactionRepository:
    """Process-local store keyed by ticket_id."""

    def __init__(self, records: list[TransactionRecord] | None = None):
        self._records: dict[str, TransactionRecord] = {}
        self._sequence: dict[str, int] = {}
        self._counter = 0
        self._lock = asyncio.Lock()
        for record in records or []:
            self._put(record)

    def _put(self, record: TransactionRecord) -> None:
        self._counter += 1
        self._records[record.ticket_id] = record
        self._sequence[record.ticket_id] = self._counter

    async def insert(self, record: TransactionRecord) -> TransactionRecord:
        async with self._lock:
            if record.ticket_id in self._records:
                raise DuplicateKeyError(
                    "Transaction already analyzed",
                    details={"ticket_id": record.ticket_id},
                )
            self._put(record)
        logger.debug("Transaction stored", extra={"ticket_id": record.ticket_id})
        return record

    async def list_recent(self, limit: int) -> list[TransactionRecord]:
        if limit < 1:
            return []
        async with self._lock:
            records = sorted(
                self._records.values(),
                key=lambda r: (*sort_key(r), self._sequence[r.ticket_id]),
                reverse=True,
            )
        return records[:limit]

    async def update_status(
        self, ticket_id: str, status: TransactionStatus
    ) -> TransactionRecord:
        async with self._lock:
            existing = self._records.get(ticket_id)
            if existing is None:
                raise NotFoundError("Transaction not found", details={"ticket_id": ticket_id})
            updated = existing.model_copy(update={"status": status})
            self._records[ticket_id] = updated
        return updated

    async def get(self, ticket_id: str) -> TransactionRecord | None:
        return self._records.get(ticket_id)

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._records)
