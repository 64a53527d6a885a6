"""Store contract for persisted transaction records.

Implementations:
- InMemoryTransactionRepository (memory_repository.py): process-local, default
- TransactionRepository (transaction_repository.py): PostgreSQL table ticket_transactions

Ticket ids are unique. A second insert for the same ticket id raises
DuplicateKeyError instead of appending a second analysis.
"""

from typing import Protocol, runtime_checkable

from transit_fraud.domain.models.transaction import TransactionRecord, TransactionStatus


@runtime_checkable
class TransactionStore(Protocol):
    async def insert(self, record: TransactionRecord) -> TransactionRecord:
        """Persist a newly scored transaction.

        Raises:
            DuplicateKeyError: ticket_id already stored
            WriteError: backend failure
        """
        ...

    async def list_recent(self, limit: int) -> list[TransactionRecord]:
        """Return up to ``limit`` records, newest timestamp first."""
        ...

    async def update_status(
        self, ticket_id: str, status: TransactionStatus
    ) -> TransactionRecord:
        """Overwrite the status of an existing record.

        Raises:
            NotFoundError: no record with this ticket_id
            WriteError: backend failure
        """
        ...

    async def get(self, ticket_id: str) -> TransactionRecord | None:
        """Get a record by ticket id."""
        ...

    async def ping(self) -> bool:
        """Return True when the backend is reachable."""
        ...


def sort_key(record: TransactionRecord) -> tuple:
    """Ordering used by list_recent: timestamp, then creation time."""
    return (record.timestamp, record.created_at)
