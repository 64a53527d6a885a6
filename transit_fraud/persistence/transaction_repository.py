"""Transaction repository using asyncpg and SQLAlchemy 2.0 async.

Table: ticket_transactions

One row per analyzed ticket. ticket_id carries a UNIQUE constraint, so a
concurrent second analysis of the same ticket fails with DuplicateKeyError
instead of racing. Rows are never deleted here.
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from transit_fraud.core.errors import DuplicateKeyError, NotFoundError, StoreError, WriteError
from transit_fraud.domain.models.transaction import TransactionRecord, TransactionStatus

logger = logging.getLogger(__name__)

_COLUMNS = 'ticket_id, "timestamp", station, amount, fraud_score, status, created_at'

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS ticket_transactions (
        id BIGSERIAL PRIMARY KEY,
        ticket_id TEXT NOT NULL UNIQUE,
        "timestamp" TIMESTAMPTZ NOT NULL,
        station TEXT NOT NULL,
        amount NUMERIC(12, 2) NOT NULL,
        fraud_score DOUBLE PRECISION NOT NULL
            CHECK (fraud_score >= 0 AND fraud_score <= 1),
        status TEXT NOT NULL CHECK (status IN ('pending', 'flagged', 'cleared')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_ticket_transactions_timestamp
        ON ticket_transactions ("timestamp" DESC, created_at DESC)
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_ticket_transactions_status
        ON ticket_transactions (status)
    """,
)


class TransactionRepository:
    """Repository for ticket_transactions data access.

    Each operation runs in its own session and commits before returning,
    so constraint violations surface here rather than at request teardown.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def ensure_schema(self) -> None:
        """Create the table and indexes if they do not exist."""
        try:
            async with self.session_factory() as session:
                for statement in SCHEMA_STATEMENTS:
                    await session.execute(text(statement))
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise WriteError("Failed to create transaction schema", details={"error": str(e)}) from e
        logger.info("Transaction schema ready", extra={"table": "ticket_transactions"})

    async def insert(self, record: TransactionRecord) -> TransactionRecord:
        """Insert a newly scored transaction."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    text(f"""
                        INSERT INTO ticket_transactions ({_COLUMNS})
                        VALUES (
                            :ticket_id, :timestamp, :station, :amount,
                            :fraud_score, :status, :created_at
                        )
                        RETURNING {_COLUMNS}
                    """),
                    {
                        "ticket_id": record.ticket_id,
                        "timestamp": record.timestamp,
                        "station": record.station,
                        "amount": record.amount,
                        "fraud_score": record.fraud_score,
                        "status": record.status.value,
                        "created_at": record.created_at,
                    },
                )
                row = result.fetchone()
                await session.commit()
        except IntegrityError as e:
            raise DuplicateKeyError(
                "Transaction already analyzed",
                details={"ticket_id": record.ticket_id},
            ) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Failed to insert transaction",
                extra={"ticket_id": record.ticket_id, "error": str(e)},
            )
            raise WriteError(
                "Failed to store transaction",
                details={"ticket_id": record.ticket_id},
            ) from e
        return self._row_to_record(row) if row is not None else record

    async def list_recent(self, limit: int) -> list[TransactionRecord]:
        """List up to ``limit`` transactions, newest first."""
        if limit < 1:
            return []
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    text(f"""
                        SELECT {_COLUMNS}
                        FROM ticket_transactions
                        ORDER BY "timestamp" DESC, created_at DESC, id DESC
                        LIMIT :limit
                    """),
                    {"limit": limit},
                )
                rows = result.fetchall()
        except (SQLAlchemyError, OSError) as e:
            logger.error("Failed to list transactions", extra={"error": str(e)})
            raise StoreError("Failed to load transactions", details={"limit": limit}) from e
        return [self._row_to_record(row) for row in rows]

    async def update_status(
        self, ticket_id: str, status: TransactionStatus
    ) -> TransactionRecord:
        """Overwrite the status of one transaction."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    text(f"""
                        UPDATE ticket_transactions
                        SET status = :status
                        WHERE ticket_id = :ticket_id
                        RETURNING {_COLUMNS}
                    """),
                    {"ticket_id": ticket_id, "status": status.value},
                )
                row = result.fetchone()
                if row is None:
                    await session.rollback()
                else:
                    await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.error(
                "Failed to update transaction status",
                extra={"ticket_id": ticket_id, "status": status.value, "error": str(e)},
            )
            raise WriteError(
                "Failed to update transaction status",
                details={"ticket_id": ticket_id},
            ) from e
        if row is None:
            raise NotFoundError("Transaction not found", details={"ticket_id": ticket_id})
        return self._row_to_record(row)

    async def get(self, ticket_id: str) -> TransactionRecord | None:
        """Get a transaction by ticket id."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    text(f"""
                        SELECT {_COLUMNS}
                        FROM ticket_transactions
                        WHERE ticket_id = :ticket_id
                    """),
                    {"ticket_id": ticket_id},
                )
                row = result.fetchone()
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(
                "Failed to load transaction", details={"ticket_id": ticket_id}
            ) from e
        if row is None:
            return None
        return self._row_to_record(row)

    async def ping(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database ping failed", extra={"error": str(e)})
            return False
        return True

    def _row_to_dict(self, row) -> dict[str, Any]:
        """Convert a database row to a dictionary."""
        return {
            "ticket_id": row[0],
            "timestamp": row[1],
            "station": row[2],
            "amount": float(row[3]),
            "fraud_score": float(row[4]),
            "status": row[5],
            "created_at": row[6],
        }

    def _row_to_record(self, row) -> TransactionRecord:
        return TransactionRecord(**self._row_to_dict(row))
