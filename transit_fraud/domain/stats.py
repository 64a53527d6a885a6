"""Dashboard statistics over analyzed transactions."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta

from pydantic import BaseModel

from transit_fraud.domain.classification import DEFAULT_RISK_BANDS, RiskBands, risk_level
from transit_fraud.domain.models.transaction import (
    RiskLevel,
    TransactionRecord,
    TransactionStatus,
    ensure_utc,
)


class DailyPoint(BaseModel):
    day: date
    total: int
    flagged: int
    fraud_rate: float


class DashboardStats(BaseModel):
    total: int
    by_status: dict[str, int]
    by_station: dict[str, int]
    by_risk_level: dict[str, int]
    average_score: float
    daily: list[DailyPoint]


def fraud_rate(flagged: int, total: int) -> float:
    """Percentage of flagged transactions, 0 when there are none."""
    if total == 0:
        return 0.0
    return round(flagged / total * 100, 2)


def summarize(
    records: Iterable[TransactionRecord],
    bands: RiskBands = DEFAULT_RISK_BANDS,
    days: int = 14,
    today: date | None = None,
) -> DashboardStats:
    records = list(records)
    today = today or datetime.now(UTC).date()

    by_status = {status.value: 0 for status in TransactionStatus}
    by_risk_level = {level.value: 0 for level in RiskLevel}
    by_station: Counter[str] = Counter()
    per_day_total: Counter[date] = Counter()
    per_day_flagged: Counter[date] = Counter()

    for record in records:
        by_status[record.status.value] += 1
        by_risk_level[risk_level(record.fraud_score, bands).value] += 1
        by_station[record.station] += 1
        day = ensure_utc(record.timestamp).date()
        per_day_total[day] += 1
        if record.status == TransactionStatus.FLAGGED:
            per_day_flagged[day] += 1

    daily = []
    for offset in range(max(days, 0) - 1, -1, -1):
        day = today - timedelta(days=offset)
        total = per_day_total[day]
        flagged = per_day_flagged[day]
        daily.append(
            DailyPoint(day=day, total=total, flagged=flagged, fraud_rate=fraud_rate(flagged, total))
        )

    average = sum(r.fraud_score for r in records) / len(records) if records else 0.0

    return DashboardStats(
        total=len(records),
        by_status=by_status,
        by_station=dict(sorted(by_station.items())),
        by_risk_level=by_risk_level,
        average_score=round(average, 3),
        daily=daily,
    )
