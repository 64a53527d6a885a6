"""Filtering of retrieved transaction records for display.

All provided criteria are combined with AND. The dashboard's "no constraint"
choices ("All Stations", "all") are normalized away before filtering.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from transit_fraud.domain.models.transaction import TransactionRecord, ensure_utc

ALL_STATIONS = "All Stations"
ALL_STATUSES = "all"


class DateRange(BaseModel):
    """Inclusive range; either bound may be open."""

    model_config = ConfigDict(populate_by_name=True)

    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = None

    @field_validator("from_", "to")
    @classmethod
    def validate_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None

    def contains(self, moment: datetime) -> bool:
        moment = ensure_utc(moment)
        if self.from_ is not None and moment < self.from_:
            return False
        if self.to is not None and moment > self.to:
            return False
        return True


class FilterCriteria(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    station: str | None = None
    status: str | None = None
    date_range: DateRange | None = Field(default=None, alias="dateRange")
    query: str | None = None

    def normalized(self) -> FilterCriteria:
        """Return a copy with sentinel and blank values turned into None."""
        station = self.station if self.station and self.station != ALL_STATIONS else None
        status = self.status if self.status and self.status.lower() != ALL_STATUSES else None
        query = self.query.strip() if self.query and self.query.strip() else None
        date_range = self.date_range
        if date_range is not None and date_range.from_ is None and date_range.to is None:
            date_range = None
        return FilterCriteria(station=station, status=status, date_range=date_range, query=query)

    @property
    def is_empty(self) -> bool:
        c = self.normalized()
        return c.station is None and c.status is None and c.date_range is None and c.query is None


def matches(record: TransactionRecord, criteria: FilterCriteria) -> bool:
    """Check one record against already-normalized criteria."""
    if criteria.station is not None and record.station != criteria.station:
        return False
    if criteria.status is not None and record.status.value != criteria.status:
        return False
    if criteria.date_range is not None and not criteria.date_range.contains(record.timestamp):
        return False
    if criteria.query is not None:
        needle = criteria.query.lower()
        if needle not in record.ticket_id.lower() and needle not in record.station.lower():
            return False
    return True


def filter_records(
    records: Iterable[TransactionRecord],
    criteria: FilterCriteria | None = None,
) -> list[TransactionRecord]:
    """Apply the criteria to records, preserving their order."""
    if criteria is None or criteria.is_empty:
        return list(records)
    normalized = criteria.normalized()
    return [record for record in records if matches(record, normalized)]
