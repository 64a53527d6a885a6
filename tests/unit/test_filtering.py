"""Unit tests for transaction filtering."""

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from transit_fraud.domain.filtering import (
    ALL_STATIONS,
    DateRange,
    FilterCriteria,
    filter_records,
)
from transit_fraud.domain.models.transaction import TransactionStatus


@pytest.fixture
def records(make_record):
    return [
        make_record(
            ticket_id="T-1007",
            station="Central Station",
            fraud_score=0.8,
            status=TransactionStatus.FLAGGED,
            timestamp=datetime(2025, 4, 14, 9, 0, tzinfo=UTC),
        ),
        make_record(
            ticket_id="T-1003",
            station="West Terminal",
            fraud_score=0.1,
            status=TransactionStatus.CLEARED,
            timestamp=datetime(2025, 4, 13, 18, 0, tzinfo=UTC),
        ),
        make_record(
            ticket_id="T-1005",
            station="Central Station",
            fraud_score=0.5,
            status=TransactionStatus.PENDING,
            timestamp=datetime(2025, 4, 12, 7, 30, tzinfo=UTC),
        ),
    ]


class TestFilterRecords:
    """Test filter_records."""

    def test_no_criteria_returns_all(self, records):
        """Test None criteria leaves the list unchanged."""
        assert filter_records(records) == records

    def test_empty_criteria_skip_matching(self, records):
        """Test criteria with only sentinels return every record without matching."""
        criteria = FilterCriteria(station=ALL_STATIONS, status="all", query=" ")
        with patch("transit_fraud.domain.filtering.matches") as mock_matches:
            result = filter_records(records, criteria)

        assert result == records
        assert result is not records
        mock_matches.assert_not_called()

    def test_all_stations_sentinel(self, records):
        """Test "All Stations" applies no station constraint."""
        result = filter_records(records, FilterCriteria(station=ALL_STATIONS))
        assert result == records

    def test_all_status_sentinel(self, records):
        """Test "all" applies no status constraint."""
        assert filter_records(records, FilterCriteria(status="all")) == records

    def test_station_exact_match(self, records):
        """Test station filtering is exact."""
        result = filter_records(records, FilterCriteria(station="Central Station"))
        assert [r.ticket_id for r in result] == ["T-1007", "T-1005"]
        assert filter_records(records, FilterCriteria(station="Central")) == []

    def test_status_filter_is_subset(self, records):
        """Test status filtering returns only matching records."""
        result = filter_records(records, FilterCriteria(status="flagged"))
        assert [r.ticket_id for r in result] == ["T-1007"]
        assert all(r in records for r in result)

    def test_date_range_inclusive(self, records):
        """Test both date bounds are inclusive."""
        criteria = FilterCriteria(
            date_range=DateRange(
                from_=datetime(2025, 4, 13, 18, 0, tzinfo=UTC),
                to=datetime(2025, 4, 14, 9, 0, tzinfo=UTC),
            )
        )
        assert [r.ticket_id for r in filter_records(records, criteria)] == ["T-1007", "T-1003"]

    def test_open_ended_date_range(self, records):
        """Test a range with only a lower bound."""
        criteria = FilterCriteria(date_range=DateRange(from_=datetime(2025, 4, 13, tzinfo=UTC)))
        assert len(filter_records(records, criteria)) == 2

    def test_naive_bounds_treated_as_utc(self, records):
        """Test naive range bounds compare as UTC."""
        criteria = FilterCriteria(date_range=DateRange(to=datetime(2025, 4, 12, 7, 30)))
        assert [r.ticket_id for r in filter_records(records, criteria)] == ["T-1005"]

    def test_query_matches_ticket_or_station(self, records):
        """Test free-text search is a case-insensitive substring match."""
        assert [r.ticket_id for r in filter_records(records, FilterCriteria(query="t-1003"))] == [
            "T-1003"
        ]
        assert len(filter_records(records, FilterCriteria(query="central"))) == 2

    def test_criteria_combined_with_and(self, records):
        """Test multiple criteria must all match."""
        criteria = FilterCriteria(station="Central Station", status="pending")
        assert [r.ticket_id for r in filter_records(records, criteria)] == ["T-1005"]

    def test_order_preserved(self, records):
        """Test filtering keeps the input order."""
        result = filter_records(records, FilterCriteria(query="T-"))
        assert result == records


class TestFilterCriteria:
    """Test FilterCriteria normalization."""

    def test_is_empty_with_sentinels(self):
        """Test sentinel and blank values count as no constraint."""
        criteria = FilterCriteria(station=ALL_STATIONS, status="all", query="  ")
        assert criteria.is_empty

    def test_date_range_alias(self):
        """Test the dashboard field names are accepted."""
        criteria = FilterCriteria.model_validate(
            {"dateRange": {"from": "2025-04-01T00:00:00Z", "to": None}}
        )
        assert criteria.date_range.from_ == datetime(2025, 4, 1, tzinfo=UTC)
        assert not criteria.is_empty

    def test_date_range_bound_outside_utc_range(self):
        """Test a bound with no UTC equivalent is a validation error."""
        with pytest.raises(ValidationError):
            DateRange(from_=datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5))))
