"""Unit tests for dashboard statistics."""

from datetime import UTC, date, datetime

from transit_fraud.domain.models.transaction import TransactionStatus
from transit_fraud.domain.stats import fraud_rate, summarize


class TestFraudRate:
    def test_zero_total(self):
        """Test an empty day has a zero rate."""
        assert fraud_rate(0, 0) == 0.0

    def test_percentage(self):
        """Test the rate is a percentage rounded to 2 decimals."""
        assert fraud_rate(1, 3) == 33.33


class TestSummarize:
    """Test summarize."""

    def test_empty(self):
        """Test summarizing no records gives zero-filled maps."""
        stats = summarize([], days=3, today=date(2025, 4, 14))
        assert stats.total == 0
        assert stats.by_status == {"pending": 0, "flagged": 0, "cleared": 0}
        assert stats.by_risk_level == {"LOW": 0, "MEDIUM": 0, "HIGH": 0}
        assert stats.average_score == 0.0
        assert [p.day for p in stats.daily] == [
            date(2025, 4, 12),
            date(2025, 4, 13),
            date(2025, 4, 14),
        ]

    def test_counts(self, make_record):
        """Test counts per status, station and risk level."""
        records = [
            make_record(
                ticket_id="T-1",
                station="Central Station",
                fraud_score=0.8,
                status=TransactionStatus.FLAGGED,
                timestamp=datetime(2025, 4, 14, 9, 0, tzinfo=UTC),
            ),
            make_record(
                ticket_id="T-2",
                station="West Terminal",
                fraud_score=0.5,
                status=TransactionStatus.PENDING,
                timestamp=datetime(2025, 4, 14, 11, 0, tzinfo=UTC),
            ),
            make_record(
                ticket_id="T-3",
                station="Central Station",
                fraud_score=0.2,
                status=TransactionStatus.CLEARED,
                timestamp=datetime(2025, 4, 13, 11, 0, tzinfo=UTC),
            ),
        ]
        stats = summarize(records, days=2, today=date(2025, 4, 14))

        assert stats.total == 3
        assert stats.by_status == {"pending": 1, "flagged": 1, "cleared": 1}
        assert stats.by_station == {"Central Station": 2, "West Terminal": 1}
        assert stats.by_risk_level == {"LOW": 1, "MEDIUM": 1, "HIGH": 1}
        assert stats.average_score == 0.5

        yesterday, today = stats.daily
        assert (yesterday.total, yesterday.flagged, yesterday.fraud_rate) == (1, 0, 0.0)
        assert (today.total, today.flagged, today.fraud_rate) == (2, 1, 50.0)

    def test_records_outside_window_not_in_daily(self, make_record):
        """Test old records count in totals but not in the daily series."""
        record = make_record(timestamp=datetime(2025, 1, 1, tzinfo=UTC))
        stats = summarize([record], days=7, today=date(2025, 4, 14))
        assert stats.total == 1
        assert sum(p.total for p in stats.daily) == 0
