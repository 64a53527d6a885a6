"""Unit tests for status and risk-level classification."""

import pytest
from pydantic import ValidationError

from transit_fraud.core.config import ScoringConfig
from transit_fraud.domain.classification import (
    RiskBands,
    StatusThresholds,
    classify,
    risk_level,
)
from transit_fraud.domain.models.transaction import RiskLevel, TransactionStatus


class TestClassify:
    """Test score to status mapping."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (0.0, TransactionStatus.CLEARED),
            (0.299, TransactionStatus.CLEARED),
            (0.3, TransactionStatus.PENDING),
            (0.5, TransactionStatus.PENDING),
            (0.7, TransactionStatus.PENDING),
            (0.701, TransactionStatus.FLAGGED),
            (1.0, TransactionStatus.FLAGGED),
        ],
    )
    def test_default_thresholds(self, score, expected):
        """Test boundaries are strict on both sides."""
        assert classify(score) == expected

    @pytest.mark.parametrize(
        ("thresholds", "score", "expected"),
        [
            (StatusThresholds(), 0.0, TransactionStatus.CLEARED),
            (StatusThresholds(), 0.3, TransactionStatus.PENDING),
            (StatusThresholds(), 0.5, TransactionStatus.PENDING),
            (StatusThresholds(), 0.7, TransactionStatus.PENDING),
            (StatusThresholds(), 1.0, TransactionStatus.FLAGGED),
            (StatusThresholds(flag_threshold=0.5, clear_threshold=0.1), 0.0, TransactionStatus.CLEARED),
            (StatusThresholds(flag_threshold=0.5, clear_threshold=0.1), 0.3, TransactionStatus.PENDING),
            (StatusThresholds(flag_threshold=0.5, clear_threshold=0.1), 0.5, TransactionStatus.PENDING),
            (StatusThresholds(flag_threshold=0.5, clear_threshold=0.1), 0.7, TransactionStatus.FLAGGED),
            (StatusThresholds(flag_threshold=0.5, clear_threshold=0.1), 1.0, TransactionStatus.FLAGGED),
        ],
    )
    def test_same_score_same_status(self, thresholds, score, expected):
        """Test repeated classification of one score gives one status."""
        first = classify(score, thresholds)
        assert first == expected
        assert all(classify(score, thresholds) == first for _ in range(5))

    def test_monotonic(self):
        """Test a higher score never yields a less severe status."""
        order = {
            TransactionStatus.CLEARED: 0,
            TransactionStatus.PENDING: 1,
            TransactionStatus.FLAGGED: 2,
        }
        scores = [i / 1000 for i in range(1001)]
        severities = [order[classify(s)] for s in scores]
        assert severities == sorted(severities)

    def test_custom_thresholds(self):
        """Test thresholds can be tuned."""
        thresholds = StatusThresholds(flag_threshold=0.5, clear_threshold=0.1)
        assert classify(0.6, thresholds) == TransactionStatus.FLAGGED
        assert classify(0.05, thresholds) == TransactionStatus.CLEARED
        assert classify(0.3, thresholds) == TransactionStatus.PENDING

    def test_thresholds_from_config(self):
        """Test thresholds are read from ScoringConfig."""
        thresholds = StatusThresholds.from_config(
            ScoringConfig(flag_threshold=0.8, clear_threshold=0.2)
        )
        assert thresholds.flag_threshold == 0.8
        assert thresholds.clear_threshold == 0.2

    def test_inverted_thresholds_rejected(self):
        """Test clear_threshold above flag_threshold is invalid."""
        with pytest.raises(ValidationError):
            StatusThresholds(flag_threshold=0.2, clear_threshold=0.5)


class TestRiskLevel:
    """Test score to risk level mapping."""

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (0.0, RiskLevel.LOW),
            (0.4, RiskLevel.LOW),
            (0.41, RiskLevel.MEDIUM),
            (0.7, RiskLevel.MEDIUM),
            (0.71, RiskLevel.HIGH),
        ],
    )
    def test_default_bands(self, score, expected):
        """Test risk bands use strict greater-than comparisons."""
        assert risk_level(score) == expected

    def test_custom_bands(self):
        """Test bands can be tuned."""
        bands = RiskBands(high_threshold=0.9, medium_threshold=0.5)
        assert risk_level(0.8, bands) == RiskLevel.MEDIUM
