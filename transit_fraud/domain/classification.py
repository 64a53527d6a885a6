"""Status and risk-level classification of fraud scores."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from transit_fraud.core.config import ScoringConfig
from transit_fraud.domain.models.transaction import RiskLevel, TransactionStatus


class StatusThresholds(BaseModel):
    """Cut points separating cleared, pending and flagged."""

    model_config = ConfigDict(frozen=True)

    flag_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    clear_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_order(self) -> StatusThresholds:
        if self.clear_threshold > self.flag_threshold:
            raise ValueError("clear_threshold must not exceed flag_threshold")
        return self

    @classmethod
    def from_config(cls, config: ScoringConfig) -> StatusThresholds:
        return cls(flag_threshold=config.flag_threshold, clear_threshold=config.clear_threshold)


class RiskBands(BaseModel):
    model_config = ConfigDict(frozen=True)

    high_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    medium_threshold: float = Field(default=0.4, ge=0.0, le=1.0)

    @classmethod
    def from_config(cls, config: ScoringConfig) -> RiskBands:
        return cls(
            high_threshold=config.risk_high_threshold,
            medium_threshold=config.risk_medium_threshold,
        )


DEFAULT_THRESHOLDS = StatusThresholds()
DEFAULT_RISK_BANDS = RiskBands()


def classify(score: float, thresholds: StatusThresholds = DEFAULT_THRESHOLDS) -> TransactionStatus:
    """Map a fraud score to a status.

    Both comparisons are strict: a score equal to either threshold is pending.
    """
    if score > thresholds.flag_threshold:
        return TransactionStatus.FLAGGED
    if score < thresholds.clear_threshold:
        return TransactionStatus.CLEARED
    return TransactionStatus.PENDING


def risk_level(score: float, bands: RiskBands = DEFAULT_RISK_BANDS) -> RiskLevel:
    if score > bands.high_threshold:
        return RiskLevel.HIGH
    if score > bands.medium_threshold:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
