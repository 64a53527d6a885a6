"""Heuristic fraud risk scoring for ticket transactions.

The score is additive: a base value, fixed increments for each risk factor
that applies, and a bounded noise term from an injected random source. The
sum is clamped to [score_floor, score_ceiling] and rounded to 3 decimals.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, tzinfo
from typing import NamedTuple
from zoneinfo import ZoneInfo

from transit_fraud.core.config import ScoringConfig, StationMatchMode
from transit_fraud.domain.models.transaction import TransactionInput, ensure_utc
from transit_fraud.domain.randomness import RandomSource, build_random_source

SCORE_DECIMALS = 3


class RiskFactor(NamedTuple):
    name: str
    increment: float


def evaluation_zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return UTC
    return ZoneInfo(name)


def is_high_risk_station(station: str, policy: ScoringConfig) -> bool:
    if policy.station_match == StationMatchMode.SUBSTRING:
        lowered = station.lower()
        return any(s.lower() in lowered for s in policy.high_risk_stations if s)
    return station in policy.high_risk_stations


def has_suspicious_suffix(ticket_id: str, policy: ScoringConfig) -> bool:
    return any(ticket_id.endswith(suffix) for suffix in policy.suspicious_suffixes if suffix)


def local_hour(moment: datetime, zone_name: str) -> int:
    moment = ensure_utc(moment)
    try:
        return moment.astimezone(evaluation_zone(zone_name)).hour
    except OverflowError:
        # local time is not representable at the ends of the datetime range
        return moment.hour


def is_off_hours(moment: datetime, policy: ScoringConfig) -> bool:
    """Check the hour against the [off_hours_start, off_hours_end) window.

    A start after the end wraps past midnight; equal bounds mean no window.
    """
    hour = local_hour(moment, policy.timezone)
    start, end = policy.off_hours_start, policy.off_hours_end
    if start > end:
        return hour >= start or hour < end
    return start <= hour < end


def risk_factors(
    transaction: TransactionInput,
    policy: ScoringConfig,
    now: datetime | None = None,
) -> list[RiskFactor]:
    """List the deterministic risk factors that apply to a transaction."""
    factors: list[RiskFactor] = []

    if transaction.amount > policy.high_amount_threshold:
        factors.append(RiskFactor("high_amount", policy.high_amount_increment))
    if transaction.amount < policy.low_amount_threshold:
        factors.append(RiskFactor("low_amount", policy.low_amount_increment))

    if is_high_risk_station(transaction.station, policy):
        factors.append(RiskFactor("high_risk_station", policy.station_increment))

    if has_suspicious_suffix(transaction.ticket_id, policy):
        factors.append(RiskFactor("suspicious_suffix", policy.suffix_increment))

    moment = transaction.timestamp or now or datetime.now(UTC)
    if is_off_hours(moment, policy):
        factors.append(RiskFactor("off_hours", policy.off_hours_increment))

    return factors


def random_contribution(ticket_id: str, policy: ScoringConfig, source: RandomSource) -> float:
    draw = source.draw(ticket_id)
    return policy.random_min + draw * (policy.random_max - policy.random_min)


def clamp_score(value: float, policy: ScoringConfig) -> float:
    clamped = min(max(value, policy.score_floor), policy.score_ceiling)
    return round(min(max(clamped, 0.0), 1.0), SCORE_DECIMALS)


def score_transaction(
    transaction: TransactionInput,
    policy: ScoringConfig,
    random_source: RandomSource,
    now: datetime | None = None,
) -> float:
    """Compute the fraud score of a transaction, always within [0, 1]."""
    score = policy.base_score
    score += sum(factor.increment for factor in risk_factors(transaction, policy, now))
    score += random_contribution(transaction.ticket_id, policy, random_source)
    return clamp_score(score, policy)


class RiskScorer:
    """Scoring policy bound to a random source and a clock."""

    def __init__(
        self,
        policy: ScoringConfig,
        random_source: RandomSource | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.policy = policy
        self.random_source = random_source or build_random_source(policy)
        self.clock = clock or (lambda: datetime.now(UTC))

    def score(self, transaction: TransactionInput, now: datetime | None = None) -> float:
        return score_transaction(
            transaction,
            self.policy,
            self.random_source,
            now=now or self.clock(),
        )

    def explain(
        self, transaction: TransactionInput, now: datetime | None = None
    ) -> list[RiskFactor]:
        return risk_factors(transaction, self.policy, now=now or self.clock())
