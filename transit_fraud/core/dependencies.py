"""
FastAPI dependency injection utilities.

The store, scorer and thresholds are built once in the application lifespan
and kept on ``app.state``; these dependencies hand them to the routes.
Tests replace them through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from transit_fraud.core.config import Settings
from transit_fraud.domain.classification import RiskBands, StatusThresholds
from transit_fraud.domain.scoring import RiskScorer
from transit_fraud.persistence.base import TransactionStore
from transit_fraud.services.analysis_service import AnalysisService
from transit_fraud.services.transaction_service import TransactionService


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_transaction_store(request: Request) -> TransactionStore:
    """Store selected by STORE_BACKEND."""
    return request.app.state.store


def get_risk_scorer(request: Request) -> RiskScorer:
    return request.app.state.scorer


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Store = Annotated[TransactionStore, Depends(get_transaction_store)]
Scorer = Annotated[RiskScorer, Depends(get_risk_scorer)]


def get_analysis_service(
    settings: AppSettings,
    store: Store,
    scorer: Scorer,
) -> AnalysisService:
    """Get analysis service instance."""
    return AnalysisService(
        store=store,
        scorer=scorer,
        thresholds=StatusThresholds.from_config(settings.scoring),
    )


def get_transaction_service(settings: AppSettings, store: Store) -> TransactionService:
    """Get transaction service instance."""
    return TransactionService(
        store=store,
        config=settings.store,
        bands=RiskBands.from_config(settings.scoring),
    )


AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
TransactionServiceDep = Annotated[TransactionService, Depends(get_transaction_service)]
