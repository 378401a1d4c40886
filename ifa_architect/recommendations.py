"""
Recommendation reconciler: turns AI-proposed candidates (bare financial data)
into local Assets and moves chosen ones into the proposed-assets ledger.
"""

import logging
from typing import Any, Iterable, List, Optional

from ifa_architect import config
from ifa_architect.capabilities import RecommendFn
from ifa_architect.catalog import StockDefinition
from ifa_architect.ledger import HoldingLedger, mint_id
from ifa_architect.models import Asset, ClientProfile, ProposalSettings
from ifa_architect.proposal_settings import resolve_requests
from ifa_architect.utils.error_handler import RecommendationError

logger = logging.getLogger(__name__)

MANUAL_DESCRIPTION = "手動追加"


def reconcile_candidates(candidates: Iterable[Any]) -> List[Asset]:
    """
    Give each candidate a fresh local id and default confidence 1.0.

    Candidates that do not form a valid Asset (e.g. no name) are dropped.
    """
    reconciled = []
    for raw in candidates or []:
        try:
            asset = raw if isinstance(raw, Asset) else Asset.model_validate(raw)
        except ValueError as e:
            logger.warning("Skipping malformed recommendation candidate: %s", e)
            continue
        update = {"id": mint_id("rec")}
        if asset.confidence is None:
            update["confidence"] = 1.0
        reconciled.append(asset.model_copy(deep=True, update=update))
    return reconciled


async def fetch_recommendations(
    profile: ClientProfile,
    settings: ProposalSettings,
    recommend: RecommendFn,
) -> List[Asset]:
    """
    Ask the AI for candidates matching the resolved settings.

    Raises RecommendationError on any failure so the caller can offer a retry;
    the caller's ledgers are never touched here.
    """
    requests = resolve_requests(settings)
    if not requests:
        return []
    try:
        raw = await recommend(profile, requests)
    except Exception as e:
        logger.error("Recommendation fetch failed: %s", e)
        raise RecommendationError("AI推奨の取得に失敗しました。しばらく待ってから再試行してください。") from e
    return reconcile_candidates(raw)


def _target_amount(asset: Asset, default_amount: Optional[float]) -> float:
    if asset.amount and asset.amount > 0:
        return asset.amount
    return config.DEFAULT_PROPOSAL_AMOUNT if default_amount is None else default_amount


def add_candidate(
    ledger: HoldingLedger,
    candidate: Asset,
    default_amount: Optional[float] = None,
) -> HoldingLedger:
    """Copy a candidate into the proposed ledger under a new id."""
    staged = candidate.model_copy(update={
        "amount": _target_amount(candidate, default_amount),
        "confidence": 1.0 if candidate.confidence is None else candidate.confidence,
    })
    return ledger.add(staged, id_prefix="prop")


def add_manual_selection(
    ledger: HoldingLedger,
    stock: StockDefinition,
    default_amount: Optional[float] = None,
) -> HoldingLedger:
    """Same contract as add_candidate for an asset picked from the catalog."""
    asset = Asset(
        name=stock.name,
        code=stock.code,
        type=stock.type,
        currency=stock.currency,
        confidence=1.0,
        description=MANUAL_DESCRIPTION,
    )
    asset = asset.model_copy(update={"amount": _target_amount(asset, default_amount)})
    return ledger.add(asset, id_prefix="manual")
