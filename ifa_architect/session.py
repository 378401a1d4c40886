"""
Explicit session context for one wizard run.

All state changes go through `reduce_session(session, action)`, a pure
function returning a new session; replaying the same actions from the same
starting session yields the same state (ids aside, which are freshly minted).
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Type

from ifa_architect import proposal_settings
from ifa_architect.catalog import StockDefinition
from ifa_architect.ledger import HoldingLedger
from ifa_architect.models import Asset, ClientProfile, PresentationData, ProposalSettings
from ifa_architect.recommendations import add_candidate, add_manual_selection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProposalSession:
    profile: ClientProfile = field(default_factory=ClientProfile)
    settings: ProposalSettings = field(default_factory=ProposalSettings)
    proposed: HoldingLedger = field(default_factory=HoldingLedger)
    presentation: Optional[PresentationData] = None

    @property
    def holdings(self) -> HoldingLedger:
        return HoldingLedger.of(self.profile.current_holdings)


# Actions -------------------------------------------------------------------

@dataclass(frozen=True)
class AddHolding:
    asset: Asset

@dataclass(frozen=True)
class UpdateHolding:
    asset_id: str
    field: str
    value: Any

@dataclass(frozen=True)
class RemoveHolding:
    asset_id: str

@dataclass(frozen=True)
class ToggleProposalType:
    asset_type: str

@dataclass(frozen=True)
class SetProposalCount:
    asset_type: str
    count: Any

@dataclass(frozen=True)
class ToggleSubCategory:
    asset_type: str
    sub_category: str

@dataclass(frozen=True)
class AddCandidate:
    candidate: Asset
    default_amount: Optional[float] = None

@dataclass(frozen=True)
class AddManualAsset:
    stock: StockDefinition
    default_amount: Optional[float] = None

@dataclass(frozen=True)
class UpdateProposedAmount:
    asset_id: str
    value: Any

@dataclass(frozen=True)
class RemoveProposed:
    asset_id: str

@dataclass(frozen=True)
class SetPresentation:
    presentation: PresentationData

@dataclass(frozen=True)
class ImportCompleted:
    profile: ClientProfile


# Reducers ------------------------------------------------------------------

def _with_holdings(session: ProposalSession, ledger: HoldingLedger) -> ProposalSession:
    profile = session.profile.model_copy(update={"current_holdings": list(ledger.assets)})
    return replace(session, profile=profile)


def _add_holding(s, a: AddHolding):
    # Manual entries are confirmed by the user
    asset = a.asset if a.asset.confidence is not None else a.asset.model_copy(update={"confidence": 1.0})
    return _with_holdings(s, s.holdings.add(asset))

def _update_holding(s, a: UpdateHolding):
    return _with_holdings(s, s.holdings.update(a.asset_id, a.field, a.value))

def _remove_holding(s, a: RemoveHolding):
    return _with_holdings(s, s.holdings.remove(a.asset_id))

def _toggle_type(s, a: ToggleProposalType):
    return replace(s, settings=proposal_settings.toggle_type(s.settings, a.asset_type))

def _set_count(s, a: SetProposalCount):
    return replace(s, settings=proposal_settings.set_count(s.settings, a.asset_type, a.count))

def _toggle_sub(s, a: ToggleSubCategory):
    return replace(s, settings=proposal_settings.toggle_sub_category(s.settings, a.asset_type, a.sub_category))

def _add_candidate(s, a: AddCandidate):
    return replace(s, proposed=add_candidate(s.proposed, a.candidate, a.default_amount))

def _add_manual(s, a: AddManualAsset):
    return replace(s, proposed=add_manual_selection(s.proposed, a.stock, a.default_amount))

def _update_proposed(s, a: UpdateProposedAmount):
    return replace(s, proposed=s.proposed.update(a.asset_id, "amount", a.value))

def _remove_proposed(s, a: RemoveProposed):
    return replace(s, proposed=s.proposed.remove(a.asset_id))

def _set_presentation(s, a: SetPresentation):
    return replace(s, presentation=a.presentation)

def _import_completed(s, a: ImportCompleted):
    return replace(s, profile=a.profile)


REDUCERS: Dict[Type, Callable[[ProposalSession, Any], ProposalSession]] = {
    AddHolding: _add_holding,
    UpdateHolding: _update_holding,
    RemoveHolding: _remove_holding,
    ToggleProposalType: _toggle_type,
    SetProposalCount: _set_count,
    ToggleSubCategory: _toggle_sub,
    AddCandidate: _add_candidate,
    AddManualAsset: _add_manual,
    UpdateProposedAmount: _update_proposed,
    RemoveProposed: _remove_proposed,
    SetPresentation: _set_presentation,
    ImportCompleted: _import_completed,
}


def reduce_session(session: ProposalSession, action: Any) -> ProposalSession:
    reducer = REDUCERS.get(type(action))
    if reducer is None:
        raise TypeError(f"Unknown session action: {type(action).__name__}")
    return reducer(session, action)
