"""
Turns the sparse proposal settings (type -> count, type -> sub-categories)
into the ordered request list used by the recommendation and report stages.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from ifa_architect.models import ASSET_TYPES, PROPOSAL_TYPE_ORDER, SUB_CATEGORIES, ProposalSettings

logger = logging.getLogger(__name__)

MIN_COUNT = 1
MAX_COUNT = 10


@dataclass(frozen=True)
class ProposalRequest:
    type: str
    count: int
    sub_categories: Tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return ASSET_TYPES.get(self.type, self.type)

    def describe(self) -> str:
        """One line of the recommendation request, e.g. '株式 (Stock): 3銘柄'."""
        detail = f" (特に希望するセクター/種別: {'、'.join(self.sub_categories)})" if self.sub_categories else ""
        return f"{self.label} ({self.type}): {self.count}銘柄{detail}"


def resolve_requests(settings: ProposalSettings) -> List[ProposalRequest]:
    """
    Requested types with count > 0, in canonical type order.

    Types outside the canonical order keep their insertion order after the
    known ones. A count of 0 is the same as an absent key.
    """
    counts = settings.proposal_counts or {}
    ordered = [t for t in PROPOSAL_TYPE_ORDER if t in counts]
    ordered += [t for t in counts if t not in PROPOSAL_TYPE_ORDER]

    requests = []
    for asset_type in ordered:
        count = int(counts.get(asset_type) or 0)
        if count <= 0:
            continue
        details = (settings.proposal_details or {}).get(asset_type) or []
        requests.append(ProposalRequest(asset_type, count, tuple(details)))
    return requests


def describe_requests(requests: List[ProposalRequest]) -> str:
    return ", ".join(r.describe() for r in requests)


def toggle_type(settings: ProposalSettings, asset_type: str) -> ProposalSettings:
    """Switch a type between off (0) and on (1). Sub-category picks are kept."""
    current = settings.proposal_counts.get(asset_type, 0) or 0
    counts = {**settings.proposal_counts, asset_type: 0 if current > 0 else MIN_COUNT}
    return settings.model_copy(update={"proposal_counts": counts})


def set_count(settings: ProposalSettings, asset_type: str, count) -> ProposalSettings:
    """Set the requested count of an enabled type, clamped to 1..10."""
    try:
        value = int(count)
    except (TypeError, ValueError):
        value = MIN_COUNT
    value = max(MIN_COUNT, min(MAX_COUNT, value))
    counts = {**settings.proposal_counts, asset_type: value}
    return settings.model_copy(update={"proposal_counts": counts})


def toggle_sub_category(settings: ProposalSettings, asset_type: str, sub_category: str) -> ProposalSettings:
    vocabulary = SUB_CATEGORIES.get(asset_type, [])
    if sub_category not in vocabulary:
        logger.warning("Unknown sub-category %r for %s", sub_category, asset_type)
        return settings

    current = list((settings.proposal_details or {}).get(asset_type, []))
    if sub_category in current:
        current.remove(sub_category)
    else:
        current.append(sub_category)
    details = {**(settings.proposal_details or {}), asset_type: current}
    return settings.model_copy(update={"proposal_details": details})
