"""
ProposalState: shared state schema for the report assembly LangGraph pipeline.

Every node reads from and writes to this TypedDict as it flows through
the graph: deep_research → generate_document → validate_document.
"""

from __future__ import annotations

from typing import Any, List, Optional, TypedDict

from ifa_architect.models import Asset, ClientProfile, PresentationData, ProposalSettings


class ProposalState(TypedDict, total=False):
    """Shared state flowing through the proposal graph.

    Fields
    ------
    session_id : str
        Identifier used to tag audit log entries.
    profile : ClientProfile
        Client profile including the current holdings.
    proposed_assets : list[Asset]
        Rebalanced positions chosen on the rebalance step.
    settings : ProposalSettings
        Requested asset types and sub-categories.
    research_report : str
        Deep-research text, or the "research unavailable" placeholder.
    raw_document : Any
        Unvalidated generator output (PresentationData, dict or JSON text).
    generation_error : str
        Message of the generation failure, when there was one.
    presentation : PresentationData
        Final validated document (or the fallback deck).
    used_fallback : bool
        True when `presentation` is the fallback deck.
    """

    session_id: str
    profile: ClientProfile
    proposed_assets: List[Asset]
    settings: ProposalSettings
    research_report: str
    raw_document: Any
    generation_error: Optional[str]
    presentation: PresentationData
    used_fallback: bool
