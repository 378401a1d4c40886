import logging
import uuid
from typing import Optional, Sequence

from langgraph.graph import StateGraph, END

from ifa_architect.capabilities import GenerateFn, ResearchFn
from ifa_architect.models import Asset, ClientProfile, PresentationData, ProposalSettings
from ifa_architect.utils.logging import log_audit_action
from .state import ProposalState
from .nodes.deep_research import RESEARCH_UNAVAILABLE, make_deep_research_node
from .nodes.generate_document import make_generate_document_node
from .nodes.validate_document import fallback_presentation, node_validate_document

logger = logging.getLogger(__name__)


def build_graph(research: ResearchFn, generate: GenerateFn):
    workflow = StateGraph(ProposalState)

    workflow.add_node("deep_research", make_deep_research_node(research))
    workflow.add_node("generate_document", make_generate_document_node(generate))
    workflow.add_node("validate_document", node_validate_document)

    # Research strictly precedes generation
    workflow.set_entry_point("deep_research")
    workflow.add_edge("deep_research", "generate_document")
    workflow.add_edge("generate_document", "validate_document")
    workflow.add_edge("validate_document", END)

    return workflow.compile()


async def generate_investment_proposal(
    profile: ClientProfile,
    proposed_assets: Sequence[Asset],
    settings: ProposalSettings,
    research: ResearchFn,
    generate: GenerateFn,
    session_id: Optional[str] = None,
) -> PresentationData:
    """
    Run the report assembly pipeline. Always returns a PresentationData;
    any failure degrades to the one-slide fallback deck.
    """
    session_id = session_id or uuid.uuid4().hex
    initial_state: ProposalState = {
        "session_id": session_id,
        "profile": profile,
        "proposed_assets": list(proposed_assets),
        "settings": settings,
        "research_report": "",
        "raw_document": None,
        "generation_error": None,
    }
    try:
        final_state = await build_graph(research, generate).ainvoke(initial_state)
    except Exception as e:
        logger.error("Proposal pipeline failed for session %s: %s", session_id, e, exc_info=True)
        final_state = {}

    presentation = final_state.get("presentation")
    used_fallback = presentation is None or final_state.get("used_fallback", False)
    presentation = presentation or fallback_presentation()
    log_audit_action(
        session_id,
        "PROPOSAL_ASSEMBLED",
        f"Proposal assembled with {len(presentation.slides)} slides.",
        slide_count=len(presentation.slides),
        used_fallback=used_fallback,
        proposed_assets=len(proposed_assets),
        research_available=final_state.get("research_report", RESEARCH_UNAVAILABLE) != RESEARCH_UNAVAILABLE,
    )
    return presentation
