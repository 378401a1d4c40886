import logging
from typing import Any, Dict

from ifa_architect.capabilities import ResearchFn
from ifa_architect.utils.compliance import audit_node_wrapper
from ifa_architect.utils.error_handler import graceful_fallback

logger = logging.getLogger(__name__)

RESEARCH_UNAVAILABLE = "Deep research data unavailable. Please use internal knowledge."


def make_deep_research_node(research: ResearchFn):
    """Research phase: best-effort, any failure or empty text becomes a placeholder."""

    @graceful_fallback(RESEARCH_UNAVAILABLE)
    async def _research(profile, assets) -> str:
        return await research(profile, assets)

    @audit_node_wrapper
    async def deep_research(state: Dict[str, Any]) -> Dict[str, Any]:
        profile = state["profile"]
        assets = state.get("proposed_assets", [])
        logger.info("deep_research: researching %d proposed assets", len(assets))

        report = await _research(profile, assets)
        if not report or not str(report).strip():
            logger.warning("deep_research: empty research result, using placeholder")
            report = RESEARCH_UNAVAILABLE
        return {"research_report": str(report)}

    return deep_research
