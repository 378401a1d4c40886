import logging
from typing import Any, Dict

from ifa_architect.capabilities import GenerateFn
from ifa_architect.utils.compliance import audit_node_wrapper

logger = logging.getLogger(__name__)


def make_generate_document_node(generate: GenerateFn):
    """Generation phase: one call to the report generator with the research embedded."""

    @audit_node_wrapper
    async def generate_document(state: Dict[str, Any]) -> Dict[str, Any]:
        profile = state["profile"]
        proposed = state.get("proposed_assets", [])
        research = state.get("research_report", "")
        logger.info("generate_document: building proposal for %d proposed assets", len(proposed))

        try:
            raw = await generate(profile, list(profile.current_holdings), list(proposed), research)
        except Exception as e:
            logger.error(f"Report Generation Error: {str(e)}")
            return {"raw_document": None, "generation_error": str(e)}

        return {"raw_document": raw, "generation_error": None}

    return generate_document
