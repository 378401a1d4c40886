import logging
from typing import Any, Dict, Optional

from ifa_architect.models import PresentationData, SlideContent, SlideType
from ifa_architect.utils.compliance import audit_node_wrapper
from ifa_architect.utils.error_handler import MalformedPayloadError
from ifa_architect.utils.payload import decode_json

logger = logging.getLogger(__name__)

FALLBACK_TITLE = "資産運用提案書"
FALLBACK_CLIENT = "お客様"


def fallback_presentation() -> PresentationData:
    """Minimal one-slide deck returned whenever generation cannot be used."""
    return PresentationData(
        title=FALLBACK_TITLE,
        client_name=FALLBACK_CLIENT,
        slides=[SlideContent(id="1", type=SlideType.TITLE, title="資産運用分析レポート", subtitle="システムエラーが発生しました")],
    )


def _repair(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Fill the gaps the generator commonly leaves: slide ids and client name."""
    repaired = dict(payload)
    if not repaired.get("clientName") and not repaired.get("client_name"):
        repaired["clientName"] = FALLBACK_CLIENT
    slides = repaired.get("slides")
    if isinstance(slides, list):
        fixed = []
        for index, slide in enumerate(slides, start=1):
            if isinstance(slide, dict) and not slide.get("id"):
                slide = {**slide, "id": str(index)}
            fixed.append(slide)
        repaired["slides"] = fixed
    return repaired


def parse_presentation(raw: Any) -> PresentationData:
    """Coerce generator output into a PresentationData or raise MalformedPayloadError."""
    if isinstance(raw, PresentationData):
        return raw
    if isinstance(raw, (str, bytes)):
        raw = decode_json(raw.decode("utf-8") if isinstance(raw, bytes) else raw)
    if not isinstance(raw, dict):
        raise MalformedPayloadError(f"Unexpected document payload type: {type(raw).__name__}")
    try:
        return PresentationData.model_validate(_repair(raw))
    except ValueError as e:
        raise MalformedPayloadError(f"Document failed structural validation: {e}") from e


@audit_node_wrapper
async def node_validate_document(state: Dict[str, Any]) -> Dict[str, Any]:
    error: Optional[str] = state.get("generation_error")
    raw = state.get("raw_document")

    if error or raw is None:
        logger.warning("validate_document: generation failed (%s), returning fallback deck", error or "empty result")
        return {"presentation": fallback_presentation(), "used_fallback": True}

    try:
        presentation = parse_presentation(raw)
    except MalformedPayloadError as e:
        logger.error("validate_document: %s", e)
        return {"presentation": fallback_presentation(), "used_fallback": True}

    logger.info("validate_document: %d slides validated", len(presentation.slides))
    return {"presentation": presentation, "used_fallback": False}
