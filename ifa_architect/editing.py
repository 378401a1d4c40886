"""
AI-assisted rewrite of a slide's body text from a free-form instruction.
"""

import logging

from ifa_architect.capabilities import RewriteFn
from ifa_architect.models import PresentationData

logger = logging.getLogger(__name__)


async def rewrite_text(current_text: str, instruction: str, rewrite: RewriteFn) -> str:
    """Rewritten text, or the original text when the call fails or returns nothing."""
    try:
        new_text = await rewrite(current_text, instruction)
    except Exception as e:
        logger.error(f"Text rewrite failed: {str(e)}. Keeping original text.")
        return current_text
    return new_text.strip() if new_text and new_text.strip() else current_text


async def rewrite_slide(
    presentation: PresentationData,
    slide_index: int,
    instruction: str,
    rewrite: RewriteFn,
) -> PresentationData:
    """New document with only the chosen slide's bodyText replaced."""
    if not instruction or not instruction.strip():
        return presentation
    if not 0 <= slide_index < len(presentation.slides):
        logger.warning("rewrite_slide: index %d out of range", slide_index)
        return presentation

    slide = presentation.slides[slide_index]
    updated_text = await rewrite_text(slide.body_text or "", instruction, rewrite)
    if updated_text == (slide.body_text or ""):
        return presentation

    slides = list(presentation.slides)
    slides[slide_index] = slide.model_copy(update={"body_text": updated_text})
    return presentation.model_copy(update={"slides": slides})
