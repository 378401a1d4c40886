"""
Document import reconciler: merges assets and profile hints extracted from an
uploaded statement into the current client profile.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from ifa_architect.capabilities import ParseFn
from ifa_architect.ledger import mint_id
from ifa_architect.models import FAMILY_OPTIONS, PREFECTURES, ClientProfile, ParseResult, ProfileHints
from ifa_architect.utils.error_handler import graceful_fallback

logger = logging.getLogger(__name__)

NO_ASSETS_NOTICE = "資産情報を読み取れませんでした。画像が鮮明か、または対応している形式かご確認ください。"
LOW_CONFIDENCE_NOTICE = "読み取り精度の低い項目があります。内容をご確認ください。"


@dataclass(frozen=True)
class ImportOutcome:
    profile: ClientProfile
    imported_count: int
    notice: Optional[str] = None


def match_region(hint: str, regions: Iterable[str] = PREFECTURES) -> str:
    """
    Resolve a region hint against the canonical list.

    Exact match wins, then a region the hint is a prefix of ("京都" -> "京都府"),
    then bidirectional containment ("東京都港区" -> "東京都"). No match keeps
    the hint verbatim.
    """
    regions = list(regions)
    if hint in regions:
        return hint
    if hint:
        prefixed = next((r for r in regions if r.startswith(hint)), None)
        if prefixed:
            return prefixed
    return next((r for r in regions if r in hint or hint in r), hint)


def match_family_structure(hint: str, options: Iterable[str] = FAMILY_OPTIONS) -> str:
    """Longest family category contained in the hint, else the hint itself."""
    matches = [o for o in options if o in hint]
    return max(matches, key=len) if matches else hint


def merge_profile_hints(profile: ClientProfile, hints: Optional[ProfileHints]) -> ClientProfile:
    if hints is None:
        return profile
    update = {}
    if hints.age:
        update["age"] = hints.age
    for attr in ("gender", "risk_tolerance", "goals"):
        value = getattr(hints, attr)
        if value and value.strip():
            update[attr] = value
    if hints.region and hints.region.strip():
        update["region"] = match_region(hints.region.strip())
    if hints.family_structure and hints.family_structure.strip():
        update["family_structure"] = match_family_structure(hints.family_structure.strip())
    return profile.model_copy(update=update)


def merge_parse_result(profile: ClientProfile, result: ParseResult, filename: str) -> ImportOutcome:
    """Append extracted assets (fresh ids, source note) and apply profile hints."""
    if not result.assets:
        return ImportOutcome(profile, 0, NO_ASSETS_NOTICE)

    imported = [
        asset.model_copy(deep=True, update={"id": mint_id("imported"), "description": f"Imported from {filename}"})
        for asset in result.assets
    ]
    merged = merge_profile_hints(profile, result.profile_hints)
    merged = merged.model_copy(update={"current_holdings": list(profile.current_holdings) + imported})

    notice = LOW_CONFIDENCE_NOTICE if any(a.is_low_confidence for a in imported) else None
    logger.info("Imported %d assets from %s", len(imported), filename)
    return ImportOutcome(merged, len(imported), notice)


async def import_document(
    profile: ClientProfile,
    file_bytes: bytes,
    mime_type: str,
    filename: str,
    parse_document: ParseFn,
) -> ImportOutcome:
    """Parse an uploaded file and merge it into the profile. Never raises."""

    @graceful_fallback(ParseResult)
    async def _parse():
        raw = await parse_document(file_bytes, mime_type)
        return raw if isinstance(raw, ParseResult) else ParseResult.model_validate(raw or {})

    result = await _parse()
    return merge_parse_result(profile, result, filename)
