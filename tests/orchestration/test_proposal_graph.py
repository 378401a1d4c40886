import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from ifa_architect.models import Asset, PresentationData, ProposalSettings, SlideType
from ifa_architect.orchestration import generate_investment_proposal
from ifa_architect.orchestration.nodes import RESEARCH_UNAVAILABLE, parse_presentation
from ifa_architect.utils.error_handler import MalformedPayloadError

PROPOSED = [Asset(id="prop-1", name="NVIDIA", code="NVDA", amount=1_000_000)]


def _run(profile, research, generate):
    return asyncio.run(generate_investment_proposal(profile, PROPOSED, ProposalSettings(), research, generate))


def _assert_fallback(deck):
    assert len(deck.slides) == 1
    assert deck.slides[0].type == SlideType.TITLE
    assert deck.client_name == "お客様"


def test_generated_deck_is_returned(sample_profile, full_deck_payload):
    research = AsyncMock(return_value="PER 45倍")
    generate = AsyncMock(return_value=full_deck_payload)

    deck = _run(sample_profile, research, generate)

    assert deck == PresentationData.model_validate(full_deck_payload)
    profile, holdings, proposed, research_text = generate.call_args.args
    assert holdings == sample_profile.current_holdings
    assert proposed == PROPOSED
    assert research_text == "PER 45倍"


def test_research_runs_before_generation(sample_profile, full_deck):
    order = []

    async def research(profile, assets):
        order.append("research")
        return "data"

    async def generate(profile, holdings, proposed, research_text):
        order.append("generate")
        return full_deck

    _run(sample_profile, research, generate)
    assert order == ["research", "generate"]


def test_research_failure_uses_placeholder_and_keeps_result(sample_profile, full_deck):
    research = AsyncMock(side_effect=RuntimeError("search quota"))
    generate = AsyncMock(return_value=full_deck)

    deck = _run(sample_profile, research, generate)

    assert deck == full_deck
    assert generate.call_args.args[3] == RESEARCH_UNAVAILABLE


def test_empty_research_uses_placeholder(sample_profile, full_deck):
    generate = AsyncMock(return_value=full_deck)
    _run(sample_profile, AsyncMock(return_value="   "), generate)
    assert generate.call_args.args[3] == RESEARCH_UNAVAILABLE


def test_generation_failure_returns_single_title_slide(sample_profile):
    deck = _run(sample_profile, AsyncMock(return_value="x"), AsyncMock(side_effect=RuntimeError("503")))
    _assert_fallback(deck)


@pytest.mark.parametrize("raw", [
    "not json at all",
    {"title": "x", "slides": []},
    {"title": "x", "slides": [{"id": "1", "type": "Unknown", "title": "t"}]},
    ["a", "list"],
    None,
])
def test_malformed_generation_returns_fallback(sample_profile, raw):
    _assert_fallback(_run(sample_profile, AsyncMock(return_value="x"), AsyncMock(return_value=raw)))


def test_parse_presentation_repairs_ids_and_client_name():
    deck = parse_presentation('```json\n{"title": "t", "slides": [{"type": "Title", "title": "a"}, {"type": "Disclaimer", "title": "b"}]}\n```')
    assert [s.id for s in deck.slides] == ["1", "2"]
    assert deck.client_name == "お客様"


def test_parse_presentation_rejects_missing_title():
    with pytest.raises(MalformedPayloadError):
        parse_presentation({"slides": [{"id": "1", "type": "Title", "title": "a"}]})


def _assembled_entry(audit):
    (entry,) = [c for c in audit.call_args_list if c.args[1] == "PROPOSAL_ASSEMBLED"]
    return entry.kwargs


def test_audit_records_assembled_proposal(sample_profile, full_deck):
    with patch("ifa_architect.orchestration.proposal_graph.log_audit_action") as audit:
        _run(sample_profile, AsyncMock(return_value="data"), AsyncMock(return_value=full_deck))

    assert _assembled_entry(audit) == {
        "slide_count": 15,
        "used_fallback": False,
        "proposed_assets": 1,
        "research_available": True,
    }


def test_audit_records_fallback(sample_profile):
    with patch("ifa_architect.orchestration.proposal_graph.log_audit_action") as audit:
        _run(sample_profile, AsyncMock(side_effect=RuntimeError("down")), AsyncMock(side_effect=RuntimeError("503")))

    entry = _assembled_entry(audit)
    assert entry["used_fallback"] is True
    assert entry["slide_count"] == 1
    assert entry["research_available"] is False
