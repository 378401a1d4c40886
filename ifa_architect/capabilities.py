"""
Injectable capabilities for the external AI calls.

Every component that talks to the model receives only the callable it needs,
so tests substitute deterministic async stubs for the LLM-backed defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Sequence, Union

if TYPE_CHECKING:
    from ifa_architect.models import Asset, ClientProfile, ParseResult, PresentationData
    from ifa_architect.proposal_settings import ProposalRequest

ResearchFn = Callable[["ClientProfile", Sequence["Asset"]], Awaitable[str]]
RecommendFn = Callable[["ClientProfile", List["ProposalRequest"]], Awaitable[List[Any]]]
GenerateFn = Callable[
    ["ClientProfile", Sequence["Asset"], Sequence["Asset"], str],
    Awaitable[Union["PresentationData", dict, str]],
]
RewriteFn = Callable[[str, str], Awaitable[str]]
ParseFn = Callable[[bytes, str], Awaitable[Union["ParseResult", dict]]]


@dataclass(frozen=True)
class ProposalCapabilities:
    research: ResearchFn
    recommend: RecommendFn
    generate: GenerateFn
    rewrite: RewriteFn
    parse_document: ParseFn


def default_capabilities() -> ProposalCapabilities:
    """Capabilities backed by the configured LLM provider."""
    from ifa_architect import llm_gateway

    return ProposalCapabilities(
        research=llm_gateway.request_deep_research,
        recommend=llm_gateway.request_recommendations,
        generate=llm_gateway.request_proposal_document,
        rewrite=llm_gateway.request_text_rewrite,
        parse_document=llm_gateway.request_document_parse,
    )
