"""
orchestration: report assembly pipeline built on LangGraph.

Entry point
-----------
>>> from ifa_architect.orchestration import generate_investment_proposal
>>> deck = await generate_investment_proposal(profile, proposed, settings, research, generate)
"""

from .proposal_graph import build_graph, generate_investment_proposal

__all__ = ["build_graph", "generate_investment_proposal"]
