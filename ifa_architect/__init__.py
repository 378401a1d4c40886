"""
ifa_architect: AI-assisted investment proposal builder.

Collects a client profile and holdings, asks an LLM for candidate assets and
proposal slides, and shapes the result for rendering and deck export.

Entry point
-----------
>>> from ifa_architect.orchestration import generate_investment_proposal
>>> deck = asyncio.run(generate_investment_proposal(profile, proposed, settings, caps.research, caps.generate))
"""

__version__ = "1.0.0"
