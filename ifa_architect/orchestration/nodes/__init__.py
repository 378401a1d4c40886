"""
Pipeline node factories for the report assembly graph.
"""

from .deep_research import make_deep_research_node, RESEARCH_UNAVAILABLE
from .generate_document import make_generate_document_node
from .validate_document import node_validate_document, fallback_presentation, parse_presentation

__all__ = [
    "make_deep_research_node",
    "RESEARCH_UNAVAILABLE",
    "make_generate_document_node",
    "node_validate_document",
    "fallback_presentation",
    "parse_presentation",
]
