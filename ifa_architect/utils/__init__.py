"""Shared helpers: logging, error handling, LLM provider, payload decoding."""
