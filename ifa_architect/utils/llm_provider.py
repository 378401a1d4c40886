"""
LLM provider switch for the proposal builder.

LLM_PROVIDER picks the backend (google/gemini, groq, openrouter, ollama). Every
backend exposes two tiers: the fast tier used for research, recommendations,
document parsing and rewrites, and the report tier used to write the deck.
"""

import os
import logging
from typing import Optional
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from ifa_architect import config

logger = logging.getLogger(__name__)

# provider -> (fast tier, report tier); google/gemini read config instead
PROVIDER_MODELS = {
    "groq": ("llama-3.1-8b-instant", "llama-3.3-70b-versatile"),
    "openrouter": ("openrouter/auto", "openrouter/auto"),
    "ollama": ("llama3", "llama3"),
}
GOOGLE_PROVIDERS = ("google", "gemini")

# Current key index per provider
_KEY_INDEXES = {"openrouter": 0, "google": 0, "gemini": 0, "groq": 0}


def get_keys_for_provider(provider: str) -> list:
    """Keys from <PROVIDER>_API_KEY, comma or whitespace separated."""
    raw_val = os.getenv(f"{provider.upper()}_API_KEY", "")
    return [k.strip() for k in raw_val.replace(",", " ").split() if k.strip()]


def rotate_key(provider: str):
    """Move to the next key after a quota rejection."""
    keys = get_keys_for_provider(provider)
    if len(keys) > 1:
        _KEY_INDEXES[provider] = (_KEY_INDEXES.get(provider, 0) + 1) % len(keys)
        logger.warning(f"Rotating to next {provider} API key (New index: {_KEY_INDEXES[provider]})")


def current_key(provider: str) -> Optional[str]:
    keys = get_keys_for_provider(provider)
    if not keys:
        return None
    return keys[_KEY_INDEXES.get(provider, 0) % len(keys)]


def model_for(provider: str, fast: bool) -> str:
    if provider in GOOGLE_PROVIDERS:
        return config.FAST_MODEL if fast else config.REPORT_MODEL
    if provider not in PROVIDER_MODELS:
        raise ValueError(f"Unknown provider: {provider}. Use: groq, openrouter, google, or ollama")
    fast_model, report_model = PROVIDER_MODELS[provider]
    return fast_model if fast else report_model


def _require_key(provider: str, api_key: Optional[str]) -> str:
    if not api_key:
        raise ValueError(f"{provider.upper()}_API_KEY not set in .env")
    return api_key


def get_llm(temperature: float = 0.3, model_override: Optional[str] = None, fast: bool = True):
    """
    Chat model for the configured provider and tier.

    Retries belong to quota_retry, so the clients are built with max_retries=0
    (1 for Gemini, whose client retries transport errors separately).
    """
    provider = os.getenv("LLM_PROVIDER", config.LLM_PROVIDER).lower()
    model = model_override or model_for(provider, fast)
    api_key = current_key(provider)
    logger.debug(f"LLM {provider}/{model} ({'fast' if fast else 'report'} tier)")

    if provider == "groq":
        from langchain_groq import ChatGroq
        return ChatGroq(api_key=_require_key(provider, api_key), model=model, temperature=temperature, max_retries=0)

    if provider == "openrouter":
        return ChatOpenAI(
            api_key=_require_key(provider, api_key),
            base_url="https://openrouter.ai/api/v1",
            model=model,
            temperature=temperature,
            max_retries=0,
        )

    if provider == "ollama":
        return ChatOpenAI(
            base_url="http://localhost:11434/v1",
            api_key="ollama",
            model=model,
            temperature=temperature,
            max_retries=0,
        )

    return ChatGoogleGenerativeAI(
        model=model,
        google_api_key=_require_key(provider, api_key),
        temperature=temperature,
        max_retries=1,
    )

