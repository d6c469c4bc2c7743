"""
LLM Factory
Builds the LLM adapter from an explicit key plus LLM settings
"""
from typing import Optional
import logging

from config import LLMSettings
from utils.exceptions import ConfigurationError
from .base import BaseLLM
from .openai_llm import OpenAILLM


logger = logging.getLogger(__name__)


def get_llm(
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[LLMSettings] = None,
    **kwargs,
) -> BaseLLM:
    """
    Get an LLM instance

    Args:
        api_key: provider key; falls back to the settings' key
        model: model name (defaults to settings.model_name)
        settings: LLM settings
        **kwargs: extra parameters (temperature, max_tokens, ...)

    Raises:
        ConfigurationError: no key available

    Example:
        llm = get_llm(api_key=credentials.get("open_ai"))
        llm = get_llm(api_key=key, model="gpt-4o-mini", temperature=0.2)
    """
    settings = settings or LLMSettings()
    api_key = (api_key or settings.openai_api_key or "").strip()
    if not api_key:
        raise ConfigurationError("OpenAI API key is not configured")

    kwargs.setdefault("temperature", settings.temperature)
    kwargs.setdefault("max_tokens", settings.max_tokens)

    return OpenAILLM(
        model=model or settings.model_name,
        api_key=api_key,
        base_url=kwargs.pop("base_url", None) or settings.base_url,
        **kwargs,
    )
