"""
LLM Module
Chat model adapters
"""
from .base import BaseLLM, LLMResponse, Message, MessageRole, parse_json_content
from .openai_llm import OpenAILLM
from .factory import get_llm

__all__ = [
    "BaseLLM",
    "LLMResponse",
    "Message",
    "MessageRole",
    "parse_json_content",
    "OpenAILLM",
    "get_llm",
]
