"""
Intelligence Module
LLM adapters, image analysis and strategic recommendations
"""
from .llm import (
    BaseLLM,
    LLMResponse,
    Message,
    OpenAILLM,
    get_llm,
)
from .vision import ImageAnalyzer, convert_analysis
from .recommendations import (
    CompetitorLeadership,
    analyze_competitor_leadership,
    build_recommendations_prompt,
    generate_ai_recommendations,
    generate_basic_recommendations,
    parse_recommendations,
    synthesize_recommendations,
)

__all__ = [
    # LLM
    "BaseLLM",
    "LLMResponse",
    "Message",
    "OpenAILLM",
    "get_llm",
    # Vision
    "ImageAnalyzer",
    "convert_analysis",
    # Recommendations
    "CompetitorLeadership",
    "analyze_competitor_leadership",
    "build_recommendations_prompt",
    "generate_ai_recommendations",
    "generate_basic_recommendations",
    "parse_recommendations",
    "synthesize_recommendations",
]
