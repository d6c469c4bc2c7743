"""
Vision
Single-image analysis through a vision-capable LLM
"""
from typing import Any, Dict, List, Optional
import logging

from config import LLMSettings
from intelligence.llm import BaseLLM, Message
from intelligence.prompts import VISION_SYSTEM_PROMPT, VISION_USER_PROMPT
from models import ImageAnalysis
from utils.exceptions import AnalysisError, LLMError


logger = logging.getLogger(__name__)


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value if item]


def _clamp_score(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 5.0
    return min(max(score, 1.0), 10.0)


def convert_analysis(image_url: str, data: Dict[str, Any]) -> ImageAnalysis:
    """Model JSON reply -> ImageAnalysis"""
    return ImageAnalysis(
        image_url=image_url,
        dominant_colors=_as_list(data.get("dominantColors")),
        color_mood=data.get("colorMood"),
        style=data.get("style"),
        composition=data.get("composition"),
        has_text=bool(data.get("hasText")),
        text_content=data.get("textContent"),
        has_product=bool(data.get("hasProduct")),
        product_type=data.get("productType"),
        has_person=bool(data.get("hasPerson")),
        person_context=data.get("personContext"),
        visual_elements=_as_list(data.get("visualElements")),
        branding_elements=_as_list(data.get("brandingElements")),
        quality_score=_clamp_score(data.get("qualityScore") or 5),
        engagement_potential=data.get("engagementPotential") or "medio",
        suggested_improvements=_as_list(data.get("suggestedImprovements")),
    )


class ImageAnalyzer:
    """Vision adapter: one media URL plus context -> ImageAnalysis"""

    def __init__(self, llm: BaseLLM, settings: Optional[LLMSettings] = None):
        self.llm = llm
        self.settings = settings or LLMSettings()

    async def analyze(self, image_url: str, context: Optional[str] = None) -> ImageAnalysis:
        """
        Analyze one image

        Raises:
            AnalysisError: the provider failed or replied with unusable JSON
        """
        logger.debug(f"[Vision] Analyzing {image_url[:50]}")
        system = VISION_SYSTEM_PROMPT.format(
            context=f"\nContexto adicional: {context}\n" if context else ""
        )
        messages = [
            Message.system(system),
            Message.user_with_image(VISION_USER_PROMPT, image_url, detail="high"),
        ]

        try:
            data = await self.llm.ajson(
                messages,
                model=self.settings.vision_model,
                max_tokens=self.settings.vision_max_tokens,
            )
        except LLMError as exc:
            raise AnalysisError(f"Image analysis failed: {exc}", provider=self.llm.provider) from exc

        analysis = convert_analysis(image_url, data)
        logger.debug(f"[Vision] Style {analysis.style}, quality {analysis.quality_score:g}/10")
        return analysis
