"""
Base LLM
Adapter interface for generative and vision-capable chat models
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field
from enum import Enum
import json
import re

from utils.exceptions import LLMError


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


ContentPart = Dict[str, Any]


@dataclass
class Message:
    """Chat message; content is plain text or a list of text / image parts"""
    role: MessageRole
    content: Union[str, List[ContentPart]]

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def user_with_image(cls, text: str, image_url: str, detail: str = "low") -> "Message":
        return cls(
            role=MessageRole.USER,
            content=[
                {"type": "text", "text": text},
                {"type": "image_url", "image_url": {"url": image_url, "detail": detail}},
            ],
        )


@dataclass
class LLMResponse:
    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)
    finish_reason: Optional[str] = None
    raw_response: Optional[Any] = None


_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def parse_json_content(content: str, provider: str = "") -> Dict[str, Any]:
    """
    Parse a JSON object out of a model reply

    Tolerates markdown fences and leading/trailing prose around the object.

    Raises:
        LLMError: no JSON object could be parsed
    """
    text = _FENCE_RE.sub("", (content or "").strip())
    try:
        data = json.loads(text)
    except ValueError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end <= start:
            raise LLMError("Model reply is not JSON", provider=provider)
        try:
            data = json.loads(text[start:end + 1])
        except ValueError as exc:
            raise LLMError(f"Model reply is not valid JSON: {exc}", provider=provider) from exc

    if not isinstance(data, dict):
        raise LLMError("Model reply is not a JSON object", provider=provider)
    return data


class BaseLLM(ABC):
    """
    LLM adapter base

    Every implementation answers `acomplete`; `ajson` is the structured
    variant used by the vision and recommendation steps.
    """

    def __init__(
        self,
        model: str,
        temperature: float = 0.7,
        max_tokens: int = 3000,
        timeout: float = 60.0,
        **kwargs,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.extra_config = kwargs

    @property
    @abstractmethod
    def provider(self) -> str:
        pass

    @abstractmethod
    async def acomplete(
        self,
        messages: List[Message],
        json_mode: bool = False,
        **kwargs,
    ) -> LLMResponse:
        """
        Generate one reply

        Args:
            messages: conversation
            json_mode: ask the provider for a JSON object reply
            **kwargs: per-call overrides (model, temperature, max_tokens)
        """
        pass

    async def ajson(self, messages: List[Message], **kwargs) -> Dict[str, Any]:
        """Reply parsed as a JSON object"""
        response = await self.acomplete(messages, json_mode=True, **kwargs)
        return parse_json_content(response.content, self.provider)

    async def aclose(self) -> None:
        """Release the underlying client (no-op by default)"""
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model}, provider={self.provider})"
