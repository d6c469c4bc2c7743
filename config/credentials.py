"""
Credentials
Flat credential object handed to the pipeline by its host, plus a resolver
that answers availability questions without exposing the secrets.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from .settings import Settings


SEARCH_PROVIDER_FIELDS = {
    "serpapi": ("serp_api",),
    "googlecse": ("google_cse_key", "google_cse_cx"),
    "bing": ("bing_api_key",),
}


class ResearchCredentials(BaseModel):
    """Provider credentials for one research run"""
    serp_api: Optional[str] = Field(None, description="SerpAPI key (web search)")
    apify: Optional[str] = Field(None, description="Apify token (social scraping)")
    open_ai: Optional[str] = Field(None, description="OpenAI key (vision + recommendations)")
    google_cse_key: Optional[str] = Field(None, description="Google Custom Search key")
    google_cse_cx: Optional[str] = Field(None, description="Google Custom Search cx")
    bing_api_key: Optional[str] = Field(None, description="Bing Web Search key")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResearchCredentials":
        return cls(
            serp_api=settings.search.serpapi_key,
            apify=settings.apify.token,
            open_ai=settings.llm.openai_api_key,
            google_cse_key=settings.search.google_cse_key,
            google_cse_cx=settings.search.google_cse_cx,
            bing_api_key=settings.search.bing_api_key,
        )


def mask_secret(value: Optional[str]) -> str:
    """Mask a secret for display, keeping the first and last four characters"""
    if not value or len(value) < 8:
        return "••••••••"
    return f"{value[:4]}{'•' * (len(value) - 8)}{value[-4:]}"


class CredentialResolver:
    """
    Read-only view over a ResearchCredentials instance.

    A credential counts as present only when it is a non-blank string.
    """

    def __init__(self, credentials: Optional[ResearchCredentials] = None):
        self._credentials = credentials or ResearchCredentials()

    @property
    def credentials(self) -> ResearchCredentials:
        return self._credentials

    def get(self, name: str) -> Optional[str]:
        value = getattr(self._credentials, name, None)
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def has(self, *names: str) -> bool:
        return all(self.get(name) for name in names)

    def has_search_provider(self, provider: str) -> bool:
        fields = SEARCH_PROVIDER_FIELDS.get(provider)
        if not fields:
            return False
        return self.has(*fields)

    def available_search_providers(self) -> List[str]:
        return [name for name in SEARCH_PROVIDER_FIELDS if self.has_search_provider(name)]

    def masked(self, name: str) -> str:
        return mask_secret(self.get(name))

    def __repr__(self) -> str:
        present = [name for name in ResearchCredentials.model_fields if self.get(name)]
        return f"CredentialResolver(present={present})"
