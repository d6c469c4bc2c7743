"""
Base Search Provider
Adapter interface every web search backend implements
"""
from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Tuple
from urllib.parse import urlparse
import logging

import httpx

from config import CredentialResolver, SearchSettings
from models import SearchResponse


logger = logging.getLogger(__name__)


def hostname(url: Optional[str]) -> str:
    """Host part of a URL, empty string when it cannot be parsed"""
    if not url:
        return ""
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


class BaseSearchProvider(ABC):
    """
    Web search adapter

    Subclasses map their provider's response body onto SearchResponse and
    raise SearchProviderError on transport errors or non-2xx responses.
    """

    # Credential fields (names on ResearchCredentials) the provider needs
    required_credentials: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, settings: Optional[SearchSettings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or SearchSettings()
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider id used in priority orders"""
        pass

    @classmethod
    @abstractmethod
    def from_credentials(
        cls,
        resolver: CredentialResolver,
        settings: Optional[SearchSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "BaseSearchProvider":
        """Build the provider from the run's credentials"""
        pass

    @abstractmethod
    async def search(
        self,
        query: str,
        num: int = 10,
        language: Optional[str] = None,
        location: Optional[str] = None,
    ) -> SearchResponse:
        """
        Run one query

        Args:
            query: search terms
            num: number of results requested
            language: result language (e.g. pt-br)
            location: geographic hint, ignored by providers without one

        Returns:
            Normalized SearchResponse
        """
        pass

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
