"""
Search Provider Chain
Picks the first search backend with credentials and serves its results,
optionally through a TTL cache
"""
from typing import Dict, List, Mapping, Optional, Sequence, Type
import logging

import httpx

from config import DEFAULT_PROVIDER_ORDER, CredentialResolver, SearchSettings
from models import SearchResponse
from sources.base import BaseSearchProvider
from sources.search_providers import SEARCH_PROVIDERS
from storage import BaseCache
from utils.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


def resolve_provider(
    priority_order: Optional[Sequence[str]],
    resolver: CredentialResolver,
) -> Optional[str]:
    """
    First provider in priority order whose credentials are all present

    An empty or missing order means the default serpapi -> googlecse -> bing.
    Returns None when no provider is available.
    """
    order = [p.strip().lower() for p in (priority_order or []) if p and p.strip()]
    if not order:
        order = list(DEFAULT_PROVIDER_ORDER)

    for provider in order:
        if resolver.has_search_provider(provider):
            return provider
    return None


class SearchProviderChain:
    """
    Web search over whichever provider the credentials allow.

    A chain without any available provider is disabled: `enabled` is False
    and callers are expected to skip search instead of failing.
    """

    def __init__(
        self,
        resolver: CredentialResolver,
        *,
        settings: Optional[SearchSettings] = None,
        cache: Optional[BaseCache] = None,
        priority_order: Optional[Sequence[str]] = None,
        providers: Optional[Mapping[str, Type[BaseSearchProvider]]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or SearchSettings()
        self.resolver = resolver
        self.cache = cache
        self.priority_order: List[str] = [
            p.strip().lower() for p in (priority_order or self.settings.priority_order()) if p and p.strip()
        ]
        self._registry: Dict[str, Type[BaseSearchProvider]] = dict(providers or SEARCH_PROVIDERS)
        self._client = client

        available = [p for p in self.priority_order if p in self._registry]
        self.used_provider = resolve_provider(available, resolver) if available else None
        self._provider: Optional[BaseSearchProvider] = None

        if self.used_provider:
            logger.info(f"Web search provider: {self.used_provider}")
        else:
            logger.info("No web search provider configured, search is disabled")

    @property
    def enabled(self) -> bool:
        return self.used_provider is not None

    @property
    def provider(self) -> BaseSearchProvider:
        if not self.enabled:
            raise ConfigurationError("No web search provider configured")
        if self._provider is None:
            provider_cls = self._registry[self.used_provider]
            self._provider = provider_cls.from_credentials(self.resolver, self.settings, self._client)
        return self._provider

    async def search(
        self,
        query: str,
        num: Optional[int] = None,
        language: Optional[str] = None,
        location: Optional[str] = None,
    ) -> SearchResponse:
        """
        Query the selected provider

        Identical requests within the cache TTL are answered from the cache,
        with `cached=True` on the returned copy.

        Raises:
            ConfigurationError: the chain is disabled
            SearchProviderError: the provider failed
        """
        provider = self.provider
        num = num or self.settings.results_per_query
        language = language or self.settings.language
        location = location or self.settings.location

        key = None
        if self.cache is not None:
            key = BaseCache.make_key(
                provider.name, query, num=num, language=language, location=location
            )
            hit = self.cache.get(key)
            if hit is not None:
                logger.debug(f"Search cache hit for '{query}'")
                return hit.model_copy(update={"cached": True}, deep=True)

        response = await provider.search(query, num=num, language=language, location=location)

        if key is not None:
            self.cache.set(key, response)
        return response

    async def close(self):
        if self._provider is not None:
            await self._provider.close()
        self._provider = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
