"""
Search Providers
SerpAPI, Google Custom Search and Bing Web Search adapters
"""
from typing import Any, Dict, List, Optional
import logging

import httpx

from config import CredentialResolver, SearchSettings
from models import KnowledgeGraph, SearchResponse, SearchResult, SocialProfileLink
from sources.base import BaseSearchProvider, hostname
from utils.exceptions import SearchProviderError


logger = logging.getLogger(__name__)

SERPAPI_URL = "https://serpapi.com/search"
GOOGLE_CSE_URL = "https://www.googleapis.com/customsearch/v1"
BING_SEARCH_URL = "https://api.bing.microsoft.com/v7.0/search"


def bing_market(language: str) -> str:
    """pt-br -> pt-BR"""
    if "-" not in language:
        return language
    lang, region = language.split("-", 1)
    return f"{lang.lower()}-{region.upper()}"


async def _get_json(
    provider: str,
    client: httpx.AsyncClient,
    url: str,
    params: Dict[str, Any],
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    try:
        response = await client.get(url, params=params, headers=headers)
    except httpx.RequestError as exc:
        raise SearchProviderError(f"{provider} network error: {exc}", provider=provider) from exc

    if response.status_code >= 400:
        raise SearchProviderError(
            f"{provider} error ({response.status_code}): {_error_message(response)}",
            provider=provider,
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise SearchProviderError(f"{provider} returned invalid JSON", provider=provider) from exc
    return data if isinstance(data, dict) else {}


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if not isinstance(payload, dict):
        return response.text[:200]
    error = payload.get("error") or payload.get("message")
    if isinstance(error, dict):
        return str(error.get("message") or error)
    return str(error or response.text[:200])


class SerpApiProvider(BaseSearchProvider):
    """Google results through SerpAPI"""

    required_credentials = ("serp_api",)

    def __init__(self, api_key: str, settings: Optional[SearchSettings] = None, client: Optional[httpx.AsyncClient] = None):
        super().__init__(settings, client)
        self.api_key = api_key

    @property
    def name(self) -> str:
        return "serpapi"

    @classmethod
    def from_credentials(cls, resolver, settings=None, client=None) -> "SerpApiProvider":
        return cls(resolver.get("serp_api"), settings=settings, client=client)

    async def search(self, query, num=10, language=None, location=None) -> SearchResponse:
        params = {
            "api_key": self.api_key,
            "q": query,
            "location": location or self.settings.location,
            "hl": language or self.settings.language,
            "gl": "br",
            "num": str(num),
            "engine": "google",
        }
        data = await _get_json(self.name, self._get_client(), SERPAPI_URL, params)
        return self.parse(query, data)

    def parse(self, query: str, data: Dict[str, Any]) -> SearchResponse:
        results = [
            SearchResult(
                title=item.get("title") or "",
                link=item.get("link") or "",
                snippet=item.get("snippet") or "",
                position=index + 1,
                source=item.get("source") or hostname(item.get("link")),
            )
            for index, item in enumerate(data.get("organic_results") or [])
        ]

        knowledge_graph = None
        raw_kg = data.get("knowledge_graph")
        if raw_kg:
            knowledge_graph = KnowledgeGraph(
                title=raw_kg.get("title") or "",
                description=raw_kg.get("description"),
                website=raw_kg.get("website"),
                social_profiles=[
                    SocialProfileLink(platform=p.get("name") or "", url=p.get("link") or "")
                    for p in raw_kg.get("profiles") or []
                ],
            )

        logger.info(f"[SerpAPI] '{query}': {len(results)} results")
        return SearchResponse(
            query=query,
            provider=self.name,
            total_results=(data.get("search_information") or {}).get("total_results") or 0,
            results=results,
            related_searches=[r.get("query") for r in data.get("related_searches") or [] if r.get("query")],
            knowledge_graph=knowledge_graph,
        )


class GoogleCseProvider(BaseSearchProvider):
    """Google Custom Search JSON API"""

    required_credentials = ("google_cse_key", "google_cse_cx")

    def __init__(
        self,
        api_key: str,
        cx: str,
        settings: Optional[SearchSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(settings, client)
        self.api_key = api_key
        self.cx = cx

    @property
    def name(self) -> str:
        return "googlecse"

    @classmethod
    def from_credentials(cls, resolver, settings=None, client=None) -> "GoogleCseProvider":
        return cls(resolver.get("google_cse_key"), resolver.get("google_cse_cx"), settings=settings, client=client)

    async def search(self, query, num=10, language=None, location=None) -> SearchResponse:
        # The API caps num at 10
        params = {"key": self.api_key, "cx": self.cx, "q": query, "num": str(min(num, 10))}
        language = language or self.settings.language
        if language:
            params["lr"] = f"lang_{language.split('-')[0]}"
        data = await _get_json(self.name, self._get_client(), GOOGLE_CSE_URL, params)
        return self.parse(query, data)

    def parse(self, query: str, data: Dict[str, Any]) -> SearchResponse:
        results = [
            SearchResult(
                title=item.get("title") or "",
                link=item.get("link") or "",
                snippet=item.get("snippet") or item.get("htmlSnippet") or "",
                position=index + 1,
                source=hostname(item.get("link")),
            )
            for index, item in enumerate(data.get("items") or [])
        ]
        related = (data.get("queries") or {}).get("relatedSearches") or []

        logger.info(f"[GoogleCSE] '{query}': {len(results)} results")
        return SearchResponse(
            query=query,
            provider=self.name,
            total_results=int((data.get("searchInformation") or {}).get("totalResults") or 0),
            results=results,
            related_searches=[r.get("query") for r in related if r.get("query")],
        )


class BingProvider(BaseSearchProvider):
    """Bing Web Search v7 (web pages and news merged)"""

    required_credentials = ("bing_api_key",)

    def __init__(self, api_key: str, settings: Optional[SearchSettings] = None, client: Optional[httpx.AsyncClient] = None):
        super().__init__(settings, client)
        self.api_key = api_key

    @property
    def name(self) -> str:
        return "bing"

    @classmethod
    def from_credentials(cls, resolver, settings=None, client=None) -> "BingProvider":
        return cls(resolver.get("bing_api_key"), settings=settings, client=client)

    async def search(self, query, num=10, language=None, location=None) -> SearchResponse:
        params = {
            "q": query,
            "count": str(num),
            "mkt": bing_market(language or self.settings.language),
            "responseFilter": "Webpages,News",
            "textDecorations": "false",
        }
        headers = {"Ocp-Apim-Subscription-Key": self.api_key}
        data = await _get_json(self.name, self._get_client(), BING_SEARCH_URL, params, headers=headers)
        return self.parse(query, data, num)

    def parse(self, query: str, data: Dict[str, Any], num: int = 10) -> SearchResponse:
        web_pages = data.get("webPages") or {}
        merged: List[Dict[str, Any]] = list(web_pages.get("value") or [])
        merged.extend((data.get("news") or {}).get("value") or [])
        merged = merged[:num]

        results = []
        for index, item in enumerate(merged):
            link = item.get("url") or item.get("webSearchUrl") or ""
            display = item.get("displayUrl")
            source = hostname(f"https://{display}") if display else hostname(link)
            results.append(SearchResult(
                title=item.get("name") or item.get("title") or "",
                link=link,
                snippet=item.get("snippet") or item.get("description") or "",
                position=index + 1,
                source=source or "bing",
            ))

        logger.info(f"[Bing] '{query}': {len(results)} results")
        return SearchResponse(
            query=query,
            provider=self.name,
            total_results=int(web_pages.get("totalEstimatedMatches") or len(merged)),
            results=results,
            related_searches=[
                r.get("text") for r in (data.get("relatedSearches") or {}).get("value") or [] if r.get("text")
            ],
        )


SEARCH_PROVIDERS = {
    "serpapi": SerpApiProvider,
    "googlecse": GoogleCseProvider,
    "bing": BingProvider,
}
