"""
Web search sources
"""
from .base import BaseSearchProvider, hostname
from .search_providers import (
    SEARCH_PROVIDERS,
    BingProvider,
    GoogleCseProvider,
    SerpApiProvider,
)
from .provider_chain import SearchProviderChain, resolve_provider
from .web_search import (
    extract_social_profiles,
    run_agent_web_research,
    search_competitor,
    search_niche_trends,
    summarize_search_results,
)

__all__ = [
    "BaseSearchProvider",
    "hostname",
    "SEARCH_PROVIDERS",
    "SerpApiProvider",
    "GoogleCseProvider",
    "BingProvider",
    "SearchProviderChain",
    "resolve_provider",
    "search_competitor",
    "search_niche_trends",
    "extract_social_profiles",
    "run_agent_web_research",
    "summarize_search_results",
]
