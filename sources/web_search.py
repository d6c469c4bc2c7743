"""
Web Search
Competitor and niche queries on top of the provider chain
"""
from typing import Dict, Iterable, List, Optional, Sequence
import asyncio
import logging

from models import (
    AgentWebResearchResult,
    SearchResponse,
    SearchResult,
    SocialProfiles,
    WebSearchRecord,
)
from sources.provider_chain import SearchProviderChain


logger = logging.getLogger(__name__)

SOCIAL_DOMAINS = {
    "instagram": "instagram.com",
    "facebook": "facebook.com",
    "linkedin": "linkedin.com",
    "tiktok": "tiktok.com",
    "youtube": "youtube.com",
}


async def search_competitor(
    chain: SearchProviderChain,
    competitor_name: str,
    niche: str,
) -> Dict[str, SearchResponse]:
    """
    General, Instagram and news queries for one competitor, run concurrently

    Returns:
        {"general": ..., "instagram": ..., "news": ...}
    """
    logger.info(f"Searching competitor {competitor_name}")
    general, instagram, news = await asyncio.gather(
        chain.search(f"{competitor_name} {niche}", num=10),
        chain.search(f"{competitor_name} instagram", num=5),
        chain.search(f"{competitor_name} notícias recentes", num=5),
    )
    return {"general": general, "instagram": instagram, "news": news}


async def search_niche_trends(chain: SearchProviderChain, niche: str) -> Dict[str, SearchResponse]:
    """
    Trend, hashtag and content-idea queries for a niche

    Returns:
        {"trends": ..., "hashtags": ..., "content": ...}
    """
    logger.info(f"Searching niche trends for {niche}")
    trends, hashtags, content = await asyncio.gather(
        chain.search(f"{niche} tendências 2024 2025", num=10),
        chain.search(f"{niche} melhores hashtags instagram", num=10),
        chain.search(f"{niche} ideias de conteúdo redes sociais", num=10),
    )
    return {"trends": trends, "hashtags": hashtags, "content": content}


def extract_social_profiles(results: Iterable[SearchResult]) -> SocialProfiles:
    """First link per social network found in the results"""
    profiles = SocialProfiles()
    for result in results:
        link = result.link or ""
        lowered = link.lower()
        for network, domain in SOCIAL_DOMAINS.items():
            if domain in lowered and getattr(profiles, network) is None:
                setattr(profiles, network, link)
    return profiles


def build_research_queries(
    niche: str,
    topics: Sequence[str] = (),
    competitors: Sequence[str] = (),
    max_queries: int = 6,
) -> List[str]:
    queries = [
        f"{niche} novidades 2025",
        f"{niche} tendências 2025",
        f"{niche} melhores práticas",
    ]
    queries += [f"{niche} {topic}" for topic in topics[:4]]
    queries += [f"{competitor} novidades" for competitor in competitors[:4]]

    # Deduplicate, keep order
    return list(dict.fromkeys(queries))[:max_queries]


async def run_agent_web_research(
    chain: SearchProviderChain,
    niche: str,
    topics: Sequence[str] = (),
    competitors: Sequence[str] = (),
    limit: int = 5,
    language: Optional[str] = None,
) -> AgentWebResearchResult:
    """
    Sequential free-form research queries about a niche

    A disabled chain yields `enabled=False` and no searches.
    """
    if not chain.enabled:
        return AgentWebResearchResult(enabled=False)

    searches = []
    for query in build_research_queries(niche, topics, competitors):
        response = await chain.search(query, num=limit, language=language)
        searches.append(WebSearchRecord(query=query, response=response))

    return AgentWebResearchResult(
        enabled=True,
        used_provider=chain.used_provider,
        searches=searches,
    )


def summarize_search_results(payload: AgentWebResearchResult, max_per_query: int = 3) -> str:
    """Short plain-text digest of research results for prompt injection"""
    if not payload.enabled or not payload.searches:
        return ""

    lines = [f"Fonte: web search ({payload.used_provider or 'desconhecida'})"]
    for record in payload.searches:
        lines.append(f"\nQuery: {record.query}")
        for result in record.response.results[:max_per_query]:
            lines.append(f"- {result.title} ({result.source or result.link}): {result.snippet}")
    return "\n".join(lines)
