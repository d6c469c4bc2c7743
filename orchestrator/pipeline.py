"""
Research Pipeline
Five-phase controller: web search -> social scraping -> image analysis ->
data processing -> recommendations
"""
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union
import asyncio
import logging
import re

import httpx

from config import CredentialResolver, ResearchCredentials, Settings
from intelligence import BaseLLM, ImageAnalyzer, get_llm, synthesize_recommendations
from models import (
    CompetitorMetrics,
    CompetitorRecord,
    LogLevel,
    PhaseState,
    PipelinePhase,
    PipelineStatus,
    ResearchConfig,
    ResearchReport,
    SearchResult,
    SocialProfiles,
    StrategicRecommendations,
    VisualAnalysisReport,
    WebPresence,
)
from orchestrator.cancellation import CancellationToken
from orchestrator.status import StatusObserver, StatusTracker
from processing import (
    analyze_competitor_visuals,
    analyze_hashtags,
    analyze_posting_frequency,
    calculate_engagement_rate,
    compare_competitor_visuals,
    estimate_market_size,
    identify_content_gaps,
)
from scrapers import ApifyJobClient, BaseJobClient, InstagramScraper, JobRunner
from sources import SearchProviderChain, extract_social_profiles, search_competitor, search_niche_trends
from storage import BaseCache, MemoryCache
from utils.exceptions import CompetitorResearchError


logger = logging.getLogger(__name__)

# Errors that only cost one competitor its contribution to a phase
PROVIDER_ERRORS = (CompetitorResearchError, httpx.HTTPError)

PHASE_PROGRESS = {
    PipelinePhase.WEB_SEARCH: 10.0,
    PipelinePhase.SOCIAL_SCRAPING: 30.0,
    PipelinePhase.IMAGE_ANALYSIS: 50.0,
    PipelinePhase.DATA_PROCESSING: 70.0,
    PipelinePhase.RECOMMENDATIONS: 85.0,
}

SIMULATED_SOURCE = "simulado"
SIMULATED_TRENDS = [
    "Reels dominando engajamento",
    "UGC em alta",
    "Stories interativos",
    "Carrosséis educativos",
    "Live commerce",
]

CANCEL_MESSAGE = "Research cancelled by user"


def _handle(name: str) -> str:
    return re.sub(r"\s", "", name.lower())


class ResearchPipeline:
    """
    Research orchestrator

    Every provider is optional. A phase whose provider is missing logs a
    warning and completes with an explanatory message: web search falls back
    to labelled simulated data, scraping and image analysis contribute
    nothing. Per-competitor provider failures are logged and skipped; only
    unexpected errors abort `execute`.

    `abort()` is cooperative: it is honoured at the start of each phase,
    at each competitor, before every remote job of a lookup and between
    image batches. Calls already in flight finish and may still write into
    their competitor record.
    """

    def __init__(
        self,
        credentials: Union[ResearchCredentials, CredentialResolver, None] = None,
        config: Optional[ResearchConfig] = None,
        on_status_update: Optional[StatusObserver] = None,
        *,
        settings: Optional[Settings] = None,
        cache: Optional[BaseCache] = None,
        search_chain: Optional[SearchProviderChain] = None,
        job_client: Optional[BaseJobClient] = None,
        scraper: Optional[InstagramScraper] = None,
        llm: Optional[BaseLLM] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if isinstance(credentials, CredentialResolver):
            self.credentials = credentials
        else:
            self.credentials = CredentialResolver(credentials)

        self.settings = settings or Settings()
        self.config = config or ResearchConfig.from_settings(self.settings)
        self.tracker = StatusTracker(on_status_update)
        self._sleep = sleep
        self._token = CancellationToken()

        if search_chain is None:
            cache = cache if cache is not None else MemoryCache(ttl=self.settings.search.cache_ttl)
            search_chain = SearchProviderChain(self.credentials, settings=self.settings.search, cache=cache)
        self.search_chain = search_chain

        if scraper is None:
            if job_client is None and self.credentials.has("apify"):
                job_client = ApifyJobClient(self.credentials.get("apify"), self.settings.apify)
            if job_client is not None:
                runner = JobRunner(
                    job_client,
                    timeout=self.settings.apify.job_timeout,
                    poll_interval=self.settings.apify.poll_interval,
                    sleep=sleep,
                )
                scraper = InstagramScraper(runner, self.settings.apify)
        self.scraper = scraper

        if llm is None and self.credentials.has("open_ai"):
            llm = get_llm(api_key=self.credentials.get("open_ai"), settings=self.settings.llm)
        self.llm = llm
        self.image_analyzer = ImageAnalyzer(llm, self.settings.llm) if llm is not None else None

    @property
    def status(self) -> PipelineStatus:
        return self.tracker.status

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def abort(self, reason: str = CANCEL_MESSAGE):
        """Request cancellation of the running research"""
        if self._token.cancel(reason):
            self.tracker.cancel(reason)

    async def execute(self, client_name: str, niche: str, competitors: Sequence[str]) -> ResearchReport:
        """
        Run all phases for a client, niche and competitor list

        Returns:
            The report, with one CompetitorRecord per competitor name in
            input order; partially populated after a cancellation

        Raises:
            Exception: unexpected orchestration errors (status.error is set)
        """
        self._token = CancellationToken()
        self.tracker.reset()
        names = list(competitors)

        self.tracker.log(f"Starting research for {client_name} ({niche})")
        self.tracker.log(f"Competitors: {', '.join(names)}")

        report = ResearchReport(
            client_name=client_name,
            niche=niche,
            competitors=[CompetitorRecord(name=name) for name in names],
            strategic_recommendations=StrategicRecommendations(client_name=client_name),
        )

        phases = [
            (PipelinePhase.WEB_SEARCH, self._web_search_phase),
            (PipelinePhase.SOCIAL_SCRAPING, self._social_scraping_phase),
            (PipelinePhase.IMAGE_ANALYSIS, self._image_analysis_phase),
            (PipelinePhase.DATA_PROCESSING, self._data_processing_phase),
            (PipelinePhase.RECOMMENDATIONS, self._recommendations_phase),
        ]

        try:
            for phase, run_phase in phases:
                if self.cancelled:
                    break

                self.tracker.set_phase(phase, PHASE_PROGRESS[phase])
                self.tracker.update_phase(phase, PhaseState.RUNNING, progress=0)
                outcome = await run_phase(report)

                if self.cancelled:
                    self.tracker.update_phase(phase, PhaseState.FAILED, message=self._token.reason)
                    break
                self.tracker.update_phase(phase, outcome, progress=100)
        except Exception as e:
            self.tracker.fail(str(e))
            raise

        self.tracker.finish()
        if self.cancelled:
            logger.info(f"Research for {client_name} cancelled, returning partial report")
        else:
            self.tracker.log("Research finished", LogLevel.SUCCESS)
        return report

    # ------------------------------------------------------------------
    # Phase 1
    # ------------------------------------------------------------------

    async def _web_search_phase(self, report: ResearchReport) -> PhaseState:
        phase = PipelinePhase.WEB_SEARCH
        self.tracker.log("Phase 1: web search")

        if not self.config.enable_web_search:
            self.tracker.log("Web search disabled in the configuration")
            self.tracker.update_phase(phase, message="Disabled")
            return PhaseState.COMPLETED

        if not self.search_chain.enabled:
            self.tracker.log("No search provider configured - using simulated data", LogLevel.WARNING)
            await self._simulate_web_search(report)
            self.tracker.update_phase(phase, message="No search provider configured, simulated data")
            return PhaseState.COMPLETED

        self.tracker.log(f"Searching niche trends: {report.niche} ({self.search_chain.used_provider})")
        try:
            niche_search = await search_niche_trends(self.search_chain, report.niche)
            report.niche_analysis.trends = [r.title for r in niche_search["trends"].results[:5]]
            self.tracker.update_phase(phase, progress=20)
        except PROVIDER_ERRORS as e:
            self.tracker.log(f"Niche trend search failed: {e}", LogLevel.WARNING)

        failures = 0
        total = len(report.competitors)
        for i, record in enumerate(report.competitors):
            if self.cancelled:
                break
            self.tracker.log(f"Searching competitor: {record.name}")

            try:
                results = await search_competitor(self.search_chain, record.name, report.niche)
            except PROVIDER_ERRORS as e:
                failures += 1
                self.tracker.log(f"Search for {record.name} failed: {e}", LogLevel.WARNING)
                continue

            general = results["general"]
            record.social_profiles = extract_social_profiles(general.results + results["instagram"].results)
            record.website = general.knowledge_graph.website if general.knowledge_graph else None
            record.web_presence = WebPresence(
                search_results=general.results[:5],
                news_results=results["news"].results[:3],
                knowledge_graph=general.knowledge_graph,
            )
            self.tracker.update_phase(phase, progress=20 + (i + 1) / total * 80)

        if total and failures == total:
            self.tracker.update_phase(phase, message="Search failed for every competitor")
            return PhaseState.FAILED
        return PhaseState.COMPLETED

    async def _simulate_web_search(self, report: ResearchReport):
        """Placeholder web data, labelled with the simulated source"""
        await self._sleep(self.config.simulated_search_delay)

        report.niche_analysis.trends = [
            f"Tendência {i} para {report.niche} - {trend}"
            for i, trend in enumerate(SIMULATED_TRENDS, start=1)
        ]

        for record in report.competitors:
            if self.cancelled:
                break
            handle = _handle(record.name)
            record.social_profiles = SocialProfiles(instagram=f"https://instagram.com/{handle}")
            record.web_presence = WebPresence(
                search_results=[
                    SearchResult(
                        title=f"{record.name} - Site Oficial",
                        link=f"https://{handle}.com.br",
                        snippet=f"Informações sobre {record.name} no nicho de {report.niche}",
                        position=1,
                        source=SIMULATED_SOURCE,
                    )
                ]
            )

    # ------------------------------------------------------------------
    # Phase 2
    # ------------------------------------------------------------------

    async def _social_scraping_phase(self, report: ResearchReport) -> PhaseState:
        phase = PipelinePhase.SOCIAL_SCRAPING
        self.tracker.log("Phase 2: social media scraping")

        if not self.config.enable_social_scraping:
            self.tracker.log("Social scraping disabled in the configuration")
            self.tracker.update_phase(phase, message="Disabled")
            return PhaseState.COMPLETED

        if self.scraper is None:
            self.tracker.log("Apify not configured - skipping social scraping", LogLevel.WARNING)
            self.tracker.update_phase(phase, message="Apify not configured")
            return PhaseState.COMPLETED

        attempted = failures = 0
        total = len(report.competitors)
        for i, record in enumerate(report.competitors):
            if self.cancelled:
                break

            profiles = record.social_profiles
            if not profiles.instagram and not profiles.facebook:
                self.tracker.log(f"No social profile found for {record.name}", LogLevel.WARNING)
                continue

            self.tracker.log(f"Collecting social data of {record.name}")
            attempted += 1
            try:
                social = await self.scraper.scrape_competitor_social(
                    record.name,
                    profiles,
                    posts_limit=self.config.max_posts_per_competitor,
                    should_stop=lambda: self.cancelled,
                )
            except PROVIDER_ERRORS as e:
                failures += 1
                self.tracker.log(f"Social scraping of {record.name} failed: {e}", LogLevel.WARNING)
                continue

            record.social_data = social
            if social.instagram:
                profile, posts = social.instagram.profile, social.instagram.posts
                record.metrics = CompetitorMetrics(
                    instagram_followers=profile.followers_count,
                    instagram_posts=profile.posts_count,
                    instagram_engagement_rate=calculate_engagement_rate(posts, profile.followers_count),
                    posting_frequency=analyze_posting_frequency(posts),
                )
            self.tracker.update_phase(phase, progress=(i + 1) / total * 100)

        if attempted and failures == attempted:
            self.tracker.update_phase(phase, message="Scraping failed for every competitor")
            return PhaseState.FAILED
        return PhaseState.COMPLETED

    # ------------------------------------------------------------------
    # Phase 3
    # ------------------------------------------------------------------

    async def _image_analysis_phase(self, report: ResearchReport) -> PhaseState:
        phase = PipelinePhase.IMAGE_ANALYSIS
        self.tracker.log("Phase 3: image analysis")

        if self.image_analyzer is None:
            self.tracker.log("OpenAI not configured - skipping image analysis", LogLevel.WARNING)
            self.tracker.update_phase(phase, message="OpenAI not configured")
            return PhaseState.COMPLETED

        if not self.config.enable_image_analysis:
            self.tracker.log("Image analysis disabled in the configuration")
            self.tracker.update_phase(phase, message="Disabled")
            return PhaseState.COMPLETED

        visual_reports: List[VisualAnalysisReport] = []
        total = len(report.competitors)
        attempted = failures = 0

        for i, record in enumerate(report.competitors):
            if self.cancelled:
                break

            posts = record.instagram_posts
            if not posts:
                self.tracker.log(f"No posts to analyze for {record.name}", LogLevel.WARNING)
                continue

            self.tracker.log(f"Analyzing images of {record.name} ({len(posts)} posts)")
            attempted += 1

            def on_progress(completed: int, count: int, index: int = i):
                self.tracker.update_phase(
                    phase, progress=(index / total) * 100 + (completed / count) * (100 / total)
                )

            try:
                visual = await analyze_competitor_visuals(
                    record.name,
                    posts,
                    self.image_analyzer.analyze,
                    max_images=self.config.max_images_per_competitor,
                    max_concurrent=self.config.max_concurrent_analyses,
                    delay=self.config.batch_delay,
                    on_progress=on_progress,
                    should_stop=lambda: self.cancelled,
                    sleep=self._sleep,
                )
            except PROVIDER_ERRORS as e:
                failures += 1
                self.tracker.log(f"Image analysis of {record.name} failed: {e}", LogLevel.WARNING)
                continue

            record.visual_analysis = visual
            visual_reports.append(visual)

        if len(visual_reports) > 1:
            report.visual_comparison = compare_competitor_visuals(visual_reports)

        if attempted and failures == attempted:
            return PhaseState.FAILED
        return PhaseState.COMPLETED

    # ------------------------------------------------------------------
    # Phase 4
    # ------------------------------------------------------------------

    async def _data_processing_phase(self, report: ResearchReport) -> PhaseState:
        phase = PipelinePhase.DATA_PROCESSING
        self.tracker.log("Phase 4: data processing")
        niche_analysis = report.niche_analysis

        niche_analysis.content_gaps = identify_content_gaps(report.competitors)
        self.tracker.update_phase(phase, progress=33)

        niche_analysis.popular_hashtags = analyze_hashtags(report.competitors)
        self.tracker.update_phase(phase, progress=66)

        niche_analysis.market_size = estimate_market_size(report.competitors)
        self.tracker.log(f"Estimated market size: {niche_analysis.market_size.value}")
        return PhaseState.COMPLETED

    # ------------------------------------------------------------------
    # Phase 5
    # ------------------------------------------------------------------

    async def _recommendations_phase(self, report: ResearchReport) -> PhaseState:
        phase = PipelinePhase.RECOMMENDATIONS
        self.tracker.log("Phase 5: strategic recommendations")

        recommendations, fallback_reason = await synthesize_recommendations(
            self.llm,
            report.client_name,
            report.niche,
            report.competitors,
            report.niche_analysis,
            report.visual_comparison,
        )
        report.strategic_recommendations = recommendations

        if fallback_reason:
            self.tracker.log(f"Using template recommendations ({fallback_reason})", LogLevel.WARNING)
            self.tracker.update_phase(phase, message="Template recommendations")
        return PhaseState.COMPLETED

    async def close(self):
        await self.search_chain.close()
        if self.scraper is not None:
            await self.scraper.close()
        if self.llm is not None:
            await self.llm.aclose()


async def execute_research(
    client_name: str,
    niche: str,
    competitors: Sequence[str],
    credentials: Union[ResearchCredentials, CredentialResolver, None] = None,
    config: Optional[ResearchConfig] = None,
    on_status_update: Optional[StatusObserver] = None,
    **kwargs,
) -> ResearchReport:
    """Run one research with a throwaway pipeline"""
    pipeline = ResearchPipeline(credentials, config, on_status_update, **kwargs)
    try:
        return await pipeline.execute(client_name, niche, competitors)
    finally:
        await pipeline.close()
