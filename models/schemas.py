"""
Data Models / Schemas
Unified data structures shared by providers, pipeline and report
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field


# ============================================
# Pipeline status
# ============================================

class PipelinePhase(str, Enum):
    """Overall pipeline phase"""
    IDLE = "idle"
    WEB_SEARCH = "webSearch"
    SOCIAL_SCRAPING = "socialScraping"
    IMAGE_ANALYSIS = "imageAnalysis"
    DATA_PROCESSING = "dataProcessing"
    RECOMMENDATIONS = "recommendations"


PHASE_ORDER = [
    PipelinePhase.WEB_SEARCH,
    PipelinePhase.SOCIAL_SCRAPING,
    PipelinePhase.IMAGE_ANALYSIS,
    PipelinePhase.DATA_PROCESSING,
    PipelinePhase.RECOMMENDATIONS,
]


class PhaseState(str, Enum):
    """Sub-status of a single phase"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class LogLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class LogEntry(BaseModel):
    timestamp: datetime = Field(default_factory=datetime.now)
    message: str
    type: LogLevel = LogLevel.INFO


class PhaseStatus(BaseModel):
    status: PhaseState = PhaseState.PENDING
    progress: float = 0.0
    message: Optional[str] = None


def _initial_phases() -> Dict[PipelinePhase, PhaseStatus]:
    return {phase: PhaseStatus() for phase in PHASE_ORDER}


class PipelineStatus(BaseModel):
    """Status snapshot shared with the run observer"""
    current_phase: PipelinePhase = PipelinePhase.IDLE
    progress: float = 0.0
    phases: Dict[PipelinePhase, PhaseStatus] = Field(default_factory=_initial_phases)
    start_time: datetime = Field(default_factory=datetime.now)
    end_time: Optional[datetime] = None
    error: Optional[str] = None
    cancelled: bool = False
    logs: List[LogEntry] = Field(default_factory=list)


# ============================================
# Remote jobs
# ============================================

class JobStatus(str, Enum):
    """Remote job status (Apify run states)"""
    READY = "READY"
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    ABORTING = "ABORTING"
    ABORTED = "ABORTED"
    TIMING_OUT = "TIMING-OUT"
    TIMED_OUT = "TIMED-OUT"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_JOB_STATUSES

    @property
    def is_failure(self) -> bool:
        return self in FAILED_JOB_STATUSES


FAILED_JOB_STATUSES = {JobStatus.FAILED, JobStatus.ABORTED, JobStatus.TIMED_OUT}
TERMINAL_JOB_STATUSES = FAILED_JOB_STATUSES | {JobStatus.SUCCEEDED}


class Job(BaseModel):
    """Handle of a long-running remote job"""
    id: str = Field(..., description="Remote job id")
    status: JobStatus = Field(default=JobStatus.PENDING)
    result_id: Optional[str] = Field(None, description="Result collection id once terminal")
    extra: Dict[str, Any] = Field(default_factory=dict)


class JobSpec(BaseModel):
    """What to run: the remote actor and its input"""
    actor_id: str
    input: Dict[str, Any] = Field(default_factory=dict)
    label: str = Field(default="", description="Human readable label for logs")


# ============================================
# Web search
# ============================================

class SearchResult(BaseModel):
    title: str = ""
    link: str = ""
    snippet: str = ""
    source: str = ""
    position: int = 0


class SocialProfileLink(BaseModel):
    platform: str
    url: str


class KnowledgeGraph(BaseModel):
    title: str = ""
    description: Optional[str] = None
    website: Optional[str] = None
    social_profiles: List[SocialProfileLink] = Field(default_factory=list)


class SearchResponse(BaseModel):
    """Provider-independent search response"""
    query: str
    provider: str = ""
    total_results: Optional[int] = None
    results: List[SearchResult] = Field(default_factory=list)
    related_searches: List[str] = Field(default_factory=list)
    knowledge_graph: Optional[KnowledgeGraph] = None
    cached: bool = False


class WebSearchRecord(BaseModel):
    query: str
    response: SearchResponse


class AgentWebResearchResult(BaseModel):
    """Outcome of a batch of free-form research queries"""
    enabled: bool = False
    used_provider: Optional[str] = None
    searches: List[WebSearchRecord] = Field(default_factory=list)


# ============================================
# Social media
# ============================================

class InstagramPost(BaseModel):
    id: str
    shortcode: str = ""
    caption: str = ""
    likes_count: int = 0
    comments_count: int = 0
    timestamp: Optional[datetime] = None
    media_type: str = Field(default="image", description="image | video | carousel")
    media_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    hashtags: List[str] = Field(default_factory=list)
    mentions: List[str] = Field(default_factory=list)
    owner_username: Optional[str] = None


class InstagramProfile(BaseModel):
    username: str
    full_name: str = ""
    bio: str = ""
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    profile_pic_url: str = ""
    is_verified: bool = False
    is_business_account: bool = False
    category: Optional[str] = None
    website: Optional[str] = None


class InstagramData(BaseModel):
    profile: InstagramProfile
    posts: List[InstagramPost] = Field(default_factory=list)


class SocialMediaData(BaseModel):
    instagram: Optional[InstagramData] = None


class SocialProfiles(BaseModel):
    instagram: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    tiktok: Optional[str] = None
    youtube: Optional[str] = None


# ============================================
# Visual analysis
# ============================================

class ImageAnalysis(BaseModel):
    """Vision analysis of one media item"""
    image_url: str
    dominant_colors: List[str] = Field(default_factory=list)
    color_mood: Optional[str] = None
    style: Optional[str] = None
    composition: Optional[str] = None
    has_text: bool = False
    text_content: Optional[str] = None
    has_product: bool = False
    product_type: Optional[str] = None
    has_person: bool = False
    person_context: Optional[str] = None
    visual_elements: List[str] = Field(default_factory=list)
    branding_elements: List[str] = Field(default_factory=list)
    quality_score: float = Field(default=5.0, ge=1, le=10)
    engagement_potential: str = "medio"
    suggested_improvements: List[str] = Field(default_factory=list)


class VisualAnalysisReport(BaseModel):
    competitor_name: str
    total_images_analyzed: int = 0
    dominant_color_palette: List[str] = Field(default_factory=list)
    preferred_styles: List[str] = Field(default_factory=list)
    common_compositions: List[str] = Field(default_factory=list)
    text_usage_percentage: float = 0.0
    product_presence_percentage: float = 0.0
    person_presence_percentage: float = 0.0
    average_quality_score: float = 0.0
    common_visual_elements: List[str] = Field(default_factory=list)
    branding_consistency: float = 0.0
    recommendations: List[str] = Field(default_factory=list)


class VisualComparison(BaseModel):
    visual_leader: str
    common_patterns: List[str] = Field(default_factory=list)
    differentiation_opportunities: List[str] = Field(default_factory=list)
    recommended_strategy: str = ""


# ============================================
# Competitor record
# ============================================

class PostingFrequency(BaseModel):
    posts_per_week: float = 0.0
    posts_per_month: float = 0.0
    most_active_day: Optional[str] = None
    most_active_hour: Optional[int] = None


class CompetitorMetrics(BaseModel):
    instagram_followers: Optional[int] = None
    instagram_posts: Optional[int] = None
    instagram_engagement_rate: Optional[float] = None
    posting_frequency: Optional[PostingFrequency] = None


class WebPresence(BaseModel):
    search_results: List[SearchResult] = Field(default_factory=list)
    news_results: List[SearchResult] = Field(default_factory=list)
    knowledge_graph: Optional[KnowledgeGraph] = None


class CompetitorRecord(BaseModel):
    """One researched competitor, enriched in place phase by phase"""
    name: str
    website: Optional[str] = None
    social_profiles: SocialProfiles = Field(default_factory=SocialProfiles)
    web_presence: Optional[WebPresence] = None
    social_data: Optional[SocialMediaData] = None
    visual_analysis: Optional[VisualAnalysisReport] = None
    metrics: Optional[CompetitorMetrics] = None

    @property
    def instagram_posts(self) -> List[InstagramPost]:
        if self.social_data and self.social_data.instagram:
            return self.social_data.instagram.posts
        return []


# ============================================
# Recommendations and report
# ============================================

class StrategicPath(BaseModel):
    name: str
    description: str = ""
    difficulty: str = Field(default="medium", description="easy | medium | hard")
    time_to_results: str = ""
    required_resources: List[str] = Field(default_factory=list)
    expected_outcomes: List[str] = Field(default_factory=list)
    action_steps: List[str] = Field(default_factory=list)


class ContentRecommendation(BaseModel):
    type: str = Field(..., description="reels | carousel | stories | feed | ...")
    theme: str = ""
    frequency: str = ""
    best_times: List[str] = Field(default_factory=list)
    hashtags: List[str] = Field(default_factory=list)
    example_ideas: List[str] = Field(default_factory=list)


class StrategicRecommendations(BaseModel):
    client_name: str
    generated_at: datetime = Field(default_factory=datetime.now)
    current_situation: str = ""
    strategic_paths: List[StrategicPath] = Field(default_factory=list)
    content_recommendations: List[ContentRecommendation] = Field(default_factory=list)
    urgent_actions: List[str] = Field(default_factory=list)
    long_term_goals: List[str] = Field(default_factory=list)


class MarketSize(str, Enum):
    SMALL = "pequeno"
    MEDIUM = "médio"
    LARGE = "grande"


class NicheAnalysis(BaseModel):
    trends: List[str] = Field(default_factory=list)
    popular_hashtags: List[str] = Field(default_factory=list)
    content_gaps: List[str] = Field(default_factory=list)
    market_size: MarketSize = MarketSize.MEDIUM


class ResearchReport(BaseModel):
    """Final output of one pipeline run"""
    client_name: str
    niche: str
    generated_at: datetime = Field(default_factory=datetime.now)
    competitors: List[CompetitorRecord] = Field(default_factory=list)
    niche_analysis: NicheAnalysis = Field(default_factory=NicheAnalysis)
    strategic_recommendations: StrategicRecommendations
    visual_comparison: Optional[VisualComparison] = None


class ResearchConfig(BaseModel):
    """Per-run knobs"""
    max_competitors: int = 5
    max_posts_per_competitor: int = 12
    max_images_per_competitor: int = 9
    enable_web_search: bool = True
    enable_social_scraping: bool = True
    enable_image_analysis: bool = True
    max_concurrent_analyses: int = 3
    batch_delay: float = 1.0
    simulated_search_delay: float = 1.0

    @classmethod
    def from_settings(cls, settings) -> "ResearchConfig":
        return cls(**settings.pipeline.model_dump())
