"""
Data Models
"""
from .schemas import (
    PipelinePhase,
    PHASE_ORDER,
    PhaseState,
    LogLevel,
    LogEntry,
    PhaseStatus,
    PipelineStatus,
    JobStatus,
    Job,
    JobSpec,
    SearchResult,
    SocialProfileLink,
    KnowledgeGraph,
    SearchResponse,
    WebSearchRecord,
    AgentWebResearchResult,
    InstagramPost,
    InstagramProfile,
    InstagramData,
    SocialMediaData,
    SocialProfiles,
    ImageAnalysis,
    VisualAnalysisReport,
    VisualComparison,
    PostingFrequency,
    CompetitorMetrics,
    WebPresence,
    CompetitorRecord,
    StrategicPath,
    ContentRecommendation,
    StrategicRecommendations,
    MarketSize,
    NicheAnalysis,
    ResearchReport,
    ResearchConfig,
)

__all__ = [
    "PipelinePhase",
    "PHASE_ORDER",
    "PhaseState",
    "LogLevel",
    "LogEntry",
    "PhaseStatus",
    "PipelineStatus",
    "JobStatus",
    "Job",
    "JobSpec",
    "SearchResult",
    "SocialProfileLink",
    "KnowledgeGraph",
    "SearchResponse",
    "WebSearchRecord",
    "AgentWebResearchResult",
    "InstagramPost",
    "InstagramProfile",
    "InstagramData",
    "SocialMediaData",
    "SocialProfiles",
    "ImageAnalysis",
    "VisualAnalysisReport",
    "VisualComparison",
    "PostingFrequency",
    "CompetitorMetrics",
    "WebPresence",
    "CompetitorRecord",
    "StrategicPath",
    "ContentRecommendation",
    "StrategicRecommendations",
    "MarketSize",
    "NicheAnalysis",
    "ResearchReport",
    "ResearchConfig",
]
