"""
Processing Module
Batch analysis, visual aggregation and derived metrics
"""
from .batch_analyzer import analyze_batch
from .visual_report import (
    analyze_competitor_visuals,
    compare_competitor_visuals,
    generate_visual_report,
    select_image_posts,
)
from .metrics import (
    analyze_hashtags,
    analyze_posting_frequency,
    calculate_engagement_rate,
    estimate_market_size,
    identify_content_gaps,
)

__all__ = [
    # Batch
    "analyze_batch",
    # Visual
    "analyze_competitor_visuals",
    "compare_competitor_visuals",
    "generate_visual_report",
    "select_image_posts",
    # Metrics
    "analyze_hashtags",
    "analyze_posting_frequency",
    "calculate_engagement_rate",
    "estimate_market_size",
    "identify_content_gaps",
]
