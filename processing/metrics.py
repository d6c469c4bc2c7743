"""
Metrics
Derived competitor and niche metrics over the collected records
"""
from collections import Counter
from datetime import datetime, timezone
from typing import List, Sequence
import logging

from models import CompetitorRecord, InstagramPost, MarketSize, PostingFrequency


logger = logging.getLogger(__name__)

WEEKDAYS_PT = ["Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado", "Domingo"]

LARGE_MARKET_FOLLOWERS = 1_000_000
MEDIUM_MARKET_FOLLOWERS = 100_000

MAX_CONTENT_GAPS = 5
MAX_HASHTAGS = 20


def calculate_engagement_rate(posts: Sequence[InstagramPost], followers_count: int) -> float:
    """
    Mean (likes + comments) per post over followers, as a percentage

    Returns 0.0 when there are no posts or no followers.
    """
    if not posts or not followers_count or followers_count <= 0:
        return 0.0

    total = sum(post.likes_count + post.comments_count for post in posts)
    return (total / len(posts)) / followers_count * 100


def _as_aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def analyze_posting_frequency(posts: Sequence[InstagramPost]) -> PostingFrequency:
    """
    Posting cadence from the span between the oldest and newest post

    Fewer than two timestamped posts give a zero cadence without a most
    active day or hour.
    """
    timestamps = sorted(_as_aware(p.timestamp) for p in posts if p.timestamp is not None)
    if len(timestamps) < 2:
        return PostingFrequency()

    days_span = (timestamps[-1] - timestamps[0]).total_seconds() / 86400
    posts_per_day = len(timestamps) / (days_span or 1)

    day_counts = Counter(WEEKDAYS_PT[ts.weekday()] for ts in timestamps)
    hour_counts = Counter(ts.hour for ts in timestamps)

    return PostingFrequency(
        posts_per_week=round(posts_per_day * 7, 1),
        posts_per_month=round(posts_per_day * 30, 1),
        most_active_day=day_counts.most_common(1)[0][0],
        most_active_hour=hour_counts.most_common(1)[0][0],
    )


def identify_content_gaps(competitors: Sequence[CompetitorRecord]) -> List[str]:
    """Rule-based gaps from the media mix and weekend presence of the competitors"""
    media_types = Counter()
    has_weekend_content = False

    for competitor in competitors:
        for post in competitor.instagram_posts:
            if post.media_type:
                media_types[post.media_type] += 1
            # weekday() 5 and 6 are Saturday and Sunday
            if post.timestamp is not None and post.timestamp.weekday() >= 5:
                has_weekend_content = True

    total = sum(media_types.values()) or 1
    gaps = []
    if media_types["carousel"] / total < 0.2:
        gaps.append("Carrosséis educativos - formato sub-explorado pelos concorrentes")
    if media_types["video"] / total < 0.3:
        gaps.append("Conteúdo em vídeo/Reels - oportunidade de diferenciação")
    if not has_weekend_content:
        gaps.append("Conteúdo aos fins de semana - nicho pouco explorado")

    gaps.append("Stories interativos - aumentam engajamento mas poucos usam bem")
    gaps.append("Lives e conteúdo ao vivo - oportunidade de conexão direta")
    return gaps[:MAX_CONTENT_GAPS]


def analyze_hashtags(competitors: Sequence[CompetitorRecord], limit: int = MAX_HASHTAGS) -> List[str]:
    """Most used hashtags across every competitor's posts"""
    counts = Counter(
        hashtag
        for competitor in competitors
        for post in competitor.instagram_posts
        for hashtag in post.hashtags
    )
    return [hashtag for hashtag, _ in counts.most_common(limit)]


def estimate_market_size(competitors: Sequence[CompetitorRecord]) -> MarketSize:
    """Bucket of the summed follower count: >1M grande, >100k médio, else pequeno"""
    total = sum(
        (c.metrics.instagram_followers or 0) if c.metrics else 0
        for c in competitors
    )
    if total > LARGE_MARKET_FOLLOWERS:
        return MarketSize.LARGE
    if total > MEDIUM_MARKET_FOLLOWERS:
        return MarketSize.MEDIUM
    return MarketSize.SMALL
