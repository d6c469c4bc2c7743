"""
Tests for batch analysis, derived metrics and visual reports
"""
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from models import (
    CompetitorMetrics,
    CompetitorRecord,
    ImageAnalysis,
    InstagramData,
    InstagramPost,
    InstagramProfile,
    MarketSize,
    SocialMediaData,
    VisualAnalysisReport,
)
from processing import (
    analyze_batch,
    analyze_competitor_visuals,
    analyze_hashtags,
    analyze_posting_frequency,
    calculate_engagement_rate,
    compare_competitor_visuals,
    estimate_market_size,
    generate_visual_report,
    identify_content_gaps,
    select_image_posts,
)


def _post(index: int, *, ts: Optional[datetime] = None, media_type: str = "image", hashtags=(), likes: int = 0,
          comments: int = 0) -> InstagramPost:
    return InstagramPost(
        id=str(index),
        timestamp=ts,
        media_type=media_type,
        media_url=f"https://cdn.example/{index}.jpg",
        hashtags=list(hashtags),
        likes_count=likes,
        comments_count=comments,
    )


def _record(name: str, posts: List[InstagramPost] = (), followers: Optional[int] = None) -> CompetitorRecord:
    record = CompetitorRecord(name=name)
    if posts:
        record.social_data = SocialMediaData(
            instagram=InstagramData(profile=InstagramProfile(username=name.lower()), posts=list(posts))
        )
    if followers is not None:
        record.metrics = CompetitorMetrics(instagram_followers=followers)
    return record


async def _no_sleep(seconds: float) -> None:
    return None


# ----------------------------------------------------------------------
# Batch analyzer
# ----------------------------------------------------------------------

@pytest.mark.asyncio
async def test_batches_never_exceed_max_concurrent() -> None:
    active = 0
    peak = 0
    batch_sizes: List[int] = []
    progress: List[int] = []

    async def analyze(item: int) -> int:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0)
        active -= 1
        return item * 2

    async def sleep(seconds: float) -> None:
        batch_sizes.append(len(progress))

    results = await analyze_batch(
        list(range(10)), analyze, 3, lambda done, total: progress.append(done), delay=1.0, sleep=sleep
    )

    assert sorted(results) == [i * 2 for i in range(10)]
    assert peak <= 3
    # completed count at each inter-batch pause: batches of 3, 3, 3, 1
    assert batch_sizes == [3, 6, 9]
    assert progress == list(range(1, 11))


@pytest.mark.asyncio
async def test_failing_item_is_isolated_and_still_reported() -> None:
    progress: List[tuple] = []

    async def analyze(item: int) -> int:
        if item == 4:
            raise ValueError("bad image")
        return item

    results = await analyze_batch(
        list(range(10)), analyze, 3, lambda done, total: progress.append((done, total)), delay=0, sleep=_no_sleep
    )

    assert len(results) == 9
    assert 4 not in results
    assert progress[-1] == (10, 10)
    assert len(progress) == 10


@pytest.mark.asyncio
async def test_should_stop_halts_between_batches() -> None:
    seen: List[int] = []

    async def analyze(item: int) -> int:
        seen.append(item)
        return item

    results = await analyze_batch(
        list(range(9)), analyze, 3, delay=1.0, sleep=_no_sleep, should_stop=lambda: len(seen) >= 3
    )

    assert results == [0, 1, 2]


@pytest.mark.asyncio
async def test_empty_batch_input() -> None:
    async def analyze(item):
        raise AssertionError("not called")

    assert await analyze_batch([], analyze, 3, sleep=_no_sleep) == []


# ----------------------------------------------------------------------
# Metrics
# ----------------------------------------------------------------------

def test_engagement_rate() -> None:
    posts = [_post(1, likes=90, comments=10), _post(2, likes=40, comments=10)]

    assert calculate_engagement_rate(posts, 1000) == pytest.approx(7.5)
    assert calculate_engagement_rate(posts, 0) == 0.0
    assert calculate_engagement_rate([], 1000) == 0.0


def test_posting_frequency() -> None:
    start = datetime(2024, 3, 4, 10, tzinfo=timezone.utc)  # Monday
    posts = [_post(i, ts=start + timedelta(days=i)) for i in range(7)] + [_post(9, ts=start)]

    frequency = analyze_posting_frequency(posts)

    assert frequency.posts_per_week == pytest.approx(round(8 / 6 * 7, 1))
    assert frequency.posts_per_month == pytest.approx(round(8 / 6 * 30, 1))
    assert frequency.most_active_day == "Segunda"
    assert frequency.most_active_hour == 10


def test_posting_frequency_needs_two_timestamps() -> None:
    frequency = analyze_posting_frequency([_post(1, ts=datetime(2024, 1, 1)), _post(2)])

    assert frequency.posts_per_week == 0
    assert frequency.most_active_day is None


def test_content_gaps_for_image_only_weekday_competitors() -> None:
    monday = datetime(2024, 3, 4, 12)
    records = [_record("Acme", [_post(i, ts=monday) for i in range(4)])]

    gaps = identify_content_gaps(records)

    assert len(gaps) == 5
    assert gaps[0].startswith("Carrosséis educativos")
    assert gaps[1].startswith("Conteúdo em vídeo/Reels")
    assert gaps[2].startswith("Conteúdo aos fins de semana")


def test_content_gaps_skip_covered_formats() -> None:
    saturday = datetime(2024, 3, 9, 12)
    posts = [_post(1, media_type="carousel", ts=saturday), _post(2, media_type="video"), _post(3, media_type="video")]

    gaps = identify_content_gaps([_record("Acme", posts)])

    assert gaps == [
        "Stories interativos - aumentam engajamento mas poucos usam bem",
        "Lives e conteúdo ao vivo - oportunidade de conexão direta",
    ]


def test_hashtags_ranked_across_competitors() -> None:
    records = [
        _record("A", [_post(1, hashtags=["#moda", "#verao"]), _post(2, hashtags=["#moda"])]),
        _record("B", [_post(3, hashtags=["#moda", "#look"]), _post(4, hashtags=["#look"])]),
        _record("C"),
    ]

    assert analyze_hashtags(records)[:2] == ["#moda", "#look"]
    assert analyze_hashtags(records, limit=1) == ["#moda"]


@pytest.mark.parametrize(
    "followers, expected",
    [
        ([], MarketSize.SMALL),
        ([100_000], MarketSize.SMALL),
        ([60_000, 50_000], MarketSize.MEDIUM),
        ([1_000_000], MarketSize.MEDIUM),
        ([900_000, 200_000], MarketSize.LARGE),
    ],
)
def test_market_size_buckets(followers, expected) -> None:
    records = [_record(f"C{i}", followers=count) for i, count in enumerate(followers)]
    records.append(_record("no metrics"))

    assert estimate_market_size(records) == expected


# ----------------------------------------------------------------------
# Visual reports
# ----------------------------------------------------------------------

def _analysis(url: str, **fields) -> ImageAnalysis:
    return ImageAnalysis(image_url=url, **fields)


def test_visual_report_of_nothing() -> None:
    report = generate_visual_report([], "Acme")

    assert report.total_images_analyzed == 0
    assert report.recommendations == ["Não foi possível analisar imagens deste concorrente"]


def test_visual_report_aggregates() -> None:
    analyses = [
        _analysis("1", dominant_colors=["#fff", "#000"], style="minimalista", has_text=True, has_person=True,
                  quality_score=8, branding_elements=["logo"]),
        _analysis("2", dominant_colors=["#fff"], style="minimalista", has_person=True, quality_score=7,
                  branding_elements=["logo"]),
        _analysis("3", dominant_colors=["#f00"], style="lifestyle", quality_score=9),
        _analysis("4", style="minimalista", has_product=True, quality_score=8),
    ]

    report = generate_visual_report(analyses, "Acme")

    assert report.total_images_analyzed == 4
    assert report.dominant_color_palette[0] == "#fff"
    assert report.preferred_styles == ["minimalista", "lifestyle"]
    assert report.text_usage_percentage == 25.0
    assert report.person_presence_percentage == 50.0
    assert report.average_quality_score == 8.0
    assert report.branding_consistency == 50.0
    assert any("alta qualidade visual" in r for r in report.recommendations)


def test_select_image_posts_skips_videos_and_missing_urls() -> None:
    posts = [_post(1), _post(2, media_type="video"), InstagramPost(id="3"), _post(4), _post(5)]

    assert [p.id for p in select_image_posts(posts, 2)] == ["1", "4"]


@pytest.mark.asyncio
async def test_analyze_competitor_visuals_passes_context() -> None:
    contexts = []

    async def analyze_image(url: str, context: Optional[str] = None) -> ImageAnalysis:
        contexts.append(context)
        return _analysis(url, quality_score=6)

    posts = [_post(i, likes=10) for i in range(5)]
    report = await analyze_competitor_visuals("Acme", posts, analyze_image, max_images=4, sleep=_no_sleep)

    assert report.total_images_analyzed == 4
    assert all(c.startswith("Post de Acme com 10 likes") for c in contexts)


def test_compare_visuals_picks_first_best() -> None:
    reports = [
        VisualAnalysisReport(competitor_name="A", average_quality_score=7, preferred_styles=["clean"]),
        VisualAnalysisReport(competitor_name="B", average_quality_score=8, preferred_styles=["clean"]),
        VisualAnalysisReport(competitor_name="C", average_quality_score=8),
    ]

    comparison = compare_competitor_visuals(reports)

    assert comparison.visual_leader == "B"
    assert comparison.common_patterns == ["clean"]
    assert "Humanizar conteúdo com pessoas pode gerar conexão" in comparison.differentiation_opportunities


def test_compare_visuals_without_reports() -> None:
    assert compare_competitor_visuals([]).visual_leader == "N/A"
