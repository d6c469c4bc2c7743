"""
Tests for Instagram item conversion and profile collection
"""
from __future__ import annotations

from typing import List

import pytest

from config import ApifySettings
from models import JobSpec, SocialProfiles
from scrapers import InstagramScraper, extract_instagram_username
from scrapers.social import convert_post, convert_profile
from utils.exceptions import MalformedResponse, ResolutionFailed


class SpecRunner:
    """Answers runs by (tier, resultsType)"""

    def __init__(self, answers):
        self.answers = answers
        self.specs: List[JobSpec] = []

    async def run(self, spec: JobSpec, timeout=None, poll_interval=None):
        self.specs.append(spec)
        tier = "direct" if spec.input["directUrls"] else "search"
        return list(self.answers.get((tier, spec.input["resultsType"]), []))


def _post(code: str, kind: str = "Image", caption: str = "") -> dict:
    return {
        "shortCode": code,
        "caption": caption,
        "likesCount": 10,
        "commentsCount": 2,
        "timestamp": "2024-03-04T12:00:00.000Z",
        "type": kind,
        "displayUrl": f"https://cdn.example/{code}.jpg",
    }


def test_extract_instagram_username() -> None:
    assert extract_instagram_username("https://www.instagram.com/acme.store/?hl=pt") == "acme.store"
    assert extract_instagram_username("https://example.com/acme") is None
    assert extract_instagram_username("") is None


def test_convert_post_maps_media_type_and_caption_tags() -> None:
    post = convert_post(_post("abc", kind="Sidecar", caption="Nova coleção #Moda #verao com @parceira"))

    assert post.id == "abc"
    assert post.media_type == "carousel"
    assert post.hashtags == ["#moda", "#verao"]
    assert post.mentions == ["@parceira"]
    assert post.timestamp is not None and post.timestamp.tzinfo is not None
    assert convert_post(_post("v", kind="Video")).media_type == "video"
    assert convert_post({"id": 7, "likesCount": -3}).likes_count == 0


def test_convert_profile() -> None:
    profile = convert_profile({
        "username": "acme",
        "fullName": "Acme Store",
        "followersCount": 1200,
        "followsCount": 80,
        "postsCount": 340,
        "verified": True,
        "externalUrl": "https://acme.com.br",
    })

    assert profile.followers_count == 1200
    assert profile.following_count == 80
    assert profile.is_verified
    assert profile.website == "https://acme.com.br"


@pytest.mark.asyncio
async def test_scrape_profile_uses_embedded_posts_when_enough() -> None:
    details = {"username": "acme", "followersCount": 500, "latestPosts": [_post(str(i)) for i in range(4)]}
    runner = SpecRunner({("direct", "details"): [details]})

    data = await InstagramScraper(runner, ApifySettings()).scrape_profile("@acme", posts_limit=3)

    assert data.profile.username == "acme"
    assert [p.id for p in data.posts] == ["0", "1", "2"]
    assert len(runner.specs) == 1


@pytest.mark.asyncio
async def test_scrape_profile_tops_up_posts_with_posts_run() -> None:
    details = {"username": "acme", "latestPosts": [_post("only")]}
    runner = SpecRunner({
        ("direct", "details"): [details],
        ("direct", "posts"): [_post("a"), _post("b")],
    })

    data = await InstagramScraper(runner, ApifySettings()).scrape_profile("acme", posts_limit=5)

    assert [p.id for p in data.posts] == ["a", "b"]


@pytest.mark.asyncio
async def test_scrape_profile_falls_back_to_user_search() -> None:
    runner = SpecRunner({("search", "details"): [{"username": "acme_oficial", "latestPosts": []}]})

    data = await InstagramScraper(runner, ApifySettings()).scrape_profile("acme", posts_limit=2)

    assert data.profile.username == "acme_oficial"
    assert data.posts == []
    search_spec = runner.specs[1]
    assert search_spec.input["searchType"] == "user"
    assert search_spec.input["search"] == "acme"


@pytest.mark.asyncio
async def test_scrape_competitor_social_propagates_resolution_failure() -> None:
    scraper = InstagramScraper(SpecRunner({}), ApifySettings())
    profiles = SocialProfiles(instagram="https://instagram.com/ghost")

    with pytest.raises(ResolutionFailed):
        await scraper.scrape_competitor_social("Ghost", profiles)


@pytest.mark.asyncio
async def test_scrape_competitor_social_without_instagram_is_empty() -> None:
    scraper = InstagramScraper(SpecRunner({}), ApifySettings())

    result = await scraper.scrape_competitor_social("Acme", SocialProfiles(facebook="https://facebook.com/acme"))

    assert result.instagram is None


@pytest.mark.asyncio
async def test_scrape_posts_converts_items() -> None:
    runner = SpecRunner({("direct", "posts"): [_post("a", kind="Video"), _post("b")]})

    posts = await InstagramScraper(runner, ApifySettings()).scrape_posts("@acme", limit=2)

    assert [(p.id, p.media_type) for p in posts] == [("a", "video"), ("b", "image")]
    assert runner.specs[0].input["directUrls"] == ["https://www.instagram.com/acme/"]
    assert runner.specs[0].input["resultsLimit"] == 2


@pytest.mark.asyncio
async def test_scrape_hashtag_runs_a_single_search_job() -> None:
    runner = SpecRunner({("search", "posts"): [_post("h1", caption="#verao")]})

    posts = await InstagramScraper(runner, ApifySettings()).scrape_hashtag("#verao", limit=10)

    assert [p.hashtags for p in posts] == [["#verao"]]
    spec = runner.specs[0]
    assert len(runner.specs) == 1
    assert spec.input["searchType"] == "hashtag"
    assert spec.input["search"] == "verao"


def test_extract_instagram_username_rejects_post_and_app_links() -> None:
    assert extract_instagram_username("https://www.instagram.com/p/C4xYz12/") is None
    assert extract_instagram_username("https://www.instagram.com/reel/C4xYz12/") is None
    assert extract_instagram_username("https://www.instagram.com/explore/tags/moda/") is None
    assert extract_instagram_username("https://instagram.com/stories/acme/123") is None
    assert extract_instagram_username("https://instagram.com/paula.store") == "paula.store"


@pytest.mark.asyncio
async def test_scrape_competitor_social_skips_post_links() -> None:
    runner = SpecRunner({})
    scraper = InstagramScraper(runner, ApifySettings())

    result = await scraper.scrape_competitor_social("Acme", SocialProfiles(instagram="https://www.instagram.com/p/abc/"))

    assert result.instagram is None
    assert runner.specs == []


@pytest.mark.asyncio
async def test_malformed_post_item_raises_malformed_response() -> None:
    details = {"username": "acme", "latestPosts": [dict(_post("a"), likesCount="1,234")]}
    runner = SpecRunner({("direct", "details"): [details]})

    with pytest.raises(MalformedResponse):
        await InstagramScraper(runner, ApifySettings()).scrape_profile("acme", posts_limit=1)


@pytest.mark.asyncio
async def test_malformed_profile_item_raises_malformed_response() -> None:
    runner = SpecRunner({("direct", "details"): [{"username": "acme", "followersCount": "muitos"}]})

    with pytest.raises(MalformedResponse):
        await InstagramScraper(runner, ApifySettings()).scrape_profile("acme", posts_limit=0)


@pytest.mark.asyncio
async def test_malformed_hashtag_item_raises_malformed_response() -> None:
    runner = SpecRunner({("search", "posts"): ["not an item"]})

    with pytest.raises(MalformedResponse):
        await InstagramScraper(runner, ApifySettings()).scrape_hashtag("verao")


@pytest.mark.asyncio
async def test_scrape_profile_skips_top_up_once_stopped() -> None:
    details = {"username": "acme", "latestPosts": [_post("only")]}
    runner = SpecRunner({
        ("direct", "details"): [details],
        ("direct", "posts"): [_post("a"), _post("b")],
    })

    data = await InstagramScraper(runner, ApifySettings()).scrape_profile(
        "acme", posts_limit=5, should_stop=lambda: bool(runner.specs)
    )

    assert [p.id for p in data.posts] == ["only"]
    assert len(runner.specs) == 1
