"""
Instagram Scraper
Collects Instagram profiles and posts through Apify actor runs
"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import logging
import re

from pydantic import ValidationError

from config import ApifySettings
from models import (
    InstagramData,
    InstagramPost,
    InstagramProfile,
    JobSpec,
    SocialMediaData,
    SocialProfiles,
)
from scrapers.job_runner import JobRunner
from scrapers.resolver import LookupSpecBuilder, Resolver
from utils.exceptions import MalformedResponse


logger = logging.getLogger(__name__)

RESULTS_DETAILS = "details"
RESULTS_POSTS = "posts"

_USERNAME_RE = re.compile(r"instagram\.com/([^/?#]+)")
_HASHTAG_RE = re.compile(r"#\w+")
_MENTION_RE = re.compile(r"@[\w.]+")

# first path segments that address posts or app pages, not accounts
RESERVED_PATHS = frozenset({
    "p", "reel", "reels", "tv", "explore", "stories", "accounts", "direct", "about", "developer", "legal",
})

_MEDIA_TYPES = {"Video": "video", "Sidecar": "carousel"}

_CONVERSION_ERRORS = (ValueError, TypeError, AttributeError, ValidationError)


def extract_instagram_username(url: str) -> Optional[str]:
    """Username from a profile URL, or None (post and app links included)"""
    match = _USERNAME_RE.search(url or "")
    if not match or match.group(1).lower() in RESERVED_PATHS:
        return None
    return match.group(1)


def extract_hashtags(text: str) -> List[str]:
    return [tag.lower() for tag in _HASHTAG_RE.findall(text or "")]


def extract_mentions(text: str) -> List[str]:
    return [mention.lower() for mention in _MENTION_RE.findall(text or "")]


def _parse_timestamp(raw: Any) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None


def convert_post(raw: Dict[str, Any]) -> InstagramPost:
    """Actor post item -> InstagramPost"""
    caption = raw.get("caption") or ""
    shortcode = raw.get("shortCode") or ""
    return InstagramPost(
        id=shortcode or str(raw.get("id") or ""),
        shortcode=shortcode,
        caption=caption,
        likes_count=max(int(raw.get("likesCount") or 0), 0),
        comments_count=max(int(raw.get("commentsCount") or 0), 0),
        timestamp=_parse_timestamp(raw.get("timestamp")),
        media_type=_MEDIA_TYPES.get(raw.get("type"), "image"),
        media_url=raw.get("displayUrl") or raw.get("url"),
        thumbnail_url=raw.get("displayUrl"),
        hashtags=raw.get("hashtags") or extract_hashtags(caption),
        mentions=raw.get("mentions") or extract_mentions(caption),
        owner_username=raw.get("ownerUsername"),
    )


def convert_profile(raw: Dict[str, Any]) -> InstagramProfile:
    """Actor details item -> InstagramProfile"""
    return InstagramProfile(
        username=raw.get("username") or "",
        full_name=raw.get("fullName") or "",
        bio=raw.get("biography") or "",
        followers_count=int(raw.get("followersCount") or 0),
        following_count=int(raw.get("followsCount") or 0),
        posts_count=int(raw.get("postsCount") or 0),
        profile_pic_url=raw.get("profilePicUrl") or raw.get("profilePicUrlHD") or "",
        is_verified=bool(raw.get("verified")),
        is_business_account=bool(raw.get("isBusinessAccount")),
        category=raw.get("businessCategoryName"),
        website=raw.get("externalUrl"),
    )


def _convert_posts(items: List[Any]) -> List[InstagramPost]:
    try:
        return [convert_post(item) for item in items]
    except _CONVERSION_ERRORS as e:
        raise MalformedResponse(f"Malformed Instagram post item: {e}", provider="Instagram") from e


class InstagramJobSpecs(LookupSpecBuilder):
    """Actor inputs for direct-URL and user-search runs"""

    def __init__(self, actor_id: str):
        self.actor_id = actor_id

    def direct(self, entity_key: str, kind: str, limit: int) -> JobSpec:
        username = entity_key.lstrip("@")
        return JobSpec(
            actor_id=self.actor_id,
            label=f"direct @{username} ({kind})",
            input={
                "directUrls": [f"https://www.instagram.com/{username}/"],
                "resultsType": kind,
                "resultsLimit": limit,
                "search": "",
                "searchType": "",
                "searchLimit": 0,
                "addParentData": False,
            },
        )

    def search(self, entity_key: str, kind: str, limit: int) -> JobSpec:
        return self._search(entity_key.lstrip("@"), kind, limit, search_type="user", search_limit=5)

    def hashtag(self, tag: str, limit: int) -> JobSpec:
        return self._search(tag.lstrip("#"), RESULTS_POSTS, limit, search_type="hashtag", search_limit=limit)

    def _search(self, query: str, kind: str, limit: int, *, search_type: str, search_limit: int) -> JobSpec:
        return JobSpec(
            actor_id=self.actor_id,
            label=f"{search_type} search '{query}' ({kind})",
            input={
                "directUrls": [],
                "resultsType": kind,
                "resultsLimit": limit,
                "search": query,
                "searchType": search_type,
                "searchLimit": search_limit,
                "addParentData": False,
            },
        )


class InstagramScraper:
    """
    Instagram profile/post collection

    Every lookup goes through the Resolver, so a renamed or hidden profile
    still gets a second chance through the actor's user search.
    """

    def __init__(self, runner: JobRunner, settings: Optional[ApifySettings] = None):
        self.settings = settings or ApifySettings()
        self.runner = runner
        self.specs = InstagramJobSpecs(self.settings.actor_id)
        self.resolver = Resolver(runner, self.specs)

    @property
    def name(self) -> str:
        return "Instagram"

    async def scrape_profile(
        self,
        username: str,
        posts_limit: int = 12,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> InstagramData:
        """
        Profile details plus latest posts

        Posts embedded in the details item are used when there are enough of
        them; otherwise a dedicated posts run tops them up, unless
        `should_stop` says the run was cancelled in the meantime.

        Raises:
            MalformedResponse: an item could not be converted
            ResearchCancelled: cancelled before the details lookup started
        """
        username = username.lstrip("@")
        logger.info(f"[{self.name}] Collecting profile @{username}")

        details = await self.resolver.resolve(
            username, RESULTS_DETAILS, posts_limit, timeout=self.settings.details_timeout, should_stop=should_stop
        )
        try:
            raw_profile = details[0]
            profile = convert_profile(raw_profile)
            raw_posts: List[Dict[str, Any]] = list(raw_profile.get("latestPosts") or [])
        except _CONVERSION_ERRORS as e:
            raise MalformedResponse(f"Malformed Instagram profile item for @{username}: {e}", provider=self.name) from e

        if len(raw_posts) < posts_limit:
            if should_stop and should_stop():
                logger.info(f"[{self.name}] Cancelled, keeping {len(raw_posts)} embedded posts of @{username}")
            else:
                try:
                    extra = await self.resolver.resolve(
                        username, RESULTS_POSTS, posts_limit, timeout=self.settings.job_timeout, should_stop=should_stop
                    )
                    if extra:
                        raw_posts = extra
                except Exception as e:
                    logger.warning(f"[{self.name}] Could not collect extra posts of @{username}: {e}")

        posts = _convert_posts(raw_posts[:posts_limit])
        logger.info(f"[{self.name}] Profile @{username} collected with {len(posts)} posts")
        return InstagramData(profile=profile, posts=posts)

    async def scrape_posts(
        self,
        username: str,
        limit: int = 20,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[InstagramPost]:
        items = await self.resolver.resolve(
            username.lstrip("@"), RESULTS_POSTS, limit, timeout=self.settings.job_timeout, should_stop=should_stop
        )
        return _convert_posts(items)

    async def scrape_hashtag(self, hashtag: str, limit: int = 30) -> List[InstagramPost]:
        """Posts of a hashtag (search only, there is no direct tier)"""
        items = await self.runner.run(self.specs.hashtag(hashtag, limit))
        return _convert_posts(items)

    async def scrape_competitor_social(
        self,
        competitor_name: str,
        profiles: SocialProfiles,
        posts_limit: int = 20,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> SocialMediaData:
        """
        Social data of one competitor

        Errors of a supported network propagate to the caller.
        """
        result = SocialMediaData()

        username = extract_instagram_username(profiles.instagram) if profiles.instagram else None
        if username:
            result.instagram = await self.scrape_profile(username, posts_limit=posts_limit, should_stop=should_stop)
        elif profiles.instagram:
            logger.info(f"[{self.name}] {profiles.instagram} is not a profile link, skipping {competitor_name}")

        if profiles.facebook:
            logger.info(f"[{self.name}] Facebook scraping is not supported, skipping {competitor_name}")

        return result

    async def close(self):
        await self.runner.client.close()
