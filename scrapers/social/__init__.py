"""
Social Media Scrapers
"""
from .instagram_scraper import (
    InstagramJobSpecs,
    InstagramScraper,
    convert_post,
    convert_profile,
    extract_hashtags,
    extract_instagram_username,
    extract_mentions,
)

__all__ = [
    "InstagramJobSpecs",
    "InstagramScraper",
    "convert_post",
    "convert_profile",
    "extract_hashtags",
    "extract_instagram_username",
    "extract_mentions",
]
