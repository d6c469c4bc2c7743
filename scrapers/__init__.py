"""
Scrapers Module
Remote job execution (submit / poll / fetch) and social network collection
"""
from .base import BaseJobClient
from .apify_client import ApifyJobClient
from .job_runner import JobRunner
from .resolver import EmptyResult, LookupSpecBuilder, Resolver
from .social import (
    InstagramJobSpecs,
    InstagramScraper,
    extract_instagram_username,
)

__all__ = [
    # Jobs
    "BaseJobClient",
    "ApifyJobClient",
    "JobRunner",
    # Resolution
    "EmptyResult",
    "LookupSpecBuilder",
    "Resolver",
    # Social
    "InstagramJobSpecs",
    "InstagramScraper",
    "extract_instagram_username",
]
