"""
Settings Configuration
Pydantic-validated configuration for providers and pipeline knobs
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


DEFAULT_PROVIDER_ORDER = ["serpapi", "googlecse", "bing"]


class SearchSettings(BaseSettings):
    """Web search providers"""
    serpapi_key: Optional[str] = Field(default=None, description="SerpAPI key")
    google_cse_key: Optional[str] = Field(default=None, description="Google Custom Search API key")
    google_cse_cx: Optional[str] = Field(default=None, description="Google Custom Search engine id (cx)")
    bing_api_key: Optional[str] = Field(default=None, description="Bing Web Search key")
    provider_order: str = Field(default="serpapi,googlecse,bing", description="Comma separated priority order")
    cache_ttl: int = Field(default=300, description="Search cache TTL (seconds)")
    results_per_query: int = Field(default=10, description="Results requested per query")
    location: str = Field(default="Brazil", description="SerpAPI location")
    language: str = Field(default="pt-br", description="Result language")
    request_timeout: float = Field(default=30.0, description="HTTP timeout (seconds)")

    class Config:
        env_prefix = "SEARCH_"

    def priority_order(self) -> List[str]:
        order = [item.strip().lower() for item in self.provider_order.split(",") if item.strip()]
        return order or list(DEFAULT_PROVIDER_ORDER)


class ApifySettings(BaseSettings):
    """Apify actor runs (social scraping)"""
    token: Optional[str] = Field(default=None, description="Apify API token")
    base_url: str = Field(default="https://api.apify.com/v2", description="Apify API base URL")
    actor_id: str = Field(default="apify/instagram-scraper", description="Instagram scraper actor")
    job_timeout: float = Field(default=240.0, description="Wall-clock limit per actor run (seconds)")
    details_timeout: float = Field(default=180.0, description="Wall-clock limit for profile detail runs (seconds)")
    poll_interval: float = Field(default=3.0, description="Seconds between status polls")
    submit_attempts: int = Field(default=3, description="Attempts for starting an actor run")
    request_timeout: float = Field(default=30.0, description="HTTP timeout per request (seconds)")

    class Config:
        env_prefix = "APIFY_"


class LLMSettings(BaseSettings):
    """Vision and generative provider"""
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API Key")
    base_url: Optional[str] = Field(default=None, description="OpenAI compatible base URL")
    model_name: str = Field(default="gpt-4o", description="Model for recommendations")
    vision_model: str = Field(default="gpt-4o", description="Model for image analysis")
    temperature: float = Field(default=0.7, description="Sampling temperature")
    max_tokens: int = Field(default=3000, description="Max tokens for recommendations")
    vision_max_tokens: int = Field(default=1000, description="Max tokens per image analysis")

    class Config:
        env_prefix = "LLM_"


class PipelineSettings(BaseSettings):
    """Research pipeline defaults"""
    max_competitors: int = Field(default=5, description="Competitors analysed per run")
    max_posts_per_competitor: int = Field(default=12, description="Posts scraped per competitor")
    max_images_per_competitor: int = Field(default=9, description="Images analysed per competitor")
    enable_web_search: bool = Field(default=True)
    enable_social_scraping: bool = Field(default=True)
    enable_image_analysis: bool = Field(default=True)
    max_concurrent_analyses: int = Field(default=3, description="Images analysed in parallel")
    batch_delay: float = Field(default=1.0, description="Pause between analysis batches (seconds)")
    simulated_search_delay: float = Field(default=1.0, description="Delay of the simulated web search (seconds)")

    class Config:
        env_prefix = "PIPELINE_"


class Settings(BaseSettings):
    """Aggregated configuration"""

    search: SearchSettings = Field(default_factory=SearchSettings)
    apify: ApifySettings = Field(default_factory=ApifySettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    log_level: str = Field(default="INFO", description="Process log level")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @classmethod
    def load_from_env_file(cls, env_path: Optional[Path] = None) -> "Settings":
        """Load settings after exporting the given .env file into the environment"""
        if env_path is None:
            env_path = Path(__file__).parent / ".env"

        if env_path.exists():
            from dotenv import load_dotenv
            load_dotenv(env_path)

        return cls(
            search=SearchSettings(),
            apify=ApifySettings(),
            llm=LLMSettings(),
            pipeline=PipelineSettings(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Settings for the host process (CLI); the pipeline itself takes them injected"""
    return Settings.load_from_env_file()

