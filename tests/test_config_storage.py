"""
Tests for settings, credential resolution and the result cache
"""
from __future__ import annotations

import pytest

from config import (
    DEFAULT_PROVIDER_ORDER,
    CredentialResolver,
    ResearchCredentials,
    SearchSettings,
    Settings,
    mask_secret,
)
from models import ResearchConfig
from storage import BaseCache, MemoryCache


def test_blank_credentials_count_as_missing() -> None:
    resolver = CredentialResolver(ResearchCredentials(serp_api="   ", apify="apify-token"))

    assert resolver.get("serp_api") is None
    assert resolver.has("apify")
    assert not resolver.has("apify", "open_ai")
    assert resolver.available_search_providers() == []


def test_available_search_providers_follow_default_order() -> None:
    resolver = CredentialResolver(ResearchCredentials(
        bing_api_key="b", serp_api="s", google_cse_key="g", google_cse_cx="cx"
    ))

    assert resolver.available_search_providers() == DEFAULT_PROVIDER_ORDER
    assert not resolver.has_search_provider("duckduckgo")


def test_masking_never_reveals_short_secrets() -> None:
    assert mask_secret("abcd1234efgh") == "abcd••••efgh"
    assert mask_secret("short") == "••••••••"
    assert mask_secret(None) == "••••••••"
    assert "serp-secret" not in repr(CredentialResolver(ResearchCredentials(serp_api="serp-secret")))


def test_credentials_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SEARCH_SERPAPI_KEY", "serp-from-env")
    monkeypatch.setenv("APIFY_TOKEN", "apify-from-env")

    credentials = ResearchCredentials.from_settings(Settings(search=SearchSettings()))

    assert credentials.serp_api == "serp-from-env"


def test_priority_order_parsing() -> None:
    assert SearchSettings(provider_order=" Bing , serpapi ").priority_order() == ["bing", "serpapi"]
    assert SearchSettings(provider_order="").priority_order() == DEFAULT_PROVIDER_ORDER


def test_research_config_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PIPELINE_MAX_CONCURRENT_ANALYSES", "5")

    config = ResearchConfig.from_settings(Settings())

    assert config.max_concurrent_analyses == 5
    assert config.enable_web_search is True


def test_memory_cache_ttl() -> None:
    now = [100.0]
    cache = MemoryCache(ttl=10, clock=lambda: now[0])
    cache.set("k", {"v": 1})

    now[0] = 109.9
    assert cache.get("k") == {"v": 1}
    now[0] = 110.0
    assert cache.get("k") is None
    assert cache.size() == 1


def test_memory_cache_without_ttl_never_expires() -> None:
    now = [0.0]
    cache = MemoryCache(clock=lambda: now[0])
    cache.set("k", "v")
    now[0] = 1e9

    assert cache.exists("k")
    cache.delete("k")
    assert not cache.exists("k")


def test_cache_keys_depend_on_every_parameter() -> None:
    base = BaseCache.make_key("serpapi", "acme", num=10, language="pt-br")

    assert base == BaseCache.make_key("serpapi", "acme", language="pt-br", num=10)
    assert base != BaseCache.make_key("serpapi", "acme", num=5, language="pt-br")
    assert base != BaseCache.make_key("bing", "acme", num=10, language="pt-br")
