"""
Configuration Management Module
Settings, credentials and credential resolution
"""
from .settings import (
    DEFAULT_PROVIDER_ORDER,
    Settings,
    SearchSettings,
    ApifySettings,
    LLMSettings,
    PipelineSettings,
    get_settings,
)
from .credentials import (
    CredentialResolver,
    ResearchCredentials,
    mask_secret,
)

__all__ = [
    "DEFAULT_PROVIDER_ORDER",
    "Settings",
    "SearchSettings",
    "ApifySettings",
    "LLMSettings",
    "PipelineSettings",
    "get_settings",
    "CredentialResolver",
    "ResearchCredentials",
    "mask_secret",
]
