"""
FastAPI dependency injection module for the venue CRM backend.

This module provides reusable FastAPI dependencies for configuration access
and the service collaborators every route needs. Endpoint handlers declare
them with the Annotated type aliases below, and tests replace them through
`app.dependency_overrides`.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_sheets_client: Shared SheetsClient (one tab cache per process)
- get_text_generator: Groq text generator, or None when no API key is set
- get_filter_service: FilterService over the process-wide filter store

Type Aliases:
- SettingsDep, SheetsClientDep, TextGeneratorDep, FilterServiceDep

Usage Examples:
    @router.get("/funnel")
    def get_funnel(sheets: SheetsClientDep):
        leads = sheets.fetch_leads()
        ...

    # In tests
    app.dependency_overrides[get_sheets_client] = lambda: fake_client
"""

from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends

from venue_crm.core.config import Settings, get_settings
from venue_crm.services.ai_assist import GroqTextGenerator, TextGenerator
from venue_crm.services.filters import FilterService, InMemoryFilterStore
from venue_crm.services.sheets import SheetsClient


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    This is a thin wrapper around get_settings() to enable FastAPI's
    dependency override mechanism for testing:

        app.dependency_overrides[get_settings_dependency] = lambda: mock_settings
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Sheet Data Source Dependency
# =============================================================================

@lru_cache()
def _sheets_client(sheet_id: str, cache_seconds: int, timeout: float) -> SheetsClient:
    return SheetsClient(sheet_id=sheet_id, cache_seconds=cache_seconds, timeout=timeout)


def get_sheets_client(settings: SettingsDep) -> SheetsClient:
    """
    Return the shared SheetsClient for the configured sheet.

    The client is cached per (sheet id, cache lifetime, timeout) so that its
    tab cache survives across requests.
    """
    return _sheets_client(
        settings.google_sheet_id,
        settings.sheet_cache_seconds,
        settings.sheet_request_timeout,
    )


SheetsClientDep = Annotated[SheetsClient, Depends(get_sheets_client)]


# =============================================================================
# AI Text Generator Dependency
# =============================================================================

@lru_cache()
def _groq_generator(
    api_key: str,
    model: str,
    temperature: float,
    max_tokens: int,
    venue_name: str,
) -> GroqTextGenerator:
    return GroqTextGenerator(
        api_key=api_key,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        venue_name=venue_name,
    )


def get_text_generator(settings: SettingsDep) -> Optional[TextGenerator]:
    """
    Return the configured text generator, or None without GROQ_API_KEY.

    AI helpers treat None as "unavailable" and answer with their fallbacks.
    """
    if not settings.groq_api_key:
        return None
    return _groq_generator(
        settings.groq_api_key,
        settings.ai_model,
        settings.ai_temperature,
        settings.ai_max_tokens,
        settings.venue_name,
    )


TextGeneratorDep = Annotated[Optional[TextGenerator], Depends(get_text_generator)]


# =============================================================================
# Saved Filter Dependency
# =============================================================================

@lru_cache()
def _filter_service() -> FilterService:
    return FilterService(InMemoryFilterStore())


def get_filter_service() -> FilterService:
    """Return the process-wide FilterService, shared so its write lock is too."""
    return _filter_service()


FilterServiceDep = Annotated[FilterService, Depends(get_filter_service)]
