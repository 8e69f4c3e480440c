"""
Core infrastructure package for the venue CRM backend.

Provides:
- Configuration management via pydantic-settings
- FastAPI dependency injection utilities

This module re-exports key components from submodules for convenient importing:

    from venue_crm.core import get_settings, SheetsClientDep

Instead of:

    from venue_crm.core.config import get_settings
    from venue_crm.core.dependencies import SheetsClientDep
"""

# =============================================================================
# Re-exports from venue_crm.core.config
# =============================================================================
from venue_crm.core.config import Settings, get_settings

# =============================================================================
# Re-exports from venue_crm.core.dependencies
# =============================================================================
from venue_crm.core.dependencies import (
    get_settings_dependency,
    get_sheets_client,
    get_text_generator,
    get_filter_service,
    SettingsDep,
    SheetsClientDep,
    TextGeneratorDep,
    FilterServiceDep,
)

__all__ = [
    # Configuration management (from config.py)
    'Settings',
    'get_settings',
    # FastAPI dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_sheets_client',
    'get_text_generator',
    'get_filter_service',
    'SettingsDep',
    'SheetsClientDep',
    'TextGeneratorDep',
    'FilterServiceDep',
]
