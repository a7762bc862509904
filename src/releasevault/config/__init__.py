"""ReleaseVault Configuration Module

This module provides unified access to engine settings and to the
per-call profile configuration (quality profiles, custom formats,
preferred words and release policies).

- Settings: engine tuning, loaded from TOML and ``RELEASEVAULT_`` variables
- Loader functions: get_config, load_settings, reload_config
- Profile models: validated eagerly by load_profile_config
"""

from __future__ import annotations

from .settings import (
    LoggingSettings,
    MatcherSettings,
    ParserSettings,
    ScoringSettings,
    Settings,
)
from .profiles import (
    CustomFormat,
    FormatCondition,
    FormatConditionType,
    PreferredWord,
    ProfileConfig,
    QualityProfile,
    QualityProfileItem,
    ReleasePolicies,
    Restriction,
    load_profile_config,
)
from .loader import get_config, load_settings, reload_config

__all__ = [
    "CustomFormat",
    "FormatCondition",
    "FormatConditionType",
    "LoggingSettings",
    "MatcherSettings",
    "ParserSettings",
    "PreferredWord",
    "ProfileConfig",
    "QualityProfile",
    "QualityProfileItem",
    "ReleasePolicies",
    "Restriction",
    "ScoringSettings",
    "Settings",
    "get_config",
    "load_profile_config",
    "load_settings",
    "reload_config",
]
