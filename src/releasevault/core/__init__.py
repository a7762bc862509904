"""
Core components for ReleaseVault.

The parsing pipeline (``core.parser``), the title matcher
(``core.matching``) and the scoring components (``core.scoring``) live in
subpackages; this package also holds the quality model and the shared
title normalization helpers.
"""

from .normalization import clean_title, comparison_key, format_title
from .quality import QualityModifier, QualitySource, QualityTag, Resolution

__all__ = [
    "QualityModifier",
    "QualitySource",
    "QualityTag",
    "Resolution",
    "clean_title",
    "comparison_key",
    "format_title",
]
