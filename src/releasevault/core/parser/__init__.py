"""Release title parsing: pattern library, field extractors and strategies."""

from releasevault.core.parser.models import (
    LanguageTag,
    Modifiers,
    ParsedRelease,
    ParserKind,
)
from releasevault.core.parser.patterns import PatternLibrary, get_pattern_library
from releasevault.core.parser.pipeline import ReleaseParser, parse_release

__all__ = [
    "LanguageTag",
    "Modifiers",
    "ParsedRelease",
    "ParserKind",
    "PatternLibrary",
    "ReleaseParser",
    "get_pattern_library",
    "parse_release",
]
