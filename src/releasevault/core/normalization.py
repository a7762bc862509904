"""Title normalization for ReleaseVault.

This module turns raw title fragments into display titles and comparison
keys. It is shared by the parsing pipeline (which fills
``ParsedRelease.clean_title``) and the title matcher (which compares clean
titles against catalog entries).

The normalization stages are:
1. Unicode normalization (NFKC for display, NFKD + mark stripping for comparison)
2. Separator handling (dots/underscores in scene names)
3. Punctuation stripping and whitespace collapsing
"""

from __future__ import annotations

import functools
import re
import unicodedata

# Compile patterns once at module level
_NON_ALNUM_PATTERN = re.compile(r"[\W_]+", re.UNICODE)
_WHITESPACE_PATTERN = re.compile(r"\s+")
_LEADING_BRACKETS_PATTERN = re.compile(r"^(?:\s*[\[\(\{][^\]\)\}]*[\]\)\}])+\s*")
_EDGE_JUNK_PATTERN = re.compile(r"^[\s\-_.,:;~+\[\(\{]+|[\s\-_.,:;~+\[\(\{]+$")
_EMPTY_BRACKETS_PATTERN = re.compile(r"[\[\(\{]\s*[\]\)\}]")
_ACRONYM_PATTERN = re.compile(r"(?<![A-Za-z])((?:[A-Za-z]\.){2,}[A-Za-z]?)(?![A-Za-z])")


def normalize_unicode(text: str) -> str:
    """Apply NFKC normalization (full-width forms, ligatures, composed accents)."""
    return unicodedata.normalize("NFKC", text)


def _strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@functools.lru_cache(maxsize=8192)
def clean_title(title: str) -> str:
    """Build the comparison form of a title.

    Lowercased, diacritics removed, punctuation replaced by single spaces.
    The function is a fixed point: ``clean_title(clean_title(x)) == clean_title(x)``.

    Examples:
        >>> clean_title("The Walking Dead")
        'the walking dead'
        >>> clean_title("Pokémon: Indigo League!")
        'pokemon indigo league'
    """
    if not title:
        return ""
    text = _strip_diacritics(normalize_unicode(title)).lower()
    text = _NON_ALNUM_PATTERN.sub(" ", text)
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def comparison_key(title: str) -> str:
    """Clean title with all whitespace removed, used for exact comparisons.

    Examples:
        >>> comparison_key("Marvel's Agents of S.H.I.E.L.D.")
        'marvelsagentsofshield'
    """
    return clean_title(title).replace(" ", "")


def format_title(fragment: str) -> str:
    """Turn the title fragment of a release name into a display title.

    Leading bracket groups (fansub tags) are removed, scene separators are
    turned into spaces and trailing separators are trimmed.

    Examples:
        >>> format_title("The.Walking.Dead.")
        'The Walking Dead'
        >>> format_title("[SubsPlease] Demon Slayer - ")
        'Demon Slayer'
    """
    if not fragment:
        return ""

    text = _LEADING_BRACKETS_PATTERN.sub("", fragment)
    text = _EMPTY_BRACKETS_PATTERN.sub(" ", text)
    text = text.replace("_", " ")

    if " " not in text.strip():
        # scene style: dots separate words, except inside acronyms like S.H.I.E.L.D
        acronyms: list[str] = []

        def _protect(match: re.Match[str]) -> str:
            acronyms.append(match.group(1).rstrip("."))
            return f"\x00{len(acronyms) - 1}\x00"

        text = _ACRONYM_PATTERN.sub(_protect, text)
        text = text.replace(".", " ")
        for index, acronym in enumerate(acronyms):
            text = text.replace(f"\x00{index}\x00", acronym)

    text = _WHITESPACE_PATTERN.sub(" ", text)
    return _EDGE_JUNK_PATTERN.sub("", text).strip()


__all__ = [
    "clean_title",
    "comparison_key",
    "format_title",
    "normalize_unicode",
]
