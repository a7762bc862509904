"""Quality model: sources, resolutions, definitions and weighted tags.

Every quality a release can carry is an exhaustive combination of a
``QualitySource`` and a ``Resolution``. The pair resolves to a
``QualityDefinition`` from a fixed table, and the definition's weight is the
only value used to order qualities. Nothing outside this module compares
sources or resolutions directly.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Final


class ContentKind(str, Enum):
    """Kind of content a quality applies to; weights are comparable within a kind."""

    VIDEO = "video"
    AUDIO = "audio"


class QualitySource(str, Enum):
    """Where a release was sourced from."""

    UNKNOWN = "unknown"
    WORKPRINT = "workprint"
    CAM = "cam"
    TELESYNC = "telesync"
    TELECINE = "telecine"
    SDTV = "sdtv"
    DVD = "dvd"
    HDTV = "hdtv"
    WEBRIP = "web-rip"
    WEBDL = "web-dl"
    BLURAY = "bluray"
    REMUX = "bluray-remux"
    # music variant tiers
    AUDIO_LOW = "low"
    AUDIO_STANDARD = "standard"
    AUDIO_HIGH = "high-bitrate"
    AUDIO_LOSSLESS = "lossless"

    @property
    def content_kind(self) -> ContentKind:
        """Content kind this source belongs to."""
        if self in _AUDIO_SOURCES:
            return ContentKind.AUDIO
        return ContentKind.VIDEO


_AUDIO_SOURCES: Final[frozenset[QualitySource]] = frozenset(
    {
        QualitySource.AUDIO_LOW,
        QualitySource.AUDIO_STANDARD,
        QualitySource.AUDIO_HIGH,
        QualitySource.AUDIO_LOSSLESS,
    }
)


class Resolution(IntEnum):
    """Vertical video resolution; UNKNOWN (0) when not determinable."""

    UNKNOWN = 0
    R360P = 360
    R480P = 480
    R540P = 540
    R576P = 576
    R720P = 720
    R1080P = 1080
    R2160P = 2160


class QualityModifier(str, Enum):
    """Revision modifier carried by the quality of a release."""

    PROPER = "proper"
    REPACK = "repack"


@dataclass(frozen=True)
class QualityDefinition:
    """One row of the quality table.

    Attributes:
        name: Display name referenced by quality profiles (e.g. "WEB-DL 1080p")
        source: Source of the tier
        resolution: Resolution of the tier
        weight: Base rank; higher is better within a content kind
        min_size: Minimum size in MB per minute of runtime
        max_size: Maximum size in MB per minute of runtime (None = unlimited)
    """

    name: str
    source: QualitySource
    resolution: Resolution
    weight: int
    min_size: float = 0.0
    max_size: float | None = None

    @property
    def content_kind(self) -> ContentKind:
        return self.source.content_kind


_S = QualitySource
_R = Resolution

QUALITY_DEFINITIONS: Final[tuple[QualityDefinition, ...]] = (
    QualityDefinition("Unknown", _S.UNKNOWN, _R.UNKNOWN, 0, 0, 100),
    QualityDefinition("WORKPRINT", _S.WORKPRINT, _R.UNKNOWN, 1, 0, 100),
    QualityDefinition("CAM", _S.CAM, _R.UNKNOWN, 2, 0, 100),
    QualityDefinition("TELESYNC", _S.TELESYNC, _R.UNKNOWN, 3, 0, 100),
    QualityDefinition("TELECINE", _S.TELECINE, _R.UNKNOWN, 4, 0, 100),
    QualityDefinition("DVD", _S.DVD, _R.R480P, 10, 2, 100),
    QualityDefinition("DVD-R", _S.DVD, _R.R576P, 11, 2, 100),
    QualityDefinition("SDTV", _S.SDTV, _R.R480P, 15, 1, 100),
    QualityDefinition("WEBRip-480p", _S.WEBRIP, _R.R480P, 16, 1, 100),
    QualityDefinition("WEB-DL 480p", _S.WEBDL, _R.R480P, 17, 1, 100),
    QualityDefinition("BluRay-480p", _S.BLURAY, _R.R480P, 18, 2, 100),
    QualityDefinition("HDTV-720p", _S.HDTV, _R.R720P, 20, 3, 125),
    QualityDefinition("WEBRip-720p", _S.WEBRIP, _R.R720P, 21, 3, 130),
    QualityDefinition("WEB-DL 720p", _S.WEBDL, _R.R720P, 22, 3, 130),
    QualityDefinition("BluRay-720p", _S.BLURAY, _R.R720P, 23, 4, 130),
    QualityDefinition("HDTV-1080p", _S.HDTV, _R.R1080P, 30, 4, 130),
    QualityDefinition("WEBRip-1080p", _S.WEBRIP, _R.R1080P, 31, 4, 130),
    QualityDefinition("WEB-DL 1080p", _S.WEBDL, _R.R1080P, 32, 4, 130),
    QualityDefinition("BluRay-1080p", _S.BLURAY, _R.R1080P, 33, 5, 155),
    QualityDefinition("Remux-1080p", _S.REMUX, _R.R1080P, 34, 10, 400),
    QualityDefinition("HDTV-2160p", _S.HDTV, _R.R2160P, 40, 10, 350),
    QualityDefinition("WEBRip-2160p", _S.WEBRIP, _R.R2160P, 41, 10, 350),
    QualityDefinition("WEB-DL 2160p", _S.WEBDL, _R.R2160P, 42, 10, 350),
    QualityDefinition("BluRay-2160p", _S.BLURAY, _R.R2160P, 43, 15, 400),
    QualityDefinition("Remux-2160p", _S.REMUX, _R.R2160P, 44, 30, 750),
    # music tiers, sizes are not enforced per minute
    QualityDefinition("Audio-Low", _S.AUDIO_LOW, _R.UNKNOWN, 1),
    QualityDefinition("Audio-Standard", _S.AUDIO_STANDARD, _R.UNKNOWN, 2),
    QualityDefinition("Audio-High", _S.AUDIO_HIGH, _R.UNKNOWN, 3),
    QualityDefinition("Audio-Lossless", _S.AUDIO_LOSSLESS, _R.UNKNOWN, 4),
)

DEFINITIONS_BY_NAME: Final = MappingProxyType({d.name: d for d in QUALITY_DEFINITIONS})
_DEFINITIONS_BY_PAIR: Final = MappingProxyType(
    {(d.source, d.resolution): d for d in QUALITY_DEFINITIONS}
)
UNKNOWN_DEFINITION: Final[QualityDefinition] = DEFINITIONS_BY_NAME["Unknown"]

# Sources whose tiers ignore resolution entirely
_RESOLUTION_AGNOSTIC: Final[frozenset[QualitySource]] = frozenset(
    {_S.UNKNOWN, _S.WORKPRINT, _S.CAM, _S.TELESYNC, _S.TELECINE} | _AUDIO_SOURCES
)

# Weight step for a proper/repack revision; keeps revisions inside their tier
REVISION_WEIGHT_FACTOR: Final[int] = 10


@functools.lru_cache(maxsize=256)
def resolve_definition(source: QualitySource, resolution: Resolution) -> QualityDefinition:
    """Resolve a source/resolution pair to its quality definition.

    Pairs without an exact row resolve to the same source at the highest
    defined resolution not above the given one (HDTV below 720p is SDTV),
    and otherwise to Unknown.
    """
    if source in _RESOLUTION_AGNOSTIC:
        return _DEFINITIONS_BY_PAIR[(source, Resolution.UNKNOWN)]

    exact = _DEFINITIONS_BY_PAIR.get((source, resolution))
    if exact is not None:
        return exact

    if source is QualitySource.HDTV and resolution < Resolution.R720P:
        return DEFINITIONS_BY_NAME["SDTV"]

    lower = [
        d for d in QUALITY_DEFINITIONS
        if d.source is source and Resolution.UNKNOWN < d.resolution <= resolution
    ]
    if lower:
        return max(lower, key=lambda d: d.resolution)

    if source is QualitySource.REMUX:
        return resolve_definition(QualitySource.BLURAY, resolution)

    return UNKNOWN_DEFINITION


@dataclass(frozen=True)
class QualityTag:
    """Quality of a release, with its precomputed ordering weight.

    ``weight`` increases monotonically with perceptual quality within a
    content kind and is the only field used to compare two tags.
    Build tags with :meth:`create`; the weight is derived, never supplied.
    """

    source: QualitySource = QualitySource.UNKNOWN
    resolution: Resolution = Resolution.UNKNOWN
    modifier: QualityModifier | None = None
    definition: QualityDefinition = field(default=UNKNOWN_DEFINITION, compare=False)
    weight: int = 0

    @classmethod
    def create(
        cls,
        source: QualitySource = QualitySource.UNKNOWN,
        resolution: Resolution = Resolution.UNKNOWN,
        modifier: QualityModifier | None = None,
    ) -> QualityTag:
        """Build a tag and compute its weight from the definition table."""
        definition = resolve_definition(source, resolution)
        weight = definition.weight * REVISION_WEIGHT_FACTOR + (1 if modifier else 0)
        return cls(
            source=source,
            resolution=resolution,
            modifier=modifier,
            definition=definition,
            weight=weight,
        )

    @classmethod
    def from_name(cls, name: str, modifier: QualityModifier | None = None) -> QualityTag:
        """Build a tag from a quality definition name (e.g. "BluRay-1080p").

        Raises:
            KeyError: If no definition has this name
        """
        definition = DEFINITIONS_BY_NAME[name]
        return cls.create(definition.source, definition.resolution, modifier)

    @property
    def name(self) -> str:
        """Name of the quality definition this tag resolves to."""
        return self.definition.name

    @property
    def content_kind(self) -> ContentKind:
        return self.source.content_kind

    def is_better_than(self, other: QualityTag) -> bool:
        """Compare two tags by weight only."""
        return self.weight > other.weight

    def __str__(self) -> str:
        if self.modifier:
            return f"{self.name} {self.modifier.value.capitalize()}"
        return self.name


UNKNOWN_QUALITY: Final[QualityTag] = QualityTag.create()


__all__ = [
    "DEFINITIONS_BY_NAME",
    "QUALITY_DEFINITIONS",
    "UNKNOWN_DEFINITION",
    "UNKNOWN_QUALITY",
    "ContentKind",
    "QualityDefinition",
    "QualityModifier",
    "QualitySource",
    "QualityTag",
    "Resolution",
    "resolve_definition",
]
