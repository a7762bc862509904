"""
ReleaseVault - Media Release Classification Engine

Parses unstructured release titles into structured metadata, matches them
against catalog entries and scores, rejects and ranks the releases offered
for a target to decide what to grab.
"""

__version__ = "0.1.0"

from .core.decision import BulkDecisionReport, Decision, DecisionEngine
from .core.matching import MatchCandidate, MatchOutcome, TitleMatcher
from .core.parser import ParsedRelease, ReleaseParser, parse_release
from .core.scoring import ReleaseCandidate, ScoredRelease, ScoringContext

__all__ = [
    "BulkDecisionReport",
    "Decision",
    "DecisionEngine",
    "MatchCandidate",
    "MatchOutcome",
    "ParsedRelease",
    "ReleaseCandidate",
    "ReleaseParser",
    "ScoredRelease",
    "ScoringContext",
    "TitleMatcher",
    "parse_release",
]
