"""Wiki Trust - heuristic trust scoring for wiki pages."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from wiki_trust.cache import Cache
from wiki_trust.classifier import classify_contributor
from wiki_trust.config import WikiTrustConfig, load_config
from wiki_trust.exceptions import WikiTrustError
from wiki_trust.models import (
    AnalysisFailure,
    AnalysisResult,
    ContributorLevel,
    RiskTier,
)
from wiki_trust.scorer import RevisionAnalyzer, produce_analysis

try:
    __version__ = version("wiki-trust")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "AnalysisFailure",
    "AnalysisResult",
    "Cache",
    "ContributorLevel",
    "RevisionAnalyzer",
    "RiskTier",
    "WikiTrustConfig",
    "WikiTrustError",
    "__version__",
    "classify_contributor",
    "load_config",
    "produce_analysis",
]
