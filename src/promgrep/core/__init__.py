"""
promgrep Core: configuration, Go source analysis, matching and scanning.

Re-exports the primary classes for convenience::

    from promgrep.core import ScanPipeline, MatchName, qualified_metric_name
"""

from promgrep.core.config import MetricKind, MetricSchema, PromgrepConfig
from promgrep.core.engine import (
    GoSourceParser,
    MatchHit,
    ScanResult,
    SourcePosition,
    extract_opts,
    qualified_metric_name,
    recognize_constructor,
    scan_directory,
    unquote,
)
from promgrep.core.scanner import ScanPipeline
from promgrep.core.search import (
    MatchAny,
    Matcher,
    MatchName,
    ResultFormatter,
    create_matcher,
    rank_hits,
)

__all__ = [
    "MetricKind",
    "MetricSchema",
    "PromgrepConfig",
    "GoSourceParser",
    "MatchHit",
    "ScanResult",
    "SourcePosition",
    "extract_opts",
    "qualified_metric_name",
    "recognize_constructor",
    "scan_directory",
    "unquote",
    "ScanPipeline",
    "MatchAny",
    "Matcher",
    "MatchName",
    "ResultFormatter",
    "create_matcher",
    "rank_hits",
]
