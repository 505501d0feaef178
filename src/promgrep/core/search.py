"""
promgrep Matching & Ranking

Decides whether a metric declaration answers the user's query and how
well, then orders and renders the hits.

Two matchers share one contract (:meth:`Matcher.match`):

- :class:`MatchAny` lists every declaration, unscored (score ``-1``).
- :class:`MatchName` scores declarations against a query name by
  substring containment, with a special case for declarations that set a
  Namespace but no Subsystem.
"""

import json
import logging
from typing import List, Optional

from promgrep.core.config import MetricSchema
from promgrep.core.engine import MatchHit, PromOpts, SourcePosition, qualified_metric_name

logger = logging.getLogger(__name__)

# Score sentinel for list-all runs
UNSCORED = -1
EXACT_SCORE = 100


# =============================================================================
# Matchers
# =============================================================================

class Matcher:
    """
    Abstract matching strategy.

    ``match`` returns a :class:`MatchHit` (without a kind; the scanner
    stamps it) when the declaration is a hit, or ``None`` when it is not.
    """

    def match(self, opts: PromOpts, pos: SourcePosition) -> Optional[MatchHit]:
        raise NotImplementedError

    @staticmethod
    def _hit(score: int, opts: PromOpts, pos: SourcePosition) -> MatchHit:
        return MatchHit(
            score=score,
            path=pos.filename,
            line=pos.line,
            qualified_name=qualified_metric_name(opts),
            help=opts.get(MetricSchema.HELP_FIELD, ""),
        )


class MatchAny(Matcher):
    """Matches every declaration; used when no query is given."""

    def match(self, opts: PromOpts, pos: SourcePosition) -> Optional[MatchHit]:
        return self._hit(UNSCORED, opts, pos)


class MatchName(Matcher):
    """
    Fuzzy match against a query metric name.

    A declaration with a Namespace but no Subsystem is registered under
    the bare Name, yet users often search for ``<namespace>_..._<name>``.
    When the query is longer than Namespace and Name combined, such a
    declaration matches only if the query starts with the Namespace and
    ends with the Name; the unexplained middle is penalized.  Every other
    declaration matches when its qualified name and the query contain one
    another, penalized by the length difference.
    """

    def __init__(self, name: str):
        self.name = name

    def match(self, opts: PromOpts, pos: SourcePosition) -> Optional[MatchHit]:
        query = self.name
        namespace = opts.get("Namespace", "")
        subsystem = opts.get("Subsystem", "")
        metric = opts.get("Name", "")

        if namespace != "" and subsystem == "" and len(query) > len(namespace) + len(metric):
            if not query.startswith(namespace) or not query.endswith(metric):
                return None
            delta = len(query) - len(namespace) - len(metric)
            return self._hit(calculate_match_score(delta, len(query)), opts, pos)

        qmn = qualified_metric_name(opts)
        if qmn not in query and query not in qmn:
            return None

        delta, denom = len(query) - len(qmn), len(query)
        if delta < 0:
            delta, denom = -delta, len(qmn)
        return self._hit(calculate_match_score(delta, denom), opts, pos)


def calculate_match_score(delta: int, denom: int) -> int:
    """
    Score a containment match: 100 minus the unexplained share of *denom*.

    Truncating integer division.  Only ``delta == 0`` scores 100; a small
    delta against a very long string would otherwise truncate to 100 too,
    so inexact matches are held at 99.
    """
    if delta == 0:
        return EXACT_SCORE
    return min(EXACT_SCORE - delta * 100 // denom, EXACT_SCORE - 1)


def create_matcher(query: Optional[str]) -> Matcher:
    """Pick the matcher for a run: no query lists all, a query ranks by name."""
    if query is None:
        return MatchAny()
    return MatchName(query)


# =============================================================================
# Ranking
# =============================================================================

def rank_hits(hits: List[MatchHit], min_score: Optional[int] = None,
              max_results: Optional[int] = None) -> List[MatchHit]:
    """
    Order hits by descending score.

    The sort is stable, so equal scores keep scan order (file order, then
    source order).  *min_score* drops scored hits below the threshold but
    never drops unscored list-all hits.
    """
    ranked = sorted(hits)
    if min_score is not None:
        ranked = [h for h in ranked if h.score == UNSCORED or h.score >= min_score]
    if max_results is not None and max_results >= 0:
        ranked = ranked[:max_results]
    return ranked


# =============================================================================
# Output Formatting
# =============================================================================

class ResultFormatter:
    """Format hits for different output modes."""

    @staticmethod
    def format_hit(hit: MatchHit) -> str:
        """``path:line    name Kind: help`` or ``... Kind score:N``."""
        if hit.score == UNSCORED:
            return f"{hit.path}:{hit.line}    {hit.qualified_name} {hit.kind}: {hit.help}"
        return f"{hit.path}:{hit.line}    {hit.qualified_name} {hit.kind} score:{hit.score}"

    @staticmethod
    def format_text(hits: List[MatchHit]) -> str:
        """grep-like, one line per hit; empty string when there are none."""
        return "\n".join(ResultFormatter.format_hit(h) for h in hits)

    @staticmethod
    def format_compact(hits: List[MatchHit]) -> str:
        """``path:line  name`` only, for piping into editors."""
        return "\n".join(f"{h.path}:{h.line}  {h.qualified_name}" for h in hits)

    @staticmethod
    def _sanitize_for_json(s: str) -> str:
        """Normalise path separators and drop control characters in a path."""
        if not s:
            return s
        s = s.replace("\\", "/")
        return "".join(c for c in s if (ord(c) >= 32 and ord(c) != 127) or c in "\n\r\t")

    @staticmethod
    def format_json(hits: List[MatchHit]) -> str:
        """Format hits as a JSON list (all fields, kind as its label)."""
        def _to_obj(h: MatchHit) -> dict:
            obj = h.to_dict()
            obj["path"] = ResultFormatter._sanitize_for_json(h.path)
            return obj

        return json.dumps([_to_obj(h) for h in hits], indent=2, allow_nan=False)
