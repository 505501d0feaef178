"""
promgrep Client Facade

Single entry point for programmatic use of promgrep.  Wraps directory
scanning, matching and ranking behind an instance-based API with async
variants.

Usage::

    from promgrep import Promgrep

    client = Promgrep()

    # Where is this metric declared?
    for hit in client.search("api_http_requests_total", path="./svc"):
        print(f"{hit.path}:{hit.line}  {hit.qualified_name}  score={hit.score}")

    # Census of every declaration, with run statistics
    result = client.scan(path="./svc")
    print(f"{len(result.hits)} declarations in {result.files_relevant} files")

    # Async variant (for FastAPI / async tooling)
    hits = await client.asearch("api_http_requests_total", path="./svc")
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from promgrep.core.config import PromgrepConfig
from promgrep.core.engine import MatchHit, ScanResult
from promgrep.core.scanner import ScanPipeline
from promgrep.core.search import rank_hits

logger = logging.getLogger(__name__)


class Promgrep:
    """
    High-level promgrep client.

    Each instance carries its own :class:`PromgrepConfig` and never
    touches global state.

    Args:
        config: Explicit configuration object.  When *None*, a config is
            built from environment variables, overlaid with *kwargs*.
        **kwargs: Forwarded to :class:`PromgrepConfig` when *config* is
            ``None`` (e.g. ``max_workers=4``).

    Raises:
        ConfigError: If the resulting configuration is invalid.
    """

    def __init__(self, config: PromgrepConfig | None = None, **kwargs):
        if config is not None:
            self._config = config
        elif kwargs:
            base = PromgrepConfig.from_env()
            merged = {
                f.name: kwargs.get(f.name, getattr(base, f.name))
                for f in dataclasses.fields(base)
            }
            self._config = PromgrepConfig(**merged)
        else:
            self._config = PromgrepConfig.from_env()

        self._config.validate()

    # ── Configuration ─────────────────────────────────────────────

    @property
    def config(self) -> PromgrepConfig:
        """The active configuration for this client."""
        return self._config

    # ── Scanning ──────────────────────────────────────────────────

    def scan(
        self,
        query: Optional[str] = None,
        path: str | Path = ".",
        *,
        show_progress: bool = False,
    ) -> ScanResult:
        """
        Scan every Go file under *path* and return hits with statistics.

        Args:
            query: Metric name to rank against.  ``None`` lists every
                declaration with the unscored sentinel ``-1``.
            path: Root directory to walk.
            show_progress: Show a tqdm progress bar.

        Raises:
            ScanError: If *path* cannot be walked or a file cannot be read.
        """
        pipeline = ScanPipeline(
            root_dir=path,
            query=query,
            config=self._config,
            show_progress=show_progress,
        )
        return pipeline.run()

    def scan_files(
        self,
        files: Iterable[str | Path],
        query: Optional[str] = None,
    ) -> ScanResult:
        """Scan an explicit list of files (no directory walk, no filtering)."""
        pipeline = ScanPipeline(query=query, config=self._config)
        return pipeline.scan_files(files)

    def search(
        self,
        query: Optional[str] = None,
        path: str | Path = ".",
        *,
        min_score: Optional[int] = None,
        max_results: Optional[int] = None,
        show_progress: bool = False,
    ) -> List[MatchHit]:
        """
        Return ranked hits for *query* under *path*.

        Args:
            query: Metric name, full or partial.  ``None`` lists everything.
            path: Root directory to walk.
            min_score: Drop scored hits below this score.
            max_results: Keep at most this many hits.

        Returns:
            Hits ordered by descending score.
        """
        result = self.scan(query, path, show_progress=show_progress)
        return rank_hits(result.hits, min_score=min_score, max_results=max_results)

    # ── Async variants ────────────────────────────────────────────
    # Run the sync operations off the event loop; same exceptions.

    async def ascan(
        self,
        query: Optional[str] = None,
        path: str | Path = ".",
    ) -> ScanResult:
        """Async variant of :meth:`scan`."""
        return await asyncio.to_thread(self.scan, query, path)

    async def asearch(
        self,
        query: Optional[str] = None,
        path: str | Path = ".",
        *,
        min_score: Optional[int] = None,
        max_results: Optional[int] = None,
    ) -> List[MatchHit]:
        """Async variant of :meth:`search`."""
        return await asyncio.to_thread(
            self.search, query, path,
            min_score=min_score, max_results=max_results,
        )
