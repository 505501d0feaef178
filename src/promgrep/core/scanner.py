"""
promgrep Scan Pipeline

Walks a directory of Go sources and collects the metric declarations the
active matcher accepts.

Per file:
  1. Cheap relevance check: does the file import the Prometheus client?
  2. Full parse with tree-sitter
  3. Visit every call expression: recognize constructor, extract literal
     options, ask the matcher, stamp the kind on a hit

A file that fails to parse is reported and skipped; a failure while
matching one call is reported and that call yields no hit.  Only failures
that make the scan itself impossible (unwalkable root, unreadable file)
propagate, as :class:`~promgrep.exceptions.ScanError`.
"""

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from tqdm import tqdm

from promgrep.core.config import PromgrepConfig
from promgrep.core.engine import (
    GoSourceParser, MatchHit, ScanResult,
    extract_opts, node_position, recognize_constructor,
    scan_directory, walk_tree,
)
from promgrep.core.search import Matcher, create_matcher, rank_hits
from promgrep.exceptions import ScanError, SourceParseError

logger = logging.getLogger(__name__)


class ScanPipeline:
    """
    Orchestrates one scan run.

    The matcher is chosen once, from *query*, before any file is read.
    Hits from all files are gathered on the calling thread in file order,
    so running with several workers changes neither scores nor ordering.
    """

    def __init__(self, root_dir: Path | str = ".", query: Optional[str] = None,
                 config: PromgrepConfig | None = None, show_progress: bool = False):
        """
        Initialize the scan pipeline.

        Args:
            root_dir: Directory to walk for ``.go`` files.
            query: Metric name to rank against; ``None`` lists everything.
            config: Explicit configuration (defaults to environment).
            show_progress: Show a tqdm progress bar on stderr.
        """
        self.root_dir = Path(root_dir)
        self.query = query
        self.config = config or PromgrepConfig.from_env()
        self.show_progress = show_progress

        self.matcher: Matcher = create_matcher(query)
        self.parser = GoSourceParser()
        self._needle = self.config.library_import_path.encode("utf-8")

    def run(self) -> ScanResult:
        """Discover files under the root and scan them."""
        logger.info(f"Scanning {self.root_dir} for metric declarations")
        files = scan_directory(self.root_dir, self.config)
        result = self.scan_files(files)
        result.root_dir = str(self.root_dir)
        return result

    def scan_files(self, files: Iterable[Path | str]) -> ScanResult:
        """Scan an explicit list of files and return ranked hits."""
        paths = [Path(f) for f in files]
        result = ScanResult(files_scanned=len(paths), query=self.query)

        accum: List[MatchHit] = []
        with tqdm(total=len(paths), desc="Scanning files", unit="file",
                  disable=not self.show_progress) as pbar:
            for hits, stats in self._iter_file_results(paths):
                accum.extend(hits)
                result.files_relevant += stats["relevant"]
                result.files_parsed += stats["parsed"]
                result.parse_errors += stats["parse_errors"]
                result.match_errors += stats["match_errors"]
                pbar.update(1)

        result.hits = rank_hits(accum)
        logger.info(
            f"Scanned {result.files_scanned} files "
            f"({result.files_relevant} import the client library), "
            f"{len(result.hits)} hits"
        )
        if result.parse_errors:
            logger.warning(f"{result.parse_errors} files could not be parsed")
        return result

    def _iter_file_results(self, paths: List[Path]):
        """Yield per-file results in input order, in parallel when configured."""
        workers = self.config.max_workers
        if workers <= 1 or len(paths) <= 1:
            for path in paths:
                yield self._process_file(path)
            return

        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() preserves input order and re-raises worker exceptions here
            yield from executor.map(self._process_file, paths)

    # ── Per-file work ─────────────────────────────────────────────

    def _process_file(self, path: Path) -> Tuple[List[MatchHit], dict]:
        """Scan one file. Parse errors are contained; read errors are not."""
        stats = {"relevant": 0, "parsed": 0, "parse_errors": 0, "match_errors": 0}
        try:
            source = path.read_bytes()
        except OSError as e:
            raise ScanError(f"Cannot read {path}: {e}", path=str(path)) from e

        if not self._imports_library(source):
            logger.debug(f"  - {path}  (does not import {self.config.library_import_path})")
            return [], stats
        stats["relevant"] = 1

        try:
            tree = self.parser.parse(source, str(path))
        except SourceParseError as e:
            logger.warning(f"Skipping {path}: {e}")
            stats["parse_errors"] = 1
            return [], stats
        stats["parsed"] = 1

        hits: List[MatchHit] = []
        for node in walk_tree(tree.root_node):
            if node.type != "call_expression":
                continue
            try:
                hit = self._inspect_call(node, source, str(path))
            except Exception as e:
                logger.error(f"Error inspecting call at {path}:{node.start_point[0] + 1}: {e}")
                stats["match_errors"] += 1
                continue
            if hit is not None:
                hits.append(hit)

        logger.debug(f"  ✓ {path}  ({len(hits)} hits)")
        return hits, stats

    def _imports_library(self, source: bytes) -> bool:
        """Cheap tier: byte check, then the import prelude only."""
        if self._needle not in source:
            return False
        return self.config.library_import_path in self.parser.parse_imports(source)

    def _inspect_call(self, node, source: bytes, file_path: str) -> Optional[MatchHit]:
        """Recognize, extract and match a single call expression."""
        kind = recognize_constructor(node, source)
        if kind is None:
            return None

        opts = extract_opts(node, source)
        hit = self.matcher.match(opts, node_position(node, file_path))
        if hit is None:
            return None
        return dataclasses.replace(hit, kind=kind)
