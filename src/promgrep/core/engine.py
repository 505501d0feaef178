"""
promgrep Core Engine

Go source analysis for Prometheus metric declarations.  Uses tree-sitter
with the Go grammar to find constructor calls, pull literal option fields
out of their ``*Opts`` composite literal, and rebuild the metric name the
client library itself would register.
"""

import logging
import os
import re
import threading
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

import tree_sitter
import tree_sitter_go

from promgrep.core.config import MetricKind, MetricSchema, PromgrepConfig
from promgrep.exceptions import ScanError, SourceParseError

# Application code (the CLI) is responsible for configuring logging.
logger = logging.getLogger(__name__)

# Flat mapping of option field name to its decoded literal value.
PromOpts = Dict[str, str]


# =============================================================================
# Data Models
# =============================================================================

@dataclass(frozen=True)
class SourcePosition:
    """Where a declaration starts: file as walked, 1-based line."""
    filename: str
    line: int


@dataclass(frozen=True)
class MatchHit:
    """One metric declaration that satisfied the active matcher.

    :attr:`score` is ``-1`` for list-all runs and in ``[0, 100]`` otherwise,
    bigger is a better match and 100 is an exact one.
    """
    score: int
    path: str
    line: int
    qualified_name: str
    help: str = ""
    kind: Optional[MetricKind] = None
    """Stamped by the scanner from the constructor table."""

    def __lt__(self, other):
        return self.score > other.score  # Higher score = better

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict; kind is rendered as its label."""
        data = asdict(self)
        data["kind"] = str(self.kind) if self.kind is not None else ""
        return data


@dataclass
class ScanResult:
    """Ranked hits plus the statistics of the run that produced them."""
    files_scanned: int = 0
    files_relevant: int = 0
    files_parsed: int = 0
    parse_errors: int = 0
    match_errors: int = 0
    root_dir: str = ""
    query: Optional[str] = None
    hits: List[MatchHit] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict for API/agent pipelines."""
        data = asdict(self)
        data["hits"] = [h.to_dict() for h in self.hits]
        return data


# =============================================================================
# Source Parser Adapter (tree-sitter, Go grammar)
# =============================================================================

GO_LANGUAGE = tree_sitter.Language(tree_sitter_go.language())

# Top-level nodes that may precede or sit between import declarations
_PRELUDE_NODES = frozenset(("package_clause", "import_declaration", "comment"))

# First top-level declaration that ends the import prelude (gofmt keeps
# these at column 0)
_PRELUDE_END = re.compile(rb"^(?:func|var|const|type)\b", re.MULTILINE)


def node_text(node: tree_sitter.Node, source: bytes) -> str:
    """Return the exact source text spanned by *node*."""
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


class GoSourceParser:
    """
    Two-tier Go parser.

    :meth:`parse_imports` reads only the import prelude of a file and is
    used to decide whether a file is worth a full parse; :meth:`parse`
    returns the complete syntax tree and rejects files with syntax errors.

    tree-sitter parsers are not safe to share between threads, so each
    thread gets its own parser, created on first use.
    """

    def __init__(self):
        self._local = threading.local()

    def _get_parser(self) -> tree_sitter.Parser:
        """Return a thread-local parser, creating it on first use."""
        if getattr(self._local, "parser", None) is None:
            self._local.parser = tree_sitter.Parser(GO_LANGUAGE)
        return self._local.parser

    def parse_imports(self, source: bytes) -> List[str]:
        """Return the decoded import paths declared in the file's prelude.

        Stops at the first top-level declaration that is not a package
        clause, import declaration or comment, since Go allows imports
        nowhere else.  Only the bytes before the first top-level ``func``,
        ``var``, ``const`` or ``type`` line are handed to tree-sitter; if
        that cut lands somewhere the grammar cannot recover from (inside a
        block comment, say) the whole file is read instead.
        """
        prelude = source
        m = _PRELUDE_END.search(source)
        if m is not None:
            prelude = source[:m.start()]
        tree = self._get_parser().parse(prelude)
        if tree.root_node.has_error and len(prelude) < len(source):
            tree = self._get_parser().parse(source)
        paths: List[str] = []
        for top in tree.root_node.children:
            if top.type not in _PRELUDE_NODES:
                break
            if top.type != "import_declaration":
                continue
            for spec in _iter_import_specs(top):
                path_node = spec.child_by_field_name("path")
                if path_node is not None:
                    paths.append(unquote(node_text(path_node, source)))
        return paths

    def parse(self, source: bytes, file_path: str = "<string>") -> tree_sitter.Tree:
        """Parse the whole file.

        Raises :class:`SourceParseError` when tree-sitter had to recover
        from a syntax error anywhere in the file.
        """
        tree = self._get_parser().parse(source)
        if tree.root_node.has_error:
            line = _first_error_line(tree.root_node)
            raise SourceParseError(f"{file_path}:{line}: syntax error", path=file_path)
        return tree


def _iter_import_specs(decl: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Yield every ``import_spec`` of a single or grouped import declaration."""
    for child in decl.named_children:
        if child.type == "import_spec":
            yield child
        elif child.type == "import_spec_list":
            for spec in child.named_children:
                if spec.type == "import_spec":
                    yield spec


def _first_error_line(root: tree_sitter.Node) -> int:
    """1-based line of the first ERROR or MISSING node (document order)."""
    for node in walk_tree(root):
        if node.type == "ERROR" or node.is_missing:
            return node.start_point[0] + 1
    return root.start_point[0] + 1


def walk_tree(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Depth-first, pre-order traversal in source order.

    Iterative so deeply nested files cannot hit the recursion limit.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


# =============================================================================
# Literal Decoding & Option Extraction
# =============================================================================

# tree-sitter-go node types for Go basic literals
_BASIC_LITERALS = frozenset((
    "interpreted_string_literal",
    "raw_string_literal",
    "int_literal",
    "float_literal",
    "imaginary_literal",
    "rune_literal",
))


def unquote(val: str) -> str:
    """Strip surrounding double quotes; anything else is returned unchanged.

    No escape processing: the inner text is returned as written.
    """
    n = len(val)
    if n < 2 or val[0] != '"' or val[n - 1] != '"':
        return val
    return val[1:n - 1]


def _unwrap_element(node: Optional[tree_sitter.Node]) -> Optional[tree_sitter.Node]:
    """Return the expression inside a ``literal_element`` wrapper, if any."""
    if node is not None and node.type == "literal_element":
        return node.named_children[0] if node.named_children else None
    return node


def _keyed_parts(element: tree_sitter.Node):
    """Return ``(key, value)`` nodes of a ``keyed_element``."""
    key = element.child_by_field_name("key")
    value = element.child_by_field_name("value")
    if key is None or value is None:
        parts = [c for c in element.named_children if c.type != "comment"]
        if len(parts) != 2:
            return None, None
        key, value = parts
    return _unwrap_element(key), _unwrap_element(value)


def first_argument(call: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """First argument of a call expression, or None for ``f()``."""
    args = call.child_by_field_name("arguments")
    if args is None:
        return None
    for child in args.named_children:
        if child.type != "comment":
            return child
    return None


def extract_opts(call: tree_sitter.Node, source: bytes) -> PromOpts:
    """
    Collect literal-valued option fields from a constructor call.

    Only ``Key: <basic literal>`` elements of a composite literal passed as
    the first argument are recovered; everything else (constants, function
    calls, concatenation, ``&Opts{...}``) is skipped without error.
    """
    opts: PromOpts = {}
    arg = first_argument(call)
    if arg is None or arg.type != "composite_literal":
        return opts

    body = arg.child_by_field_name("body")
    if body is None:
        return opts

    for element in body.named_children:
        if element.type != "keyed_element":
            continue
        key, value = _keyed_parts(element)
        if key is None or value is None:
            continue
        if key.type not in ("identifier", "field_identifier"):
            continue
        if value.type not in _BASIC_LITERALS:
            continue
        opts[node_text(key, source)] = unquote(node_text(value, source))
    return opts


# =============================================================================
# Qualified Name & Constructor Recognition
# =============================================================================

def qualified_metric_name(opts: PromOpts) -> str:
    """
    Build the metric name the way the client library joins its options.

    Namespace is only prefixed when Subsystem is also set: a
    Namespace-only declaration yields the bare Name.
    """
    namespace = opts.get("Namespace", "")
    subsystem = opts.get("Subsystem", "")
    qmn = opts.get("Name", "")

    if subsystem != "":
        qmn = subsystem + "_" + qmn
    if namespace != "" and subsystem != "":
        qmn = namespace + "_" + qmn
    return qmn


def call_expr_literal(call: tree_sitter.Node, source: bytes) -> str:
    """Return the ``ident.Member`` spelling of a call, or "" for other shapes."""
    func = call.child_by_field_name("function")
    if func is None or func.type != "selector_expression":
        return ""
    operand = func.child_by_field_name("operand")
    member = func.child_by_field_name("field")
    if operand is None or member is None or operand.type != "identifier":
        return ""
    return node_text(operand, source) + "." + node_text(member, source)


def recognize_constructor(call: tree_sitter.Node, source: bytes) -> Optional[MetricKind]:
    """Map a call expression to its metric kind, or None if not a constructor."""
    return MetricSchema.CONSTRUCTORS.get(call_expr_literal(call, source))


def node_position(node: tree_sitter.Node, file_path: str) -> SourcePosition:
    """Position of *node* as a 1-based line in *file_path*."""
    return SourcePosition(filename=file_path, line=node.start_point[0] + 1)


# =============================================================================
# Directory Discovery
# =============================================================================

def scan_directory(root_path: Path, config: PromgrepConfig | None = None) -> List[Path]:
    """
    Recursively collect Go source files under *root_path*.

    Excluded directories are pruned in place so ``os.walk`` never enters
    them.  Test files (``*_test.go``) are left out.  Paths keep the
    spelling of *root_path*, so a root of ``.`` yields ``pkg/metrics.go``.

    Raises :class:`ScanError` if the root is not a directory or any part of
    the tree cannot be listed.
    """
    cfg = config or PromgrepConfig.from_env()
    root = Path(root_path)
    if not root.is_dir():
        raise ScanError(f"Not a directory: {root}", path=str(root))

    def _on_walk_error(exc: OSError) -> None:
        raise ScanError(f"Cannot walk {exc.filename}: {exc.strerror}",
                        path=str(exc.filename)) from exc

    source_files: List[Path] = []
    exclude = cfg.exclude_dirs
    extensions = cfg.target_extensions

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
        dirnames[:] = [d for d in dirnames if d not in exclude]

        for fname in filenames:
            _, ext = os.path.splitext(fname)
            if ext not in extensions:
                continue
            if cfg.test_file_suffix and fname.endswith(cfg.test_file_suffix):
                continue
            source_files.append(Path(dirpath) / fname)

    source_files.sort()
    logger.debug(f"Found {len(source_files)} Go source files under {root}")
    return source_files
