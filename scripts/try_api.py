#!/usr/bin/env python3
"""
Manually try the promgrep Python API against a Go repository.

Scans a directory, prints run statistics, lists a few declarations and
runs example name queries so you can see scan() and search() in action.

Usage:
  python scripts/try_api.py /path/to/go/project
  python scripts/try_api.py /path/to/go/project http_requests_total grpc_server
  python scripts/try_api.py . --jobs 4

Requirements:
  - promgrep installed (pip install -e . from project root)
"""

import sys
from pathlib import Path

# Use src layout so "promgrep" is importable when run from the repo
_src = Path(__file__).resolve().parent.parent / "src"
if _src.exists() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))


def main() -> None:
    import argparse
    from promgrep import Promgrep, PromgrepConfig, ScanError

    parser = argparse.ArgumentParser(
        description="Try the promgrep API: scan a Go project and run example queries.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        type=Path,
        help="Go project root to scan (default: current directory)",
    )
    parser.add_argument(
        "queries",
        nargs="*",
        help="Metric names to search for (default: names taken from the census)",
    )
    parser.add_argument(
        "--jobs",
        type=int,
        default=1,
        help="Files to scan in parallel",
    )
    args = parser.parse_args()

    client = Promgrep(config=PromgrepConfig(max_workers=args.jobs))
    root = args.path.resolve()

    # ── Census ────────────────────────────────────────────────────
    print("=" * 60)
    print("  STEP 1: Scan (list all declarations)")
    print("=" * 60)
    print(f"  Path: {root}\n")

    try:
        result = client.scan(path=root, show_progress=True)
    except ScanError as e:
        print(f"  Error: {e}")
        sys.exit(1)

    print(f"\n  Result: {result.files_scanned} files scanned, "
          f"{result.files_relevant} import the client library, "
          f"{len(result.hits)} declarations, "
          f"{result.parse_errors} parse errors.")
    for hit in result.hits[:10]:
        print(f"    {hit.path}:{hit.line}  {hit.qualified_name}  ({hit.kind})")
    if len(result.hits) > 10:
        print(f"    ... {len(result.hits) - 10} more")

    # ── Queries ───────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("  STEP 2: Search by name")
    print("=" * 60)

    queries = args.queries or [h.qualified_name for h in result.hits[:3] if h.qualified_name]
    if not queries:
        print("  (no declarations found, nothing to query)")
        return

    for q in queries:
        print(f"\n  Query: \"{q}\"")
        hits = client.search(q, path=root, max_results=3)
        for i, h in enumerate(hits, 1):
            print(f"    {i}. {h.qualified_name} @ {h.path}:{h.line}  "
                  f"[{h.kind}]  score={h.score}")
        if not hits:
            print("    (no hits)")

    print("\n" + "=" * 60)
    print("  Done. Try your own queries in Python:")
    print("    from promgrep import Promgrep")
    print(f"    Promgrep().search('your_metric_name', path=r'{root}')")
    print("=" * 60)


if __name__ == "__main__":
    main()
