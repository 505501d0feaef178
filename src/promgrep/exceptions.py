"""
promgrep Exception Hierarchy

Structured exceptions for the scanner, the facade and the CLI.  Each type
maps to one failure mode so callers can tell a broken file apart from a
scan that cannot run at all.

Usage::

    from promgrep.exceptions import PromgrepError, ScanError

    try:
        hits = client.search("http_requests_total", path="./svc")
    except ScanError as exc:
        print(f"Cannot scan {exc.path}: {exc}")
    except PromgrepError as exc:
        print(f"promgrep error: {exc}")
"""


class PromgrepError(Exception):
    """Base exception for all promgrep errors."""


class ConfigError(PromgrepError, ValueError):
    """Configuration is invalid (e.g. unknown log level, no workers).

    Inherits from ``ValueError`` so ``PromgrepConfig.validate()`` failures
    can be caught either way.
    """


class SourceParseError(PromgrepError):
    """A single Go source file could not be parsed.

    Scoped to one file: the scanner reports it and moves on.
    """

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class ScanError(PromgrepError):
    """The scan itself cannot proceed (root not walkable, file unreadable)."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path
