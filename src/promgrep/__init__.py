"""
promgrep: find where a Prometheus metric is declared in Go code.

Statically scans ``.go`` files for ``prometheus.New*`` / ``promauto.New*``
constructor calls, rebuilds each metric's registered name from its literal
``Namespace`` / ``Subsystem`` / ``Name`` options, and ranks declarations by
how well that name matches a query.

Quick start (programmatic API)::

    from promgrep import Promgrep

    client = Promgrep()
    hits = client.search("http_requests_total", path="./service")
    everything = client.search(path="./service")   # list all declarations

Quick start (CLI)::

    promgrep                          # list all metric declarations
    promgrep http_requests_total      # rank declarations by name match
"""

__version__ = "1.0.0"

# Primary public API: the Promgrep facade
from promgrep.client import Promgrep

# Configuration
from promgrep.core.config import MetricKind, PromgrepConfig

# Core data types that callers interact with
from promgrep.core.engine import MatchHit, ScanResult

# Exception hierarchy
from promgrep.exceptions import (
    ConfigError,
    PromgrepError,
    ScanError,
    SourceParseError,
)

__all__ = [
    "__version__",
    # Facade
    "Promgrep",
    # Config
    "PromgrepConfig",
    # Data types
    "MetricKind",
    "MatchHit",
    "ScanResult",
    # Exceptions
    "PromgrepError",
    "ConfigError",
    "ScanError",
    "SourceParseError",
]
