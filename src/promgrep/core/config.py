"""
promgrep Configuration Module

Centralized configuration for the promgrep scanner, plus the fixed table
of Prometheus constructor spellings the scanner recognizes.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

# =============================================================================
# Instance-Based Configuration
# =============================================================================

@dataclass
class PromgrepConfig:
    """
    Instance-based configuration for promgrep.

    Each ``PromgrepConfig`` is self-contained and is passed through the
    call stack, so tests and embedding code never touch global state.

    Create from environment variables::

        config = PromgrepConfig.from_env()

    Or with explicit values::

        config = PromgrepConfig(max_workers=4, log_level="DEBUG")
    """

    # ── File Discovery ────────────────────────────────────────────
    target_extensions: frozenset = frozenset((".go",))
    test_file_suffix: str = "_test.go"
    exclude_dirs: frozenset = frozenset((".git",))

    # ── Relevance Check ───────────────────────────────────────────
    library_import_path: str = "github.com/prometheus/client_golang/prometheus"
    """Files that do not import this path are skipped before the full parse."""

    # ── Scanning ──────────────────────────────────────────────────
    max_workers: int = 1  # 1 = strictly sequential

    # ── Logging ───────────────────────────────────────────────────
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # ── Factory ───────────────────────────────────────────────────

    @classmethod
    def from_env(cls) -> "PromgrepConfig":
        """Build a config snapshot from current environment variables.

        Reads :envvar:`PROMGREP_LOG_LEVEL`, :envvar:`PROMGREP_MAX_WORKERS`
        and :envvar:`PROMGREP_IMPORT_PATH`.
        """
        return cls(
            library_import_path=os.getenv(
                "PROMGREP_IMPORT_PATH",
                "github.com/prometheus/client_golang/prometheus",
            ),
            max_workers=int(os.getenv("PROMGREP_MAX_WORKERS", "1")),
            log_level=os.getenv("PROMGREP_LOG_LEVEL", "WARNING").upper(),
        )

    # ── Validation ────────────────────────────────────────────────

    def validate(self) -> bool:
        """
        Check the config for values the scanner cannot work with.

        Raises :class:`~promgrep.exceptions.ConfigError` on failure.
        """
        from promgrep.exceptions import ConfigError

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(
                f"Unknown log level '{self.log_level}'.\n"
                "  Set via: export PROMGREP_LOG_LEVEL=INFO"
            )
        if self.max_workers < 1:
            raise ConfigError(
                f"max_workers must be at least 1 (got {self.max_workers}).\n"
                "  Set via: export PROMGREP_MAX_WORKERS=4"
            )
        if not self.target_extensions:
            raise ConfigError("target_extensions must not be empty.")
        if not self.library_import_path:
            raise ConfigError("library_import_path must not be empty.")
        return True


# =============================================================================
# Recognition Table
# =============================================================================

class MetricKind(Enum):
    """The three instrument kinds the scanner reports."""

    GAUGE = "Gauge"
    HISTOGRAM = "Histogram"
    COUNTER = "Counter"

    def __str__(self) -> str:
        return self.value


class MetricSchema:
    """
    Constructor spellings recognized as metric declarations.

    Keys are the literal call-site spelling ``package.Function`` exactly as
    written in source; aliased imports are not resolved.  Vector and scalar
    constructors of the same kind map to the same :class:`MetricKind`.
    """

    CONSTRUCTORS = MappingProxyType({
        "prometheus.NewCounterVec": MetricKind.COUNTER,
        "prometheus.NewCounter": MetricKind.COUNTER,
        "prometheus.NewHistogramVec": MetricKind.HISTOGRAM,
        "prometheus.NewHistogram": MetricKind.HISTOGRAM,
        "prometheus.NewGaugeVec": MetricKind.GAUGE,
        "prometheus.NewGauge": MetricKind.GAUGE,
        "promauto.NewCounterVec": MetricKind.COUNTER,
        "promauto.NewCounter": MetricKind.COUNTER,
        "promauto.NewHistogramVec": MetricKind.HISTOGRAM,
        "promauto.NewHistogram": MetricKind.HISTOGRAM,
        "promauto.NewGaugeVec": MetricKind.GAUGE,
        "promauto.NewGauge": MetricKind.GAUGE,
    })

    # Option field reported alongside each hit
    HELP_FIELD = "Help"

