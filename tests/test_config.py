"""
Tests for promgrep.core.config: PromgrepConfig, MetricKind, MetricSchema.
"""

import pytest
from promgrep.core.config import MetricKind, MetricSchema, PromgrepConfig
from promgrep.exceptions import ConfigError


# =============================================================================
# MetricSchema tests
# =============================================================================

class TestMetricSchema:
    """Verify the constructor recognition table."""

    def test_twelve_constructors(self):
        assert len(MetricSchema.CONSTRUCTORS) == 12

    def test_two_call_families(self):
        families = {spelling.split(".")[0] for spelling in MetricSchema.CONSTRUCTORS}
        assert families == {"prometheus", "promauto"}

    @pytest.mark.parametrize("family", ["prometheus", "promauto"])
    @pytest.mark.parametrize("base,kind", [
        ("Counter", MetricKind.COUNTER),
        ("Gauge", MetricKind.GAUGE),
        ("Histogram", MetricKind.HISTOGRAM),
    ])
    def test_vector_and_scalar_share_kind(self, family, base, kind):
        assert MetricSchema.CONSTRUCTORS[f"{family}.New{base}"] is kind
        assert MetricSchema.CONSTRUCTORS[f"{family}.New{base}Vec"] is kind

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            MetricSchema.CONSTRUCTORS["prometheus.NewSummary"] = MetricKind.GAUGE

    def test_summary_is_not_recognized(self):
        assert "prometheus.NewSummary" not in MetricSchema.CONSTRUCTORS


class TestMetricKind:

    def test_labels(self):
        assert [str(k) for k in MetricKind] == ["Gauge", "Histogram", "Counter"]

    def test_closed_enumeration(self):
        assert len(MetricKind) == 3


# =============================================================================
# PromgrepConfig tests
# =============================================================================

class TestPromgrepConfig:
    """Verify defaults, environment loading and validation."""

    def test_defaults(self):
        cfg = PromgrepConfig()
        assert cfg.target_extensions == frozenset({".go"})
        assert cfg.test_file_suffix == "_test.go"
        assert ".git" in cfg.exclude_dirs
        assert cfg.library_import_path == "github.com/prometheus/client_golang/prometheus"
        assert cfg.max_workers == 1

    def test_defaults_validate(self):
        assert PromgrepConfig().validate() is True

    def test_from_env_defaults(self, monkeypatch):
        for var in ("PROMGREP_LOG_LEVEL", "PROMGREP_MAX_WORKERS", "PROMGREP_IMPORT_PATH"):
            monkeypatch.delenv(var, raising=False)
        cfg = PromgrepConfig.from_env()
        assert cfg.log_level == "WARNING"
        assert cfg.max_workers == 1

    def test_from_env_overrides(self, monkeypatch):
        monkeypatch.setenv("PROMGREP_LOG_LEVEL", "debug")
        monkeypatch.setenv("PROMGREP_MAX_WORKERS", "8")
        monkeypatch.setenv("PROMGREP_IMPORT_PATH", "example.com/prometheus")
        cfg = PromgrepConfig.from_env()
        assert cfg.log_level == "DEBUG"
        assert cfg.max_workers == 8
        assert cfg.library_import_path == "example.com/prometheus"

    def test_unknown_log_level(self):
        with pytest.raises(ConfigError, match="log level"):
            PromgrepConfig(log_level="CHATTY").validate()

    def test_zero_workers(self):
        with pytest.raises(ConfigError, match="max_workers"):
            PromgrepConfig(max_workers=0).validate()

    def test_empty_extensions(self):
        with pytest.raises(ConfigError):
            PromgrepConfig(target_extensions=frozenset()).validate()

    def test_empty_import_path(self):
        with pytest.raises(ConfigError):
            PromgrepConfig(library_import_path="").validate()

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            PromgrepConfig(max_workers=-1).validate()
