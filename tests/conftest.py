"""
Shared fixtures for the promgrep test suite.
"""

import sys
from pathlib import Path

import pytest

# Ensure the src/ directory is on the import path so that
# promgrep.core.config / promgrep.core.engine / etc. can be imported.
SRC_ROOT = Path(__file__).resolve().parent.parent / "src"
sys.path.insert(0, str(SRC_ROOT))


# =============================================================================
# Sample Go sources
# =============================================================================

# Line numbers matter: tests assert on the line of each constructor call.
METRICS_GO = """\
package metrics

import (
	"github.com/prometheus/client_golang/prometheus"
	"github.com/prometheus/client_golang/prometheus/promauto"
)

const namespace = "api"

var requestsTotal = prometheus.NewCounter(prometheus.CounterOpts{
	Name: "requests_total",
	Help: "Total requests.",
})

var latency = promauto.NewHistogramVec(prometheus.HistogramOpts{
	Namespace: "api",
	Subsystem: "http",
	Name:      "request_duration_seconds",
	Help:      "Request latency.",
	Buckets:   prometheus.DefBuckets,
}, []string{"code"})

var inflight = prometheus.NewGauge(prometheus.GaugeOpts{
	Namespace: namespace,
	Name:      "inflight_requests",
	Help:      "In-flight requests.",
})

var queueDepth = promauto.NewGauge(prometheus.GaugeOpts{
	Namespace: "worker",
	Name:      "queue_depth",
	Help:      "Jobs waiting.",
})

func init() {
	prometheus.MustRegister(requestsTotal)
}
"""

# Mentions the library only in a comment; never imports it.
UNRELATED_GO = """\
package other

// Mirrors github.com/prometheus/client_golang/prometheus naming.
import "fmt"

var ghost = prometheus.NewCounter(prometheus.CounterOpts{
	Name: "ghost_total",
})

func hello() { fmt.Println("hi") }
"""

BROKEN_GO = """\
package broken

import "github.com/prometheus/client_golang/prometheus"

var c = prometheus.NewCounter(prometheus.CounterOpts{Name: "broken_total"}
"""

TEST_FILE_GO = """\
package metrics

import "github.com/prometheus/client_golang/prometheus"

var testOnly = prometheus.NewCounter(prometheus.CounterOpts{Name: "test_only_total"})
"""


@pytest.fixture
def metrics_source() -> bytes:
    """Go file declaring four metrics with assorted option shapes."""
    return METRICS_GO.encode("utf-8")


@pytest.fixture
def go_project(tmp_path: Path) -> Path:
    """
    Temporary Go module: one metrics file, one unrelated file, one file
    with a syntax error, a test file and an excluded .git directory.
    """
    pkg = tmp_path / "pkg" / "metrics"
    pkg.mkdir(parents=True)
    (pkg / "metrics.go").write_text(METRICS_GO, encoding="utf-8")
    (pkg / "metrics_test.go").write_text(TEST_FILE_GO, encoding="utf-8")

    other = tmp_path / "internal" / "other"
    other.mkdir(parents=True)
    (other / "other.go").write_text(UNRELATED_GO, encoding="utf-8")
    (other / "README.md").write_text("prometheus.NewCounter\n", encoding="utf-8")

    broken = tmp_path / "broken"
    broken.mkdir()
    (broken / "broken.go").write_text(BROKEN_GO, encoding="utf-8")

    git = tmp_path / ".git"
    git.mkdir()
    (git / "hooks.go").write_text(METRICS_GO, encoding="utf-8")

    return tmp_path


@pytest.fixture
def recording_parser():
    """GoSourceParser that records the size of every buffer handed to tree-sitter."""
    from promgrep.core.engine import GoSourceParser

    class RecordingParser(GoSourceParser):
        def __init__(self):
            super().__init__()
            self.sizes = []

        def _get_parser(self):
            parser = super()._get_parser()
            sizes = self.sizes

            class _Recorder:
                def parse(self, source):
                    sizes.append(len(source))
                    return parser.parse(source)

            return _Recorder()

    return RecordingParser()
