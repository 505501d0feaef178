"""
Tests for the promgrep command line (promgrep.cli.main).
"""

import json

import pytest
from click.testing import CliRunner

from promgrep.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


class TestCli:

    def test_list_all(self, runner, go_project):
        result = runner.invoke(cli, ["-d", str(go_project)])
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert len(lines) == 4
        assert lines[0].endswith("metrics.go:10    requests_total Counter: Total requests.")
        assert "queue_depth Gauge: Jobs waiting." in lines[3]

    def test_query(self, runner, go_project):
        result = runner.invoke(cli, ["-d", str(go_project), "requests"])
        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0].endswith("requests_total Counter score:58")
        assert lines[1].endswith("inflight_requests Gauge score:48")

    def test_no_hits_is_silent_success(self, runner, go_project):
        result = runner.invoke(cli, ["-d", str(go_project), "nothing_like_this"])
        assert result.exit_code == 0
        assert result.stdout == ""

    def test_json_format(self, runner, go_project):
        result = runner.invoke(cli, ["-d", str(go_project), "-f", "json", "queue_depth"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data[0]["qualified_name"] == "queue_depth"
        assert data[0]["kind"] == "Gauge"
        assert data[0]["score"] == 100

    def test_compact_format(self, runner, go_project):
        result = runner.invoke(cli, ["-d", str(go_project), "-f", "compact", "-n", "1"])
        assert result.exit_code == 0
        assert result.stdout.strip().endswith("metrics.go:10  requests_total")

    def test_min_score(self, runner, go_project):
        result = runner.invoke(cli, ["-d", str(go_project), "--min-score", "50", "requests"])
        assert result.exit_code == 0
        assert len(result.stdout.splitlines()) == 1

    def test_parallel_jobs(self, runner, go_project):
        sequential = runner.invoke(cli, ["-d", str(go_project)])
        parallel = runner.invoke(cli, ["-d", str(go_project), "-j", "3"])
        assert parallel.exit_code == 0
        assert parallel.stdout == sequential.stdout

    def test_missing_directory_exits_1(self, runner, tmp_path):
        result = runner.invoke(cli, ["-d", str(tmp_path / "missing")])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_jobs_exits_1(self, runner, go_project):
        result = runner.invoke(cli, ["-d", str(go_project), "-j", "0"])
        assert result.exit_code == 1
        assert "max_workers" in result.output

    def test_too_many_arguments(self, runner, go_project):
        result = runner.invoke(cli, ["-d", str(go_project), "a", "b"])
        assert result.exit_code != 0
