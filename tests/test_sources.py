"""Tests for obstacle sources and ranked discovery."""

import json

import pytest

from jump_pathfinder.errors import MalformedSource, SourceUnavailable
from jump_pathfinder.level_format import write_level
from jump_pathfinder.obstacles import Obstacle
from jump_pathfinder.runner import run
from jump_pathfinder.sources import (
    CallableSource,
    ChainedSource,
    LevelFileSource,
    ReportSource,
    StaticSource,
)


class TestSimpleSources:
    def test_static(self, spike_obstacles):
        assert StaticSource(spike_obstacles).load() == spike_obstacles

    def test_static_empty_is_valid(self):
        assert StaticSource([]).load() == []

    def test_level_file(self, tmp_path, spike_obstacles):
        path = write_level(tmp_path / "level.txt", spike_obstacles)
        assert LevelFileSource(path).load() == spike_obstacles

    def test_level_file_missing(self, tmp_path):
        with pytest.raises(SourceUnavailable):
            LevelFileSource(tmp_path / "nope.txt").load()

    def test_callable(self, spike_obstacles):
        assert CallableSource("live", lambda: spike_obstacles).load() == spike_obstacles

    @pytest.mark.parametrize("value", [None, []])
    def test_callable_empty(self, value):
        with pytest.raises(SourceUnavailable) as excinfo:
            CallableSource("live", lambda: value).load()
        assert excinfo.value.reason == "no_objects"


class TestReportSource:
    def test_reads_saved_report(self, tmp_path, spike_obstacles):
        run(spike_obstacles, out_dir=tmp_path)
        loaded = ReportSource(tmp_path / "pathfinder_report.json").load()
        assert loaded == spike_obstacles

    def test_missing(self, tmp_path):
        with pytest.raises(SourceUnavailable):
            ReportSource(tmp_path / "missing.json").load()

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text("{\n  \"objects\": [\n")
        with pytest.raises(MalformedSource):
            ReportSource(path).load()

    def test_no_objects(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text(json.dumps({"success": False}))
        with pytest.raises(SourceUnavailable):
            ReportSource(path).load()

    def test_bad_object(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text(json.dumps({"objects": [{"type": "platform", "x": 0}]}))
        with pytest.raises(MalformedSource) as excinfo:
            ReportSource(path).load()
        assert excinfo.value.line_number == 1


class TestChainedSource:
    def test_first_success_wins(self, spike_obstacles, flat_obstacles):
        second = CallableSource("second", lambda: pytest.fail("should not be called"))
        chain = ChainedSource([StaticSource(spike_obstacles), second])
        assert chain.load() == spike_obstacles
        assert len(chain.attempts) == 1
        assert chain.selected is chain.sources[0]

    def test_falls_through_unavailable(self, tmp_path, flat_obstacles):
        chain = ChainedSource([
            CallableSource("live", lambda: None),
            LevelFileSource(tmp_path / "missing.txt"),
            StaticSource(flat_obstacles),
        ])
        assert chain.load() == flat_obstacles
        assert [a["ok"] for a in chain.attempts] == [False, False, True]
        assert chain.attempts[0]["reason"] == "no_objects"
        assert chain.attempts[1]["reason"] == "file_not_found"

    def test_malformed_is_fatal(self, tmp_path, flat_obstacles):
        bad = tmp_path / "bad.txt"
        bad.write_text("SPIKE,1\n")
        chain = ChainedSource([LevelFileSource(bad), StaticSource(flat_obstacles)])
        with pytest.raises(MalformedSource):
            chain.load()

    def test_all_fail(self, tmp_path):
        chain = ChainedSource([
            CallableSource("live", lambda: []),
            LevelFileSource(tmp_path / "missing.txt"),
        ])
        with pytest.raises(SourceUnavailable) as excinfo:
            chain.load()
        assert len(excinfo.value.diagnostics["attempts"]) == 2

    def test_reload_resets_attempts(self, flat_obstacles):
        chain = ChainedSource([CallableSource("live", lambda: None), StaticSource(flat_obstacles)])
        chain.load()
        chain.load()
        assert len(chain.attempts) == 2
