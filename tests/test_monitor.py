"""Tests for the command-line glue."""

from __future__ import annotations

import pytest

from surgery_watcher import monitor
from surgery_watcher.errors import NotFoundError, WatcherError
from surgery_watcher.legend import Legend, LegendEntry
from surgery_watcher.status import PatientStatus


class TestChoose:
    def test_single_item_needs_no_prompt(self):
        def prompt(_):
            raise AssertionError("should not prompt")

        assert monitor.choose(["only"], "facility", str, prompt=prompt) == "only"

    def test_reasks_until_valid(self, capsys):
        answers = iter(["x", "9", "2"])
        picked = monitor.choose(["a", "b", "c"], "patient", str, prompt=lambda _: next(answers))
        assert picked == "b"
        assert "not a number between 1 and 3" in capsys.readouterr().out

    def test_empty(self):
        with pytest.raises(WatcherError):
            monitor.choose([], "facility", str)


class TestMain:
    def test_runs_watch_with_cli_overrides(self, tmp_path, monkeypatch):
        legend = Legend([LegendEntry("green", "white", "Case Complete")])
        seen = {}

        monkeypatch.setattr(monitor, "resolve_legend", lambda *a, **kw: legend)

        def fake_watch(facility_id, patient_id, **kw):
            seen.update(kw, facility_id=facility_id, patient_id=patient_id)
            assert kw["resolve"]() is legend
            return PatientStatus("345", "OR 4", status="Case Complete")

        monkeypatch.setattr(monitor, "watch", fake_watch)
        monitor.main(["-c", str(tmp_path / "none.yml"), "-f", "12", "-p", "345",
                      "-i", "5", "-x", "In Recovery", "--no-bell"])

        assert seen["facility_id"] == "12"
        assert seen["patient_id"] == "345"
        assert seen["poll_interval"] == 5
        assert seen["exit_statuses"] == ["In Recovery"]

    def test_watcher_errors_are_fatal(self, tmp_path, monkeypatch):
        def boom(*a, **kw):
            raise NotFoundError("no status for facility '12', patient '345'")

        monkeypatch.setattr(monitor, "resolve_legend", boom)
        with pytest.raises(SystemExit, match=r"\[FATAL\].*'345'"):
            monitor.main(["-c", str(tmp_path / "none.yml"), "-f", "12", "-p", "345"])

    def test_keyboard_interrupt(self, tmp_path, monkeypatch, capsys):
        def interrupt(*a, **kw):
            raise KeyboardInterrupt

        monkeypatch.setattr(monitor, "resolve_legend", interrupt)
        monitor.main(["-c", str(tmp_path / "none.yml"), "-f", "12", "-p", "345"])
        assert "Stopped by user" in capsys.readouterr().out
