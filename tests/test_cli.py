"""Tests für die Kommandozeile (click)."""

import json

import pytest
from click.testing import CliRunner

from main import cli

WEEK = "2025-10-15"


@pytest.fixture
def runner(tmp_path, monkeypatch):
    """CLI in leerem Arbeitsverzeichnis mit Config und Demo-Daten."""
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()
    assert runner.invoke(cli, ["setup"]).exit_code == 0
    result = runner.invoke(cli, ["demo", "--seed", "1", "--week", WEEK])
    assert result.exit_code == 0, result.output
    return runner


class TestCli:
    def test_setup_writes_config(self, runner, tmp_path):
        assert (tmp_path / "config" / "app_config.yaml").exists()
        assert (tmp_path / "output" / "timetable.json").exists()

    def test_setup_twice_keeps_config(self, runner):
        result = runner.invoke(cli, ["setup"])
        assert "existiert bereits" in result.output

    def test_config_show(self, runner):
        result = runner.invoke(cli, ["config", "show"])
        assert result.exit_code == 0
        assert "Muster-Schule" in result.output

    def test_validate(self, runner):
        result = runner.invoke(cli, ["validate"])
        assert result.exit_code == 0
        assert "KONSISTENT" in result.output

    def test_week_show(self, runner):
        result = runner.invoke(cli, ["week", "show", "5a", "--week", WEEK])
        assert result.exit_code == 0
        assert "KW 42" in result.output

    def test_week_diff_json(self, runner):
        result = runner.invoke(cli, ["week", "diff", "5a", "--week", WEEK, "--json"])
        assert result.exit_code == 0
        diff = json.loads(result.stdout)
        assert diff["week_start_date"] == "2025-10-13"
        assert len(diff["cancelled"]) == 1

    def test_stable_conflict_exits_with_error(self, runner):
        """Die 1. Stunde am Montag ist im Demo-Stammplan immer belegt."""
        result = runner.invoke(cli, ["stable", "add", "5a", "5a-Ma", "1", "08:00", "08:45"])
        assert result.exit_code == 1
        assert "Überschneidung" in result.output

    def test_unknown_class(self, runner):
        result = runner.invoke(cli, ["stable", "show", "9z"])
        assert result.exit_code == 1
        assert "nicht gefunden" in result.output

    def test_week_add_and_slot(self, runner):
        result = runner.invoke(cli, ["week", "add", "5a", "5a-Mu", "6", "09:00", "09:45",
                                     "--week", WEEK, "--note", "Konzert"])
        assert result.exit_code == 0, result.output
        result = runner.invoke(cli, ["slot", "5a", "6", "09:10", "--week", WEEK])
        assert "Musik" in result.output

    def test_week_export(self, runner, tmp_path):
        target = tmp_path / "woche.xlsx"
        result = runner.invoke(cli, ["week", "export", "5a", "--week", WEEK, "-o", str(target)])
        assert result.exit_code == 0, result.output
        assert target.exists()

    def test_week_add_without_end_uses_lesson_duration(self, runner):
        """Ohne END gilt die Standarddauer aus dem Stundenraster (45 min)."""
        result = runner.invoke(cli, ["week", "add", "5a", "5a-Mu", "6", "09:00", "--week", WEEK])
        assert result.exit_code == 0, result.output
        assert "09:00–09:45" in result.output

    def test_add_without_end_rejects_bad_start(self, runner):
        result = runner.invoke(cli, ["week", "add", "5a", "5a-Mu", "6", "9 Uhr", "--week", WEEK])
        assert result.exit_code == 2
