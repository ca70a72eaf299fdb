from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

import emitkit.cli


def _combined_output(result) -> str:
    try:
        return result.stdout + result.stderr
    except ValueError:
        return result.stdout


def test_init_creates_project_config(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    result = runner.invoke(emitkit.cli.app, ["init"])

    assert result.exit_code == 0
    assert (tmp_path / ".emitkit_config" / "config.toml").is_file()


def test_init_twice_requires_force(isolated_env):
    runner = CliRunner()

    again = runner.invoke(emitkit.cli.app, ["init"])
    assert again.exit_code == 2

    forced = runner.invoke(emitkit.cli.app, ["init", "--force"])
    assert forced.exit_code == 0


def test_doctor_requires_project_config(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    result = runner.invoke(emitkit.cli.app, ["doctor"])

    assert result.exit_code == 2
    assert "emitkit init" in _combined_output(result)


def test_doctor_outputs_json(isolated_env):
    runner = CliRunner()
    result = runner.invoke(emitkit.cli.app, ["doctor"])

    assert result.exit_code == 0
    parsed = json.loads(result.stdout)
    assert parsed["dispatch_probe"] == "ok"
    assert "logs_active_file" in parsed


def test_doctor_text_format(isolated_env):
    runner = CliRunner()
    result = runner.invoke(emitkit.cli.app, ["doctor", "--format", "text", "--verbose"])

    assert result.exit_code == 0
    assert "Doctor Report" in result.stdout
    assert "dispatch_probe=ok" in result.stdout
    assert "first_pass=prepend_on,on,once" in result.stdout


def test_doctor_rejects_unknown_format(isolated_env):
    runner = CliRunner()
    result = runner.invoke(emitkit.cli.app, ["doctor", "--format", "yaml"])

    assert result.exit_code == 2
    assert "Unsupported format" in _combined_output(result)


def test_logs_shows_recent_records_after_doctor(isolated_env):
    runner = CliRunner()
    assert runner.invoke(emitkit.cli.app, ["doctor"]).exit_code == 0

    text_result = runner.invoke(emitkit.cli.app, ["logs", "--limit", "3"])
    assert text_result.exit_code == 0
    assert "event=doctor.probe" in text_result.stdout

    json_result = runner.invoke(emitkit.cli.app, ["logs", "--limit", "3", "--format", "json"])
    assert json_result.exit_code == 0
    rows = json.loads(json_result.stdout)
    assert [row["kind"] for row in rows] == ["doctor"]
    assert rows[0]["message"] == "dispatch probe ok"


def test_logs_on_fresh_project_reports_no_records(isolated_env):
    runner = CliRunner()
    result = runner.invoke(emitkit.cli.app, ["logs"])

    assert result.exit_code == 0
    assert "No log records yet" in result.stdout
