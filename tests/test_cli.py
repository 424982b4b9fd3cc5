"""Tests for the command line interface."""

import json

import pytest

from webform_migration.cli import main


@pytest.fixture
def config_file(tmp_path, legacy_dump):
    dump = tmp_path / "dump.json"
    dump.write_text(json.dumps(legacy_dump))

    config = tmp_path / "config.json"
    config.write_text(json.dumps({
        "source_file": str(dump),
        "output_dir": str(tmp_path / "out"),
        "state_file": str(tmp_path / "out" / "state.json"),
    }))
    return str(config)


def test_run(config_file, tmp_path, capsys):
    assert main(["run", "--config", config_file]) == 0

    output = capsys.readouterr().out
    assert "MIGRATION COMPLETE" in output
    assert "Watermark: 0 -> 13" in output
    assert "No errors during import!" in output
    assert (tmp_path / "out" / "forms" / "webform_1.json").exists()


def test_simulate(config_file, tmp_path, capsys):
    assert main(["run", "--config", config_file, "--simulate", "--form", "1"]) == 0

    assert "SIMULATION COMPLETE" in capsys.readouterr().out
    assert not (tmp_path / "out" / "state.json").exists()


def test_unknown_form_exits_non_zero(config_file, capsys):
    assert main(["run", "--config", config_file, "--form", "99"]) == 1
    assert "Could not find any webform with id 99" in capsys.readouterr().out


def test_preview_to_file(config_file, tmp_path):
    output = tmp_path / "preview.json"
    assert main(["preview", "--config", config_file, "--form", "1", "--output", str(output)]) == 0

    preview = json.loads(output.read_text())
    assert preview["form_identifier"] == "webform_1"
    assert list(preview["elements"]) == ["name", "details", "topic"]


def test_watermark(config_file, capsys):
    assert main(["watermark", "--config", config_file, "--set", "42"]) == 0
    assert main(["watermark", "--config", config_file]) == 0

    assert capsys.readouterr().out.splitlines()[-1] == "Last imported submission id: 42"


def test_no_command_prints_help(capsys):
    assert main([]) == 1
