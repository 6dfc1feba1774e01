"""Tests for the validoctor CLI."""

import json

import pytest
from typer.testing import CliRunner

from validoctor import __version__
from validoctor.cli import app, load_checks

runner = CliRunner()


@pytest.fixture
def payload(tmp_path):
    """Write a JSON patient and return its path."""
    def write(data):
        path = tmp_path / "patient.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return write


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config discovery away from the developer's own .validoctor.json."""
    monkeypatch.chdir(tmp_path)


class TestLoadChecks:
    """Test check import references."""

    def test_single_check(self):
        checks = load_checks("patients:PAYLOAD_RULES")
        assert [c.name for c in checks] == ["payload"]

    def test_malformed_reference(self):
        import typer
        with pytest.raises(typer.BadParameter):
            load_checks("patients")

    def test_not_a_check(self):
        import typer
        with pytest.raises(typer.BadParameter):
            load_checks("patients:NOT_A_CHECK")


class TestExamineCommand:
    """Test the examine command."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"validoctor version {__version__}" in result.stdout

    def test_valid_payload(self, payload):
        path = payload({"name": "Granola", "reviewScores": [1, 5]})
        result = runner.invoke(app, ["examine", str(path), "--rules", "patients:PAYLOAD_RULES", "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"valid": True, "ailments": []}

    def test_invalid_payload_json(self, payload):
        path = payload({"name": "", "reviewScores": [1, 6, 3]})
        result = runner.invoke(app, ["examine", str(path), "-r", "patients:PAYLOAD_RULES", "-f", "json"])

        assert result.exit_code == 1
        report = json.loads(result.stdout)
        assert report["valid"] is False
        assert [(a["name"], a["field"]) for a in report["ailments"]] == [
            ("STRING_EMPTY", "name"),
            ("NUMBER_OUT_OF_RANGE", "reviewScores[1]"),
        ]
        assert report["ailments"][1]["params"]["index"] == 1

    def test_no_pedantic(self, payload):
        path = payload({"name": "", "reviewScores": [9]})
        result = runner.invoke(
            app, ["examine", str(path), "-r", "patients:PAYLOAD_RULES", "-f", "json", "--no-pedantic"]
        )

        assert result.exit_code == 1
        assert len(json.loads(result.stdout)["ailments"]) == 1

    def test_exceptional_reports_same_diagnosis(self, payload):
        path = payload({"name": "", "reviewScores": []})
        args = ["examine", str(path), "-r", "patients:PAYLOAD_RULES", "-f", "json"]

        plain = runner.invoke(app, args)
        exceptional = runner.invoke(app, args + ["--exceptional"])

        assert exceptional.exit_code == 1
        assert json.loads(exceptional.stdout) == json.loads(plain.stdout)

    def test_table_output(self, payload):
        path = payload({"name": " ", "reviewScores": []})
        result = runner.invoke(app, ["examine", str(path), "-r", "patients:PAYLOAD_RULES"])

        assert result.exit_code == 1
        assert "INVALID" in result.stdout
        assert "STRING_EMPTY" in result.stdout

    def test_config_file_traits(self, payload, tmp_path):
        (tmp_path / ".validoctor.json").write_text(json.dumps({"traits": {"pedantic": False}}), encoding="utf-8")
        path = payload({"name": "", "reviewScores": [9]})
        result = runner.invoke(app, ["examine", str(path), "-r", "patients:PAYLOAD_RULES", "-f", "json"])

        assert len(json.loads(result.stdout)["ailments"]) == 1

    def test_configuration_error(self, payload):
        path = payload({"name": "Granola"})
        result = runner.invoke(app, ["examine", str(path), "-r", "patients:MISSING_FIELD_RULES"])

        assert result.exit_code == 2
        assert "Configuration error" in result.stdout

    def test_missing_payload(self, tmp_path):
        result = runner.invoke(app, ["examine", str(tmp_path / "absent.json"), "-r", "patients:PAYLOAD_RULES"])
        assert result.exit_code == 1

    def test_invalid_format(self, payload):
        path = payload({"name": "Granola"})
        result = runner.invoke(app, ["examine", str(path), "-r", "patients:PAYLOAD_RULES", "-f", "xml"])
        assert result.exit_code == 1

    def test_unknown_module(self, payload):
        path = payload({"name": "Granola"})
        result = runner.invoke(app, ["examine", str(path), "-r", "no_such_module_here:RULES"])
        assert result.exit_code == 2
