"""
Tests for the command line entrypoint.
"""

import datetime
import json

import pytest
import structlog
import yaml

import main
from storyboard.ids import is_valid_scene_id

ID_X = "11111111-1111-4111-8111-111111111111"
ID_Y = "22222222-2222-4222-9222-222222222222"


@pytest.fixture
def existing_file(tmp_path):
    path = tmp_path / "existing.json"
    path.write_text(json.dumps({
        "title": "Launch video",
        "sections": [
            {"label": "Intro", "scenes": [{"id": ID_X, "title": "Hook", "voiceId": "voice-1"}]},
            {"label": "Body", "scenes": [{"id": ID_Y, "title": "Demo"}]},
        ],
    }))
    return path


@pytest.fixture
def new_file(tmp_path):
    path = tmp_path / "new.json"
    path.write_text(json.dumps([
        {"label": "Intro", "scenes": [{"title": "hook", "content": "Rewritten"}, {"title": "Teaser"}]},
    ]))
    return path


class TestMerge:
    """Test the merge command."""

    def test_merge_writes_output(self, existing_file, new_file, tmp_path):
        """Test that merge keeps ids and project metadata in the output file."""
        output = tmp_path / "merged.json"

        assert main.main(["merge", str(existing_file), str(new_file), "-o", str(output)]) == 0

        merged = json.loads(output.read_text())
        assert merged["title"] == "Launch video"
        scenes = merged["sections"][0]["scenes"]
        assert scenes[0] == {"id": ID_X, "title": "hook", "content": "Rewritten", "voiceId": "voice-1"}
        assert is_valid_scene_id(scenes[1]["id"])
        assert len(merged["sections"]) == 1

    def test_merge_writes_report(self, existing_file, new_file, tmp_path):
        """Test that merge writes a report listing matches and orphans."""
        output = tmp_path / "merged.json"
        report = tmp_path / "report.json"

        main.main(["merge", str(existing_file), str(new_file), "-o", str(output), "--report", str(report)])

        summary = json.loads(report.read_text())
        assert summary["orphans"] == [{"id": ID_Y, "title": "Demo"}]
        assert summary["matched"][0]["scene_id"] == ID_X

    def test_merge_to_stdout(self, existing_file, new_file, capsys):
        """Test that merge prints JSON to stdout without an output path."""
        assert main.main(["merge", str(existing_file), str(new_file)]) == 0

        merged = json.loads(capsys.readouterr().out)
        assert merged["sections"][0]["scenes"][0]["id"] == ID_X

    def test_merge_yaml_output(self, existing_file, new_file, tmp_path):
        """Test that merge writes YAML when the output suffix is .yaml."""
        output = tmp_path / "merged.yaml"

        main.main(["merge", str(existing_file), str(new_file), "-o", str(output)])

        merged = yaml.safe_load(output.read_text())
        assert merged["sections"][0]["scenes"][0]["id"] == ID_X


class TestNormalizeAndCheck:
    """Test the normalize and check commands."""

    def test_check_valid(self, existing_file, capsys):
        """Test that check exits with 0 for valid ids."""
        assert main.main(["check", str(existing_file)]) == 0
        assert "valid" in capsys.readouterr().out

    def test_check_invalid(self, tmp_path):
        """Test that check exits with 1 for invalid ids."""
        path = tmp_path / "broken.yaml"
        path.write_text(yaml.safe_dump({"sections": [{"label": "Intro", "scenes": [{"id": "scene-1"}]}]}))

        assert main.main(["check", str(path)]) == 1

    def test_normalize_then_check(self, tmp_path):
        """Test that a normalized snapshot passes check and keeps valid ids."""
        path = tmp_path / "broken.yaml"
        fixed = tmp_path / "fixed.yaml"
        path.write_text(yaml.safe_dump({"sections": [{"label": "Intro", "scenes": [{"id": "scene-1"}, {"id": ID_X}]}]}))

        assert main.main(["normalize", str(path), "-o", str(fixed)]) == 0
        assert main.main(["check", str(fixed)]) == 0

        scenes = yaml.safe_load(fixed.read_text())["sections"][0]["scenes"]
        assert scenes[0]["id"] != "scene-1"
        assert scenes[1]["id"] == ID_X


class TestApplyUpdate:
    """Test the apply-update command."""

    def test_apply_update(self, existing_file, tmp_path):
        """Test that apply-update merges the structure from a reply."""
        reply = tmp_path / "reply.txt"
        reply.write_text("Done!\n" + json.dumps({
            "type": "structure_update",
            "sections": [{"label": "Body", "scenes": [{"title": "Demo"}]}],
        }))
        output = tmp_path / "merged.json"

        assert main.main(["apply-update", str(existing_file), str(reply), "-o", str(output)]) == 0

        merged = json.loads(output.read_text())
        assert merged["sections"] == [{"label": "Body", "scenes": [{"title": "Demo", "id": ID_Y}]}]

    def test_regular_chat_reply(self, existing_file, tmp_path):
        """Test that apply-update exits with 1 for a regular chat reply."""
        reply = tmp_path / "reply.txt"
        reply.write_text("I like it as it is.")

        assert main.main(["apply-update", str(existing_file), str(reply)]) == 1


class TestErrors:
    """Test error exit codes."""

    def test_missing_file(self, tmp_path, capsys):
        """Test that a missing file exits with status 2."""
        assert main.main(["check", str(tmp_path / "missing.json")]) == 2
        assert "FILE_NOT_FOUND" in capsys.readouterr().err

    def test_unsupported_format(self, tmp_path, capsys):
        """Test that an unknown suffix exits with status 2."""
        path = tmp_path / "storyboard.txt"
        path.write_text("[]")

        assert main.main(["check", str(path)]) == 2
        assert "UNSUPPORTED_FORMAT" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        """Test that unparsable JSON exits with status 2."""
        path = tmp_path / "storyboard.json"
        path.write_text("{not json")

        assert main.main(["check", str(path)]) == 2
        assert "INVALID_INPUT" in capsys.readouterr().err

    def test_payload_without_sections(self, tmp_path, capsys):
        """Test that a payload without sections exits with status 2."""
        path = tmp_path / "storyboard.json"
        path.write_text(json.dumps({"title": "No sections"}))

        assert main.main(["check", str(path)]) == 2
        assert "INVALID_INPUT" in capsys.readouterr().err

    def test_invalid_utf8(self, tmp_path, capsys):
        """Test that undecodable bytes exit with status 2 instead of a traceback."""
        path = tmp_path / "storyboard.json"
        path.write_bytes(b'[{"label": "\xff", "scenes": []}]')

        assert main.main(["check", str(path)]) == 2
        assert "INVALID_INPUT" in capsys.readouterr().err

    def test_directory_path(self, tmp_path, capsys):
        """Test that a directory given as snapshot exits with status 2."""
        path = tmp_path / "storyboard.json"
        path.mkdir()

        assert main.main(["check", str(path)]) == 2
        assert "INVALID_INPUT" in capsys.readouterr().err

    def test_unwritable_output(self, existing_file, new_file, tmp_path, capsys):
        """Test that an output path in a missing directory exits with status 2."""
        output = tmp_path / "missing" / "merged.json"

        assert main.main(["merge", str(existing_file), str(new_file), "-o", str(output)]) == 2
        assert "INVALID_INPUT" in capsys.readouterr().err


class TestSnapshotFormats:
    """Test YAML and JSON conversion of snapshots."""

    @pytest.fixture
    def dated_files(self, tmp_path):
        existing = tmp_path / "existing.yaml"
        existing.write_text(
            "title: Launch video\n"
            "createdAt: 2024-01-01\n"
            "sections:\n"
            "- label: Intro\n"
            "  scenes:\n"
            f"  - id: {ID_X}\n"
            "    title: Hook\n"
        )
        new = tmp_path / "new.yaml"
        new.write_text(
            "- label: Intro\n"
            "  scenes:\n"
            "  - title: Hook\n"
            "    updatedAt: 2024-02-03\n"
            "    recordedAt: 2024-02-03 10:30:00\n"
        )
        return existing, new

    def test_yaml_dates_to_stdout(self, dated_files, capsys):
        """Test that YAML dates are written as ISO strings in JSON output."""
        existing, new = dated_files

        assert main.main(["merge", str(existing), str(new)]) == 0

        merged = json.loads(capsys.readouterr().out)
        assert merged["createdAt"] == "2024-01-01"
        scene = merged["sections"][0]["scenes"][0]
        assert scene["id"] == ID_X
        assert scene["updatedAt"] == "2024-02-03"
        assert scene["recordedAt"] == "2024-02-03T10:30:00"

    def test_yaml_dates_to_json_file(self, dated_files, tmp_path):
        """Test that a JSON output file is complete when the input holds dates."""
        existing, new = dated_files
        output = tmp_path / "merged.json"

        assert main.main(["merge", str(existing), str(new), "-o", str(output)]) == 0

        merged = json.loads(output.read_text())
        assert merged["sections"][0]["scenes"][0]["updatedAt"] == "2024-02-03"

    def test_yaml_dates_round_trip_to_yaml(self, dated_files, tmp_path):
        """Test that YAML output keeps dates as YAML timestamps."""
        existing, new = dated_files
        output = tmp_path / "merged.yaml"

        assert main.main(["merge", str(existing), str(new), "-o", str(output)]) == 0

        merged = yaml.safe_load(output.read_text())
        assert merged["createdAt"] == datetime.date(2024, 1, 1)

    def test_render_output_handles_dates(self):
        """Test that render_output serializes dates and datetimes to JSON."""
        text = main.render_output({"day": datetime.date(2024, 1, 1), "at": datetime.datetime(2024, 1, 1, 9, 0)})
        assert json.loads(text) == {"day": "2024-01-01", "at": "2024-01-01T09:00:00"}


class TestConfigureLogging:
    """Test configure_logging function."""

    def test_configures_structlog(self):
        """Test that configure_logging configures structlog."""
        main.configure_logging("warning")
        assert structlog.is_configured()
