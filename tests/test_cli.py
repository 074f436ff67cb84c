"""
CLI Tests

Runs piecetree_cli.main.main() with explicit argv and checks exit codes
and output for the verify, layer, empty-hash and config commands.
"""
import json

import pytest
import yaml

from fixtures import (
    EMPTY_HASH_LAYER_7,
    MALFORMED_PIECE_LAYERS,
    PIECE_LENGTH_4MIB,
    TAMPERED_PIECE_LAYERS,
    VALID_PIECE_LAYERS,
)

from piecetree_cli.main import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    create_parser,
    main,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "piecetree.yaml"
    path.write_text("merkle:\n  max_layer: 100\nlogging:\n  level: WARNING\n")
    return path


def _write_json(path, piece_layers, piece_length=PIECE_LENGTH_4MIB):
    doc = {"piece_layers": dict(piece_layers)}
    if piece_length is not None:
        doc["piece_length"] = piece_length
    path.write_text(json.dumps(doc))
    return path


class TestParser:
    """Argument parsing."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR
        assert "usage" in capsys.readouterr().out.lower()

    def test_negative_empty_hash_layer_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["empty-hash", "-1"])


class TestLayerCommand:
    """piecetree layer"""

    def test_valid_length(self, config_file, capsys):
        code = main(["-c", str(config_file), "layer", str(PIECE_LENGTH_4MIB)])

        assert code == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == "8"

    def test_invalid_length(self, config_file, capsys):
        code = main(["-c", str(config_file), "layer", "12345"])

        assert code == EXIT_VERIFICATION_FAILED
        assert "not 16 KiB times a power of two" in capsys.readouterr().err

    def test_json(self, config_file, capsys):
        code = main(["-c", str(config_file), "layer", "16384", "--json"])

        assert code == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out) == {
            "piece_length": 16384,
            "layer_number": 0,
            "valid": True,
        }


class TestEmptyHashCommand:
    """piecetree empty-hash"""

    def test_layer_seven(self, config_file, capsys):
        code = main(["-c", str(config_file), "empty-hash", "7"])

        assert code == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == EMPTY_HASH_LAYER_7

    def test_json(self, config_file, capsys):
        main(["-c", str(config_file), "empty-hash", "0", "--json"])

        assert json.loads(capsys.readouterr().out) == {"layer": 0, "hash": "00" * 32}


class TestVerifyCommand:
    """piecetree verify"""

    def test_valid_document(self, tmp_path, config_file, capsys):
        doc = _write_json(tmp_path / "layers.json", VALID_PIECE_LAYERS)

        code = main(["-c", str(config_file), "verify", str(doc), "--json"])
        summary = json.loads(capsys.readouterr().out)

        assert code == EXIT_SUCCESS
        assert summary["entries"] == 3
        assert summary["passed"] == 3
        assert summary["failed"] == 0
        assert "errors" not in summary

    def test_yaml_document(self, tmp_path, config_file, capsys):
        doc = tmp_path / "layers.yaml"
        doc.write_text(yaml.safe_dump({
            "piece_length": PIECE_LENGTH_4MIB,
            "piece_layers": dict(VALID_PIECE_LAYERS),
        }))

        code = main(["-c", str(config_file), "verify", str(doc)])

        assert code == EXIT_SUCCESS
        assert "passed: 3" in capsys.readouterr().out

    def test_tampered_document(self, tmp_path, config_file, capsys):
        doc = _write_json(tmp_path / "layers.json", TAMPERED_PIECE_LAYERS)

        code = main(["-c", str(config_file), "verify", str(doc), "--json"])
        summary = json.loads(capsys.readouterr().out)

        assert code == EXIT_VERIFICATION_FAILED
        assert summary["failed"] == 3
        assert len(summary["errors"]) == 3

    def test_malformed_document(self, tmp_path, config_file, capsys):
        doc = _write_json(tmp_path / "layers.json", MALFORMED_PIECE_LAYERS[:2])

        code = main(["-c", str(config_file), "verify", str(doc), "--json"])
        summary = json.loads(capsys.readouterr().out)

        assert code == EXIT_VERIFICATION_FAILED
        assert summary["failed"] == 2

    def test_undecodable_entry_fails_alone(self, tmp_path, config_file, capsys):
        layers = list(VALID_PIECE_LAYERS) + [("not base64!", "")]
        doc = _write_json(tmp_path / "layers.json", layers)

        code = main(["-c", str(config_file), "verify", str(doc), "--json", "--debug"])
        summary = json.loads(capsys.readouterr().out)

        assert code == EXIT_VERIFICATION_FAILED
        assert summary["entries"] == 4
        assert summary["passed"] == 3
        assert summary["failed"] == 1
        assert len(summary["errors"]) == 1
        assert summary["errors"][0].startswith("entry 3: Undecodable entry: Invalid base64")
        assert summary["checks"][-1]["check_id"] == "piece_layers.decode"

    def test_non_string_value_fails_alone(self, tmp_path, config_file, capsys):
        doc = tmp_path / "layers.yaml"
        doc.write_text(yaml.safe_dump({
            "piece_length": PIECE_LENGTH_4MIB,
            "piece_layers": {**dict(VALID_PIECE_LAYERS[:1]), "AAAA": 12345},
        }))

        code = main(["-c", str(config_file), "verify", str(doc), "--json"])
        summary = json.loads(capsys.readouterr().out)

        assert code == EXIT_VERIFICATION_FAILED
        assert summary["passed"] == 1
        assert "must be base64 strings" in summary["errors"][0]

    def test_piece_length_override(self, tmp_path, config_file, capsys):
        doc = _write_json(tmp_path / "layers.json", VALID_PIECE_LAYERS[1:2])

        code = main([
            "-c", str(config_file), "verify", str(doc),
            "--piece-length", str(2 * PIECE_LENGTH_4MIB), "--json",
        ])

        assert code == EXIT_VERIFICATION_FAILED
        assert json.loads(capsys.readouterr().out)["piece_length"] == 2 * PIECE_LENGTH_4MIB

    def test_debug_includes_checks(self, tmp_path, config_file, capsys):
        doc = _write_json(tmp_path / "layers.json", VALID_PIECE_LAYERS[:1])

        main(["-c", str(config_file), "verify", str(doc), "--json", "--debug"])
        summary = json.loads(capsys.readouterr().out)

        assert [c["check_id"] for c in summary["checks"]] == [
            "piece_layers.parse",
            "piece_layers.layer_number",
            "piece_layers.root",
        ]

    def test_missing_piece_length(self, tmp_path, config_file, capsys):
        doc = _write_json(tmp_path / "layers.json", VALID_PIECE_LAYERS, piece_length=None)

        code = main(["-c", str(config_file), "verify", str(doc)])

        assert code == EXIT_RUNTIME_ERROR
        assert "Piece length missing" in capsys.readouterr().err

    def test_missing_document(self, tmp_path, config_file, capsys):
        code = main(["-c", str(config_file), "verify", str(tmp_path / "nope.json")])

        assert code == EXIT_RUNTIME_ERROR
        assert "Document not found" in capsys.readouterr().err

    def test_configured_bound_applies(self, tmp_path, capsys):
        config = tmp_path / "tight.yaml"
        config.write_text("merkle:\n  max_layer: 9\n")
        doc = _write_json(tmp_path / "layers.json", VALID_PIECE_LAYERS[1:2])

        code = main(["-c", str(config), "--log-level", "ERROR", "verify", str(doc)])

        assert code == EXIT_VERIFICATION_FAILED


class TestConfigCommand:
    """piecetree config"""

    def test_show(self, config_file, capsys):
        code = main(["-c", str(config_file), "config", "--show"])

        assert code == EXIT_SUCCESS
        shown = json.loads(capsys.readouterr().out)
        assert shown["merkle"]["max_layer"] == 100
        assert shown["logging"]["level"] == "WARNING"

    def test_invalid_env_bound(self, config_file, monkeypatch, capsys):
        monkeypatch.setenv("PIECETREE_MAX_LAYER", "0")

        code = main(["-c", str(config_file), "config", "--show"])

        assert code == EXIT_RUNTIME_ERROR
        assert "max_layer must be positive" in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys):
        code = main(["-c", str(tmp_path / "missing.yaml"), "config", "--show"])

        assert code == EXIT_RUNTIME_ERROR
        assert "Error loading configuration" in capsys.readouterr().err
