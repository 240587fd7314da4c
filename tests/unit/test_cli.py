"""Unit tests for CLI argument handling."""

import json

import pytest

from timex_pipeline.cli import (
    build_parser,
    client_config_from_args,
    main,
    server_config_from_args,
    tagger_config_from_args,
)


class TestParser:
    def test_legacy_option_names(self):
        args = build_parser().parse_args(["tag", "--clearFeatures", "docstart", "--outputFormat", "conll02"])
        assert args.clear_features == "docstart"
        assert args.output_format == "conll02"

    def test_log_level_case_insensitive(self):
        assert build_parser().parse_args(["--log", "debug", "tag"]).log == "DEBUG"

    def test_unknown_log_level(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--log", "LOUD", "tag"])
        assert exc_info.value.code == 2
        assert "invalid choice" in capsys.readouterr().err


class TestTaggerConfigFromArgs:
    """Command line options layered over an optional config file."""

    def test_defaults(self):
        config = tagger_config_from_args(build_parser().parse_args(["tag"]))
        assert config.labeler.name == "pattern"
        assert config.output_format == "naf"
        assert config.clear_features == "no"

    def test_flags(self):
        args = build_parser().parse_args(
            ["tag", "-m", "lexicon.json", "-l", "es", "--clear-features", "yes", "--target", "entity"]
        )
        config = tagger_config_from_args(args)
        assert config.model == "lexicon.json"
        assert config.language == "es"
        assert config.clear_features == "yes"
        assert config.target == "entity"

    def test_config_file(self, temp_config_file):
        config = tagger_config_from_args(build_parser().parse_args(["tag", "--config", temp_config_file]))
        assert config.output_format == "conll02"
        assert config.model == "builtin"

    def test_flags_override_file(self, temp_config_file):
        args = build_parser().parse_args(["tag", "--config", temp_config_file, "-o", "naf"])
        assert tagger_config_from_args(args).output_format == "naf"

    def test_other_labeler_drops_file_params(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"labeler": {"name": "pattern", "params": {"model": "x.json"}}}))
        args = build_parser().parse_args(["tag", "--config", str(path), "--labeler", "spacy"])
        config = tagger_config_from_args(args)
        assert config.labeler.name == "spacy"
        assert config.labeler.params == {}

    def test_nested_tagger_section(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"port": 1, "tagger": {"output_format": "conll02"}}))
        config = tagger_config_from_args(build_parser().parse_args(["tag", "--config", str(path)]))
        assert config.output_format == "conll02"


class TestServerConfigFromArgs:
    """Server settings from the command line and the config file."""

    def test_defaults(self):
        config = server_config_from_args(build_parser().parse_args(["server", "-p", "2020"]))
        assert config.port == 2020
        assert config.host == "0.0.0.0"
        assert config.isolation == "shared"
        assert config.tagger.output_format == "naf"

    def test_from_file(self, tmp_path):
        path = tmp_path / "server.json"
        path.write_text(
            json.dumps(
                {
                    "port": 5005,
                    "host": "127.0.0.1",
                    "isolation": "connection",
                    "tagger": {"clear_features": "docstart", "output_format": "conll02"},
                }
            )
        )
        config = server_config_from_args(build_parser().parse_args(["server", "--config", str(path)]))
        assert (config.port, config.host, config.isolation) == (5005, "127.0.0.1", "connection")
        assert config.tagger.clear_features == "docstart"
        assert config.tagger.output_format == "conll02"

    def test_flags_override_file(self, tmp_path):
        path = tmp_path / "server.json"
        path.write_text(json.dumps({"port": 5005, "output_format": "timeml"}))
        args = build_parser().parse_args(
            ["server", "--config", str(path), "-p", "6006", "--isolation", "connection", "-o", "naf"]
        )
        config = server_config_from_args(args)
        assert config.port == 6006
        assert config.isolation == "connection"
        assert config.tagger.output_format == "naf"

    def test_port_required(self, capsys):
        assert main(["server"]) == 1
        assert "requires a port" in capsys.readouterr().err


class TestClientConfigFromArgs:
    def test_defaults(self):
        config = client_config_from_args(build_parser().parse_args(["client", "-p", "2020"]))
        assert (config.port, config.host, config.timeout) == (2020, "localhost", None)

    def test_from_file(self, tmp_path):
        path = tmp_path / "client.json"
        path.write_text(json.dumps({"port": 7007, "host": "tagger.local", "timeout": 2.5}))
        args = build_parser().parse_args(["client", "--config", str(path), "--host", "127.0.0.1"])
        config = client_config_from_args(args)
        assert (config.port, config.host, config.timeout) == (7007, "127.0.0.1", 2.5)

    def test_port_required(self, capsys):
        assert main(["client"]) == 1
        assert "requires a port" in capsys.readouterr().err
