"""Unit tests for configuration parsing."""

import pytest

from timex_pipeline.config import (
    ClientConfig,
    ComponentConfig,
    ServerConfig,
    TaggerConfig,
    parse_port,
)
from timex_pipeline.errors import ConfigError


class TestComponentConfig:
    """Tests for ComponentConfig."""

    def test_create_with_name_only(self):
        config = ComponentConfig(name="pattern")
        assert config.name == "pattern"
        assert config.params == {}

    def test_from_dict(self):
        config = ComponentConfig.from_dict({"name": "spacy", "params": {"model": "en_core_web_sm"}})
        assert config.name == "spacy"
        assert config.params["model"] == "en_core_web_sm"

    def test_from_string(self):
        assert ComponentConfig.from_dict("naf") == ComponentConfig(name="naf")


class TestTaggerConfig:
    """Tests for TaggerConfig."""

    def test_defaults(self):
        config = TaggerConfig.from_dict({})
        assert config.labeler.name == "pattern"
        assert config.reader.name == "auto"
        assert config.language is None
        assert config.clear_features == "no"
        assert config.output_format == "naf"
        assert config.target == "timex"
        assert config.model is None

    def test_from_dict_full(self):
        config = TaggerConfig.from_dict(
            {
                "labeler": {"name": "spacy", "params": {"model": "en_core_web_sm"}},
                "reader": {"name": "text"},
                "language": "es",
                "clear_features": "DOCSTART",
                "output_format": "conll02",
                "target": "entity",
            }
        )
        assert config.labeler.name == "spacy"
        assert config.model == "en_core_web_sm"
        assert config.reader.name == "text"
        assert config.language == "es"
        assert config.clear_features == "docstart"
        assert config.output_format == "conll02"
        assert config.target == "entity"

    @pytest.mark.parametrize(
        "field,value",
        [("clear_features", "always"), ("output_format", "timeml"), ("target", "events")],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ConfigError):
            TaggerConfig.from_dict({field: value})


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_from_dict_flat(self):
        config = ServerConfig.from_dict({"port": "8080", "output_format": "conll02"})
        assert config.port == 8080
        assert config.host == "0.0.0.0"
        assert config.isolation == "shared"
        assert config.tagger.output_format == "conll02"

    def test_from_dict_nested_tagger(self):
        config = ServerConfig.from_dict(
            {"port": 9000, "isolation": "connection", "tagger": {"clear_features": "yes"}}
        )
        assert config.isolation == "connection"
        assert config.tagger.clear_features == "yes"

    def test_port_required(self):
        with pytest.raises(ConfigError):
            ServerConfig.from_dict({})

    def test_invalid_isolation(self):
        with pytest.raises(ConfigError):
            ServerConfig(tagger=TaggerConfig(), port=1, isolation="process")


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig.from_dict({"port": 5555})
        assert config.host == "localhost"
        assert config.timeout is None


class TestParsePort:
    @pytest.mark.parametrize("value,expected", [("0", 0), (80, 80), ("65535", 65535)])
    def test_valid(self, value, expected):
        assert parse_port(value) == expected

    @pytest.mark.parametrize("value", ["abc", "-1", 70000, None, "8o8o"])
    def test_invalid(self, value):
        with pytest.raises(ConfigError):
            parse_port(value)
