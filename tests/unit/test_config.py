"""
Unit tests for pipeline configuration loading.
"""

import pytest

from src.core.config import PipelineConfig, load_config
from src.core.errors import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    def _write(content: str):
        path = tmp_path / "pipeline.yaml"
        path.write_text(content)
        return path
    return _write


class TestPipelineConfig:
    """Tests for PipelineConfig defaults and validation"""

    def test_defaults(self):
        config = PipelineConfig()
        assert config.input_file == "CLIENTES_IN_0425.dat"
        assert config.batch_size == 200
        assert config.delimiter == "|"
        assert config.encoding == "utf-8"
        assert config.progress_every_batch is True

    def test_batch_size_must_be_positive(self):
        with pytest.raises(ValueError):
            PipelineConfig(batch_size=0)


class TestLoadConfig:
    """Tests for load_config precedence"""

    def test_without_sources_returns_defaults(self):
        assert load_config() == PipelineConfig()

    def test_yaml_pipeline_section(self, config_file):
        path = config_file(
            "pipeline:\n"
            "  input_file: data/clients.dat\n"
            "  batch_size: 50\n"
            "  delimiter: ';'\n"
        )

        config = load_config(path)

        assert config.input_file == "data/clients.dat"
        assert config.batch_size == 50
        assert config.delimiter == ";"
        assert config.encoding == "utf-8"

    def test_env_overrides_yaml(self, config_file, monkeypatch):
        path = config_file("pipeline:\n  batch_size: 50\n  input_file: from_yaml.dat\n")
        monkeypatch.setenv("INGEST_BATCH_SIZE", "500")
        monkeypatch.setenv("INGEST_PROGRESS_EVERY_BATCH", "false")

        config = load_config(path)

        assert config.batch_size == 500
        assert config.input_file == "from_yaml.dat"
        assert config.progress_every_batch is False

    def test_explicit_overrides_win(self, monkeypatch):
        monkeypatch.setenv("INGEST_INPUT_FILE", "from_env.dat")
        monkeypatch.setenv("INGEST_BATCH_SIZE", "500")

        config = load_config(input_file="from_cli.dat", batch_size=None)

        assert config.input_file == "from_cli.dat"
        assert config.batch_size == 500

    def test_empty_env_value_ignored(self, monkeypatch):
        monkeypatch.setenv("INGEST_BATCH_SIZE", "")
        assert load_config().batch_size == 200

    def test_empty_yaml_file(self, config_file):
        assert load_config(config_file("")) == PipelineConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_pipeline_section_must_be_mapping(self, config_file):
        with pytest.raises(ConfigurationError, match="'pipeline' mapping"):
            load_config(config_file("pipeline:\n  - batch_size\n"))

    @pytest.mark.parametrize("env_value", ["zero", "0", "-3"])
    def test_invalid_batch_size(self, monkeypatch, env_value):
        monkeypatch.setenv("INGEST_BATCH_SIZE", env_value)
        with pytest.raises(ConfigurationError, match="batch_size"):
            load_config()
