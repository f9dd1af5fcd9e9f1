"""
Unit tests for configuration loading.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from docsift.config import Config, DecoderSettings, MonitoringConfig, find_config_file


@pytest.mark.unit
class TestDefaults:
    def test_default_thresholds(self):
        config = Config()

        assert config.classifier.indicator_threshold == 3
        assert config.classifier.binary_ratio_threshold == 0.2
        assert config.decoder.min_candidate_length == 50
        assert config.decoder.encodings == ["utf-8", "latin-1", "cp1252"]
        assert config.provider.ready_timeout_seconds == 10.0
        assert config.intake.max_upload_bytes == 10 * 1024 * 1024

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DOCSIFT_DECODER__MIN_CANDIDATE_LENGTH", "20")
        monkeypatch.setenv("DOCSIFT_PROVIDER__READY_TIMEOUT_SECONDS", "2.5")

        config = Config()

        assert config.decoder.min_candidate_length == 20
        assert config.provider.ready_timeout_seconds == 2.5


@pytest.mark.unit
class TestValidation:
    def test_unknown_encoding_rejected(self):
        with pytest.raises(ValidationError, match="Unknown encoding"):
            DecoderSettings(encodings=["utf-8", "klingon-8"])

    def test_empty_encoding_list_rejected(self):
        with pytest.raises(ValidationError):
            DecoderSettings(encodings=[])

    def test_ratio_must_be_a_fraction(self):
        with pytest.raises(ValidationError):
            Config.model_validate({"classifier": {"binary_ratio_threshold": 1.5}})

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Config.model_validate({"provider": {"ready_timeout_seconds": 0}})

    def test_log_file_parent_is_created(self, tmp_path):
        log_file = tmp_path / "nested" / "logs" / "docsift.log"

        config = MonitoringConfig(log_file=log_file)

        assert config.log_file == str(log_file)
        assert log_file.parent.is_dir()


@pytest.mark.unit
class TestYaml:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "docsift.yaml"
        path.write_text(
            "decoder:\n  encodings: [utf-8, cp1252]\n  min_candidate_length: 10\nintake:\n  max_upload_bytes: 2048\n",
            encoding="utf-8",
        )

        config = Config.from_yaml(path)

        assert config.decoder.encodings == ["utf-8", "cp1252"]
        assert config.decoder.min_candidate_length == 10
        assert config.intake.max_upload_bytes == 2048

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "docsift.yaml"
        path.write_text("", encoding="utf-8")

        assert Config.from_yaml(path).decoder.min_candidate_length == 50

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "absent.yaml")


@pytest.mark.unit
class TestConfigDiscovery:
    def test_find_config_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert find_config_file() is None

        (tmp_path / "docsift.yml").write_text("project_name: found\n", encoding="utf-8")

        assert find_config_file() == Path(tmp_path / "docsift.yml")

    def test_project_file_wins_over_generic_name(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config.yaml").write_text("project_name: generic\n", encoding="utf-8")
        (tmp_path / "docsift.yaml").write_text("project_name: specific\n", encoding="utf-8")

        assert find_config_file() == tmp_path / "docsift.yaml"
