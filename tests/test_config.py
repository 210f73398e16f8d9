"""Tests for configuration loading."""

import pytest

from kidcreatives.utils import config as config_module
from kidcreatives.utils.config import Config, get_config, load_config
from kidcreatives.utils.errors import ConfigurationError


@pytest.fixture
def models_yaml(tmp_path):
    path = tmp_path / "models.yaml"
    path.write_text(
        "text_model: gemini-test-text\n"
        "image_model: gemini-test-image\n"
        "question_count: 3\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    monkeypatch.setattr(config_module, "_config", None)


class TestLoadConfig:

    def test_merges_environment_and_yaml(self, monkeypatch, models_yaml):
        monkeypatch.setenv("GEMINI_API_KEY", "  secret-key  ")
        monkeypatch.setenv("APP_ENV", "test")

        config = load_config(models_yaml)

        assert config.gemini_api_key == "secret-key"
        assert config.app_env == "test"
        assert config.text_model == "gemini-test-text"
        assert config.image_model == "gemini-test-image"
        assert config.question_count == 3
        assert config.default_mime_type == "image/jpeg"
        assert config.default_output_mime_type == "image/png"
        assert get_config() is config

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_api_key(self, monkeypatch, models_yaml, value):
        if value is None:
            monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        else:
            monkeypatch.setenv("GEMINI_API_KEY", value)

        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            load_config(models_yaml)

    def test_missing_models_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GEMINI_API_KEY", "secret-key")

        with pytest.raises(ConfigurationError, match="models.yaml not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GEMINI_API_KEY", "secret-key")
        path = tmp_path / "models.yaml"
        path.write_text("text_model: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_negative_question_count(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GEMINI_API_KEY", "secret-key")
        path = tmp_path / "models.yaml"
        path.write_text("question_count: -1\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_config(path)


def test_get_config_before_load():
    with pytest.raises(ConfigurationError, match="not loaded"):
        get_config()


def test_defaults():
    config = Config(gemini_api_key="k")

    assert config.gemini_base_url == "https://generativelanguage.googleapis.com/v1beta"
    assert config.text_model == "gemini-2.5-flash"
    assert config.image_model == "gemini-2.5-flash-image"
    assert config.question_count == 4
