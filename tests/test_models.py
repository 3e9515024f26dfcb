import json

import pytest

from parley.models import (
    Capabilities,
    Company,
    ModelConfig,
    Provider,
    default_model,
    load_models,
)

SAMPLE = {
    "name": "claude-3",
    "provider": "Anthropic",
    "company": "Anthropic",
    "max_tokens": 200000,
    "capabilities": {
        "text": True,
        "image_generation": False,
        "image_understanding": True,
        "web_search": False,
        "file_upload": True,
        "function_calling": True,
    },
    "description": "A capable assistant",
}


def _write(tmp_path, data):
    path = tmp_path / "models.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_default_config_values():
    config = ModelConfig()
    assert config.name == "gpt-4o"
    assert config.max_tokens == 128000
    assert config.provider is Provider.OPENAI
    assert config.company is Company.OPENAI
    assert config.description == "OpenAI's most advanced model"
    assert config.capabilities == Capabilities()


def test_display_names():
    assert str(ModelConfig().provider) == "openai"
    config = ModelConfig.from_dict(dict(SAMPLE, provider="OpenRouter", company="Meta"))
    assert str(config.provider) == "openrouter"
    assert str(config.company) == "meta"


def test_dict_round_trip():
    config = ModelConfig.from_dict(SAMPLE)
    assert config.provider is Provider.ANTHROPIC
    assert config.capabilities.image_understanding is True
    assert config.to_dict() == SAMPLE


def test_default_round_trip():
    config = ModelConfig()
    assert ModelConfig.from_dict(config.to_dict()) == config


def test_from_dict_rejects_display_form():
    data = dict(SAMPLE, provider="anthropic")
    with pytest.raises(ValueError):
        ModelConfig.from_dict(data)


def test_from_dict_missing_field():
    data = {k: v for k, v in SAMPLE.items() if k != "description"}
    with pytest.raises(ValueError):
        ModelConfig.from_dict(data)


def test_from_dict_missing_capability():
    caps = {k: v for k, v in SAMPLE["capabilities"].items() if k != "text"}
    with pytest.raises(ValueError):
        ModelConfig.from_dict(dict(SAMPLE, capabilities=caps))


def test_from_dict_negative_tokens():
    with pytest.raises(ValueError):
        ModelConfig.from_dict(dict(SAMPLE, max_tokens=-1))


def test_load_models(tmp_path):
    second = dict(SAMPLE, name="other")
    path = _write(tmp_path, [SAMPLE, second])
    models = load_models(path)
    assert [m.name for m in models] == ["claude-3", "other"]


def test_load_models_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_models(tmp_path / "absent.json")


def test_load_models_not_a_list(tmp_path):
    path = _write(tmp_path, SAMPLE)
    with pytest.raises(ValueError):
        load_models(path)


def test_default_model_takes_last(tmp_path):
    second = dict(SAMPLE, name="other")
    path = _write(tmp_path, [SAMPLE, second])
    assert default_model(path).name == "other"


def test_default_model_falls_back(tmp_path):
    assert default_model(tmp_path / "absent.json") == ModelConfig()
    assert default_model(_write(tmp_path, [])) == ModelConfig()