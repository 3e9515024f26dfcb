"""AI model descriptions and loading them from a JSON catalogue."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from os import PathLike
from pathlib import Path
from typing import Any, Union

DEFAULT_MODELS_PATH = "models.json"

PathArg = Union[str, "PathLike[str]"]


class Provider(Enum):
    """Service that hosts a model. Values are the names used in JSON."""

    OPENAI = "OpenAI"
    ANTHROPIC = "Anthropic"
    GOOGLE = "Google"
    XAI = "XAI"
    GROQ = "Groq"
    DEEPSEEK = "DeepSeek"
    OPENROUTER = "OpenRouter"

    def __str__(self) -> str:
        return self.value.lower()


class Company(Enum):
    """Organisation that built a model. Values are the names used in JSON."""

    OPENAI = "OpenAI"
    ANTHROPIC = "Anthropic"
    GOOGLE = "Google"
    XAI = "XAI"
    DEEPSEEK = "DeepSeek"
    META = "Meta"

    def __str__(self) -> str:
        return self.value.lower()


@dataclass
class Capabilities:
    """What a model is able to do."""

    text: bool = False
    image_generation: bool = False
    image_understanding: bool = False
    web_search: bool = False
    file_upload: bool = False
    function_calling: bool = False


def _capabilities_from(data: Any) -> Capabilities:
    if not isinstance(data, dict):
        raise ValueError("capabilities must be an object")
    values = {}
    for item in fields(Capabilities):
        if item.name not in data:
            raise ValueError(f"missing capability field {item.name!r}")
        value = data[item.name]
        if not isinstance(value, bool):
            raise ValueError(f"capability {item.name!r} must be a boolean")
        values[item.name] = value
    return Capabilities(**values)


def _enum_from(enum_type: type[Enum], value: Any, label: str) -> Any:
    try:
        return enum_type(value)
    except ValueError:
        raise ValueError(f"unknown {label}: {value!r}") from None


@dataclass
class ModelConfig:
    """Configuration for one AI model."""

    name: str = "gpt-4o"
    provider: Provider = Provider.OPENAI
    company: Company = Company.OPENAI
    max_tokens: int = 128000
    capabilities: Capabilities = field(default_factory=Capabilities)
    description: str = "OpenAI's most advanced model"

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form of this configuration."""
        return {
            "name": self.name,
            "provider": self.provider.value,
            "company": self.company.value,
            "max_tokens": self.max_tokens,
            "capabilities": asdict(self.capabilities),
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ModelConfig":
        """Build a configuration from its JSON form; raise ValueError if malformed."""
        if not isinstance(data, dict):
            raise ValueError("model entry must be an object")
        required = ("name", "provider", "company", "max_tokens", "capabilities", "description")
        missing = [key for key in required if key not in data]
        if missing:
            raise ValueError(f"missing field(s): {', '.join(missing)}")
        name, description = data["name"], data["description"]
        if not isinstance(name, str) or not isinstance(description, str):
            raise ValueError("name and description must be strings")
        max_tokens = data["max_tokens"]
        if isinstance(max_tokens, bool) or not isinstance(max_tokens, int) or max_tokens < 0:
            raise ValueError("max_tokens must be a non-negative integer")
        return cls(
            name=name,
            provider=_enum_from(Provider, data["provider"], "provider"),
            company=_enum_from(Company, data["company"], "company"),
            max_tokens=max_tokens,
            capabilities=_capabilities_from(data["capabilities"]),
            description=description,
        )


def load_models(path: PathArg = DEFAULT_MODELS_PATH) -> list[ModelConfig]:
    """Read the model catalogue; raise OSError or ValueError on failure."""
    content = Path(path).read_text(encoding="utf-8")
    entries = json.loads(content)
    if not isinstance(entries, list):
        raise ValueError("model catalogue must be a JSON array")
    return [ModelConfig.from_dict(entry) for entry in entries]


def default_model(path: PathArg = DEFAULT_MODELS_PATH) -> ModelConfig:
    """Return the last model of the catalogue, or the built-in default."""
    try:
        models = load_models(path)
    except (OSError, ValueError):
        return ModelConfig()
    return models[-1] if models else ModelConfig()