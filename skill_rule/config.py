import json
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator

from skill_rule.constants import (
    CONFIG_FILENAME,
    DEFAULT_AGENTS,
    DEFAULT_BRANCH,
    DEFAULT_REGISTRY_URL,
)
from skill_rule.detection import all_categories
from skill_rule.errors import (
    InvalidConfigSchemaError,
    InvalidJsonFormatError,
    MissingConfigFileError,
)
from skill_rule.models import (
    AgentId,
    CategoryConfig,
    CategoryId,
    ProjectConfig,
    RegistryConfig,
    RegistryType,
)
from skill_rule.utils import write_json

_STRING_LIST = {"type": "array", "items": {"type": "string"}}


def project_config_schema() -> dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": ["registry", "agents", "categories"],
        "properties": {
            "registry": {
                "type": "object",
                "required": ["type", "url"],
                "properties": {
                    "type": {"enum": [item.value for item in RegistryType]},
                    "url": {"type": "string", "minLength": 1},
                    "branch": {"type": "string", "minLength": 1},
                    "token": {"type": "string"},
                },
                "additionalProperties": False,
            },
            "agents": {
                "type": "array",
                "items": {"enum": [item.value for item in AgentId]},
            },
            "categories": {
                "type": "object",
                "propertyNames": {"enum": [str(item) for item in all_categories()]},
                "additionalProperties": {
                    "type": "object",
                    "required": ["enabled"],
                    "properties": {
                        "enabled": {"type": "boolean"},
                        "version": {"type": "string"},
                        "include": _STRING_LIST,
                        "exclude": _STRING_LIST,
                    },
                    "additionalProperties": False,
                },
            },
            "overrides": _STRING_LIST,
        },
        "additionalProperties": False,
    }


_VALIDATOR = Draft202012Validator(project_config_schema())


def _schema_error_message(error: Any) -> str:
    path = ".".join([str(part) for part in error.path])
    return f"{error.message} at {path}" if path else str(error.message)


def validate_project_config(payload: Any, config_path: Path) -> None:
    if not isinstance(payload, dict):
        raise InvalidConfigSchemaError(config_path, "must be a JSON object")
    error = next(iter(_VALIDATOR.iter_errors(payload)), None)
    if error is not None:
        raise InvalidConfigSchemaError(config_path, _schema_error_message(error))


def default_registry() -> RegistryConfig:
    return RegistryConfig(
        type=RegistryType.GITHUB, url=DEFAULT_REGISTRY_URL, branch=DEFAULT_BRANCH
    )


class ConfigRepository:
    """Reads and writes the project's .rules.json."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._config_path = root / CONFIG_FILENAME

    @property
    def root(self) -> Path:
        return self._root

    @property
    def config_path(self) -> Path:
        return self._config_path

    def exists(self) -> bool:
        return self._config_path.is_file()

    def load(self) -> ProjectConfig:
        if not self.exists():
            raise MissingConfigFileError(self._config_path)
        try:
            payload = json.loads(self._config_path.read_text(encoding="utf-8"))
        except ValueError as exc:
            raise InvalidJsonFormatError(self._config_path, str(exc)) from exc
        validate_project_config(payload, self._config_path)
        return ProjectConfig.from_dict(payload)

    def save(self, config: ProjectConfig) -> None:
        payload = config.to_dict()
        validate_project_config(payload, self._config_path)
        write_json(self._config_path, payload)

    def create(
        self,
        agents: Optional[list[AgentId]] = None,
        categories: Optional[dict[CategoryId, CategoryConfig]] = None,
        registry: Optional[RegistryConfig] = None,
    ) -> ProjectConfig:
        config = ProjectConfig(
            registry=registry or default_registry(),
            agents=list(agents) if agents is not None else [AgentId(item) for item in DEFAULT_AGENTS],
            categories=dict(categories or {}),
        )
        self.save(config)
        return config
