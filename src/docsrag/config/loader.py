"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (DOCS_RAG__SECTION__KEY)
3. DOCS_PATH environment variable (storage root)
4. Global config (~/.config/docs-rag/config.yaml)
5. Built-in defaults (lowest priority)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from docsrag.config.models import (
    AcquisitionConfig,
    DocsRagConfig,
    EmbeddingConfig,
    LLMConfig,
    LoggingConfig,
    RetrievalConfig,
    ServerConfig,
    StorageConfig,
)
from docsrag.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/docs-rag/config.yaml").expanduser()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source (thread-safe)."""

    class DocsRagSettings(BaseSettings):
        """Root config. Env vars: DOCS_RAG__LOGGING__LEVEL, DOCS_RAG__LLM__MODEL_NAME, etc."""

        model_config = SettingsConfigDict(
            env_prefix="DOCS_RAG__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        storage: StorageConfig = StorageConfig()
        embedding: EmbeddingConfig = EmbeddingConfig()
        llm: LLMConfig = LLMConfig()
        retrieval: RetrievalConfig = RetrievalConfig()
        acquisition: AcquisitionConfig = AcquisitionConfig()
        server: ServerConfig = ServerConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return DocsRagSettings


DocsRagSettings = _make_settings_class({})


def load_config(config_path: Path | None = None, **kwargs: Any) -> DocsRagConfig:
    """Load config: defaults < global yaml < DOCS_PATH < env vars < kwargs.

    Args:
        config_path: YAML file to read instead of the global config.
        **kwargs: Override values (highest precedence), e.g.
            ``storage={"docs_path": "/tmp/docs"}``.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    yaml_config = _load_yaml(config_path or GLOBAL_CONFIG_PATH)

    docs_path = os.environ.get("DOCS_PATH")
    if docs_path:
        yaml_config = _deep_merge(yaml_config, {"storage": {"docs_path": docs_path}})

    settings_cls = _make_settings_class(yaml_config)
    try:
        return settings_cls(**kwargs)  # type: ignore[return-value]
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e


def ensure_storage(config: DocsRagConfig) -> Path:
    """Create the storage root and the reserved indices directory.

    Returns the storage root.
    """
    config.storage.indices_path.mkdir(parents=True, exist_ok=True)
    return config.storage.docs_path


def resolve_api_key(config: DocsRagConfig) -> str | None:
    """API key from config, else GEMINI_API_KEY, else GOOGLE_API_KEY."""
    if config.llm.api_key is not None:
        return config.llm.api_key.get_secret_value()
    return os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
