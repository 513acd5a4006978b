"""Configuration models and loaders for :mod:`docletnorm`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Iterable, Mapping

import tomllib
import tomlkit
from pydantic import BaseModel, Field, field_validator, model_validator

from docletnorm.resources import get_resource


DEFAULTS_RESOURCE_NAME = "docletnorm.defaults.toml"
USER_CONFIG_FILENAME = "docletnorm.toml"

ENV_LOG_LEVEL = "DOCLETNORM_LOG_LEVEL"
ENV_FAIL_FAST = "DOCLETNORM_FAIL_FAST"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


class PipelineSettings(BaseModel):
    """Stage toggles and failure policy for the normalization pipeline."""

    fail_fast: bool = Field(
        default=False,
        description=(
            "Re-raise stage failures instead of keeping the stage's input "
            "records unchanged."
        ),
    )
    stages: dict[str, bool] = Field(
        default_factory=dict,
        description="Per-stage enablement keyed by stage name.",
    )

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }

    @field_validator("stages")
    @classmethod
    def _normalize_stage_names(
        cls,
        value: Mapping[str, bool],
    ) -> dict[str, bool]:
        normalized: dict[str, bool] = {}
        for name, enabled in value.items():
            key = name.strip().lower().replace("_", "-")
            if not key:
                raise ValueError("Stage names cannot be blank.")
            normalized[key] = bool(enabled)
        return normalized

    def is_enabled(self, stage: str) -> bool:
        """Return ``True`` unless ``stage`` is explicitly disabled.

        Example:
            >>> PipelineSettings(stages={"static-scope": False}).is_enabled(
            ...     "static-scope"
            ... )
            False
        """

        return self.stages.get(stage, True)


class AppConfig(BaseModel):
    """Root configuration for the :mod:`docletnorm` application."""

    log_level: str = Field(
        default="INFO",
        description="Default logging level for the application runtime.",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional file receiving JSON-formatted log events.",
    )
    pipeline: PipelineSettings = Field(
        default_factory=PipelineSettings,
        description="Normalization pipeline settings.",
    )

    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }

    @model_validator(mode="after")
    def _post_process(self) -> "AppConfig":
        """Normalize fields after validation."""

        object.__setattr__(self, "log_level", self.log_level.upper())
        if self.log_file is not None:
            object.__setattr__(self, "log_file", self.log_file.expanduser())
        return self


def read_packaged_defaults_text() -> str:
    """Return the raw packaged defaults TOML content.

    Example:
        >>> read_packaged_defaults_text().startswith("#")
        True
    """

    resource = get_resource(DEFAULTS_RESOURCE_NAME)
    return resource.read_text(encoding="utf-8")


def load_packaged_defaults() -> dict[str, Any]:
    """Load the packaged defaults as a plain dictionary.

    Example:
        >>> load_packaged_defaults()["log_level"]
        'INFO'
    """

    return tomllib.loads(read_packaged_defaults_text())


def read_user_config(path: Path) -> dict[str, Any]:
    """Parse a user ``docletnorm.toml``; a missing file yields ``{}``."""

    if not path.exists():
        return {}
    return tomllib.loads(path.read_text(encoding="utf-8"))


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Translate ``DOCLETNORM_*`` environment variables into config layers.

    Raises:
        ValueError: If the fail-fast variable is not a boolean word.
    """

    overrides: dict[str, Any] = {}
    level = environ.get(ENV_LOG_LEVEL)
    if level:
        overrides["log_level"] = level
    fail_fast = environ.get(ENV_FAIL_FAST)
    if fail_fast:
        overrides["pipeline"] = {"fail_fast": _parse_bool(fail_fast)}
    return overrides


def _parse_bool(raw: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    raise ValueError(f"Expected a boolean value, got {raw!r}")


def _deep_merge(
    base: Mapping[str, Any],
    overlay: Mapping[str, Any],
) -> dict[str, Any]:
    """Recursively merge ``overlay`` into ``base`` returning a new dict."""

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if (
            key in merged
            and isinstance(merged[key], MappingABC)
            and isinstance(value, MappingABC)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    *,
    defaults: Mapping[str, Any],
    user_config: Mapping[str, Any] | None = None,
    env_config: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Load configuration according to the precedence stack.

    Args:
        defaults: Packaged defaults shipped with the application.
        user_config: Parsed user ``docletnorm.toml`` content.
        env_config: Settings derived from environment variables.
        cli_overrides: Settings supplied via CLI flags.

    Returns:
        A validated :class:`AppConfig` instance.

    Raises:
        TypeError: If the ``pipeline`` table is not a mapping.
    """

    stack = dict(defaults)
    for layer in (user_config, env_config, cli_overrides):
        if layer:
            stack = _deep_merge(stack, layer)

    pipeline_raw = stack.pop("pipeline", None)
    if isinstance(pipeline_raw, PipelineSettings):
        pipeline = pipeline_raw
    elif isinstance(pipeline_raw, MappingABC):
        pipeline = PipelineSettings(**pipeline_raw)
    elif pipeline_raw is None:
        pipeline = PipelineSettings()
    else:
        raise TypeError(
            f"Unsupported pipeline configuration payload: {pipeline_raw!r}"
        )
    stack["pipeline"] = pipeline

    return AppConfig(**stack)


def render_user_config(
    config: AppConfig,
    *,
    stage_names: Iterable[str] = (),
    include_defaults: bool = True,
) -> str:
    """Render a ``docletnorm.toml`` template for users to customize.

    Args:
        config: Configuration instance to serialize.
        stage_names: Known stage names; each gets an explicit toggle.
        include_defaults: Whether to inline commentary.

    Returns:
        A TOML-formatted string ready to persist for the user.
    """

    document = tomlkit.document()

    if include_defaults:
        document.add(tomlkit.comment("Generated by docletnorm init-config"))
        document.add(
            tomlkit.comment(
                "Precedence: CLI flags > env vars > docletnorm.toml > defaults"
            )
        )
        document.add(tomlkit.comment("Environment overrides:"))
        document.add(tomlkit.comment(f"  {ENV_LOG_LEVEL}=debug"))
        document.add(tomlkit.comment(f"  {ENV_FAIL_FAST}=true"))
        document.add(tomlkit.nl())

    document["log_level"] = config.log_level
    if config.log_file is not None:
        document["log_file"] = str(config.log_file)

    pipeline_table = tomlkit.table()
    pipeline_table["fail_fast"] = config.pipeline.fail_fast

    stages_table = tomlkit.table()
    names = list(dict.fromkeys([*stage_names, *config.pipeline.stages]))
    for name in names:
        stages_table[name] = config.pipeline.is_enabled(name)
    if names:
        pipeline_table.add("stages", stages_table)

    document["pipeline"] = pipeline_table
    return tomlkit.dumps(document)


__all__ = [
    "AppConfig",
    "DEFAULTS_RESOURCE_NAME",
    "ENV_FAIL_FAST",
    "ENV_LOG_LEVEL",
    "PipelineSettings",
    "USER_CONFIG_FILENAME",
    "env_overrides",
    "load_config",
    "load_packaged_defaults",
    "read_packaged_defaults_text",
    "read_user_config",
    "render_user_config",
]
