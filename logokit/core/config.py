"""Configuration for logokit.

Two layers live here:

* per-user settings persisted to ``~/.config/logokit/settings.json``
  (concurrency, timeouts, cache TTL, catalog URL), managed by the ``Config``
  singleton;
* the per-project ``logos.config.json`` describing where and how logos are
  installed, loaded into a ``ProjectConfig``.

Both are pydantic models, so anything read from disk is validated before use.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, ValidationError

from logokit.core.errors import ConfigurationError

# logger.py imports this module for CACHE_DIR, so use the stdlib call directly.
_log = logging.getLogger("logokit.config")

CONFIG_DIR = Path.home() / ".config" / "logokit"
SETTINGS_FILE = CONFIG_DIR / "settings.json"
CACHE_DIR = Path(os.environ.get("LOGOKIT_CACHE_DIR", Path.home() / ".cache" / "logokit"))

PROJECT_CONFIG_NAME = "logos.config.json"

Framework = Literal["react", "vue", "svelte", "raw"]
OutputFormat = Literal["component", "svg", "both"]
ColorMode = Literal["currentColor", "original"]


def describe_errors(error: ValidationError) -> list[str]:
    """Flatten a ValidationError into ``path: message`` lines."""
    return [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in error.errors()
    ]


# ── User settings ──


class UserSettings(BaseModel):
    """Per-user defaults for commands that talk to the catalog."""

    model_config = ConfigDict(extra="ignore")

    api_base: StrictStr = Field(default="https://api.svgl.app", min_length=1)
    concurrency: int = Field(default=5, ge=1, description="Logos installed at once")
    job_timeout: float = Field(default=30.0, gt=0, description="Seconds per logo")
    cache_ttl: int = Field(default=3600, ge=0, description="Seconds a catalog response stays cached")
    request_timeout: float = Field(default=15.0, gt=0, description="Seconds per HTTP request")


class Config:
    """Singleton holding the user's ``UserSettings``, persisted as JSON."""

    _instance: "Config | None" = None
    settings: UserSettings

    def __new__(cls) -> "Config":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.settings = _read_settings()
            cls._instance = instance
        return cls._instance

    @staticmethod
    def keys() -> list[str]:
        return list(UserSettings.model_fields)

    def items(self) -> dict[str, Any]:
        return self.settings.model_dump()

    def get(self, key: str, fallback: Any = None) -> Any:
        if key not in UserSettings.model_fields:
            return fallback
        return getattr(self.settings, key)

    def set(self, key: str, value: Any) -> None:
        """Validate and persist one setting; string values are coerced."""
        if key not in UserSettings.model_fields:
            raise ConfigurationError(
                f"Unknown setting {key!r}; expected one of {', '.join(self.keys())}",
                str(SETTINGS_FILE),
            )
        try:
            updated = UserSettings.model_validate({**self.settings.model_dump(), key: value})
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid setting: {', '.join(describe_errors(e))}", str(SETTINGS_FILE)
            ) from e
        self.settings = updated
        self.save()

    def reset(self) -> None:
        self.settings = UserSettings()
        self.save()

    def save(self) -> None:
        try:
            CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            SETTINGS_FILE.write_text(self.settings.model_dump_json(indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Failed to save settings: {e}", str(SETTINGS_FILE)) from e


def _read_settings() -> UserSettings:
    if not SETTINGS_FILE.exists():
        return UserSettings()
    try:
        return UserSettings.model_validate(json.loads(SETTINGS_FILE.read_text(encoding="utf-8")))
    except (OSError, ValueError) as e:
        # ValidationError and JSONDecodeError are both ValueErrors.
        _log.warning("Ignoring unreadable settings file %s: %s", SETTINGS_FILE, e)
        return UserSettings()


# ── Project configuration ──


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class StyleOptions(_CamelModel):
    default_size: StrictStr = Field(default="24", alias="defaultSize")
    color_mode: ColorMode = Field(default="currentColor", alias="colorMode")
    css_variables: StrictBool = Field(default=True, alias="cssVariables")


class RegistryOptions(_CamelModel):
    source: Literal["svgl"] = "svgl"
    cache: StrictBool = True


class ProjectConfig(_CamelModel):
    """Contents of ``logos.config.json``; JSON keys are camelCase."""

    framework: Framework = "react"
    typescript: StrictBool = True
    output_dir: StrictStr = Field(default="./src/components/logos", alias="outputDir")
    format: OutputFormat = "component"
    style: StyleOptions = Field(default_factory=StyleOptions)
    registry: RegistryOptions = Field(default_factory=RegistryOptions)
    aliases: dict[StrictStr, StrictStr] = Field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        if not self.aliases:
            del data["aliases"]
        return data

    @classmethod
    def from_json(cls, raw: Any, path: str | None = None) -> "ProjectConfig":
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {', '.join(describe_errors(e))}", path
            ) from e

    def resolve_output_dir(self, cwd: Path) -> Path:
        out = Path(self.output_dir).expanduser()
        return out if out.is_absolute() else cwd / out


def validate_config(raw: Any) -> list[str]:
    """Return a list of ``path: message`` problems; empty when ``raw`` is valid."""
    try:
        ProjectConfig.model_validate(raw)
    except ValidationError as e:
        return describe_errors(e)
    return []


def get_config_path(cwd: Path | None = None) -> Path:
    return (cwd or Path.cwd()) / PROJECT_CONFIG_NAME


def config_exists(cwd: Path | None = None) -> bool:
    return get_config_path(cwd).exists()


def load_config(cwd: Path | None = None) -> ProjectConfig:
    """Load and validate ``logos.config.json`` from ``cwd``."""
    path = get_config_path(cwd)
    if not path.exists():
        raise ConfigurationError(
            'Configuration file not found. Run "logokit init" first.', str(path)
        )
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in configuration file: {e}", str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to load configuration: {e}", str(path)) from e
    return ProjectConfig.from_json(raw, str(path))


def save_config(config: ProjectConfig, cwd: Path | None = None) -> Path:
    path = get_config_path(cwd)
    data = config.to_json()
    errors = validate_config(data)
    if errors:
        raise ConfigurationError(f"Invalid configuration: {', '.join(errors)}", str(path))
    try:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to save configuration: {e}", str(path)) from e
    return path


def _package_dependencies(cwd: Path) -> dict[str, Any] | None:
    package_json = cwd / "package.json"
    if not package_json.exists():
        return None
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (ValueError, OSError):
        return None
    if not isinstance(data, dict):
        return None
    deps: dict[str, Any] = {}
    deps.update(data.get("dependencies") or {})
    deps.update(data.get("devDependencies") or {})
    return deps


def detect_framework(cwd: Path | None = None) -> str:
    """Guess the UI framework from package.json; ``raw`` when nothing matches."""
    deps = _package_dependencies(cwd or Path.cwd())
    if not deps:
        return "raw"
    if "react" in deps or "@types/react" in deps:
        return "react"
    if "vue" in deps or "@vue/cli-service" in deps:
        return "vue"
    if "svelte" in deps or "@sveltejs/kit" in deps:
        return "svelte"
    return "raw"


def detect_typescript(cwd: Path | None = None) -> bool:
    cwd = cwd or Path.cwd()
    if (cwd / "tsconfig.json").exists():
        return True
    deps = _package_dependencies(cwd)
    return bool(deps and ("typescript" in deps or "@types/node" in deps))


def default_config(cwd: Path | None = None) -> ProjectConfig:
    """Defaults with framework and TypeScript auto-detected from the project."""
    framework = detect_framework(cwd)
    typescript = detect_typescript(cwd)
    if framework == "raw":
        return ProjectConfig(
            framework=framework, typescript=typescript, output_dir="./assets/logos", format="svg"
        )
    return ProjectConfig(framework=framework, typescript=typescript)
