"""Configuration loading and management."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from .constants import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_RENDERER,
    DEFAULT_STYLE,
    DEFAULT_TIMEOUT,
    DEFAULT_WIDTH,
    MARKDOWN_EXTENSIONS,
)

RENDERER_ENV_VAR = "MD_PREVIEW_RENDERER"
TIMEOUT_ENV_VAR = "MD_PREVIEW_TIMEOUT"


@dataclass
class PreviewConfig:
    """Configuration for rendering Markdown previews.

    Attributes:
        renderer: Renderer command line; split with shell rules, so it may
            carry leading arguments (``"python fake_glow.py"``).
        style: Style name passed to the renderer with ``-s``.
        width: Word-wrap width passed with ``-w``; 0 disables wrapping.
        timeout: Seconds a render may take before the process is killed.
        extensions: File suffixes treated as Markdown documents.
        max_file_size: Maximum document size in bytes that will be rendered.

    Examples:
        PreviewConfig(style="light", width=80)
    """

    # Renderer invocation
    renderer: str = DEFAULT_RENDERER
    style: str = DEFAULT_STYLE
    width: int = DEFAULT_WIDTH
    timeout: float = DEFAULT_TIMEOUT

    # Documents
    extensions: tuple[str, ...] = MARKDOWN_EXTENSIONS
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`width` must be >= 0")
    """


def load_config(search_path: Path) -> PreviewConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.md-preview]`` table from `pyproject.toml` and the
    ``[md-preview]`` or ``[tool.md-preview]`` table from `.md-preview.toml`
    when present. Returns default values when no configuration is found. TOML
    files that cannot be read or decoded are skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        PreviewConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If a table is present but is not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", "md-preview")]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / ".md-preview.toml",
            table_paths=[("md-preview",), ("tool", "md-preview")],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return PreviewConfig()


_MISSING = object()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> PreviewConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> PreviewConfig:
    table_display = ".".join(table_path)

    if raw_config is None or raw_config == {}:
        return PreviewConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    try:
        return PreviewConfig(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def normalize_config(config: PreviewConfig) -> PreviewConfig:
    """Canonicalize loosely typed values read from TOML.

    Extensions become a lowercase tuple with a leading dot, and an integer
    timeout becomes a float.
    """
    extensions = config.extensions
    if isinstance(extensions, str):
        extensions = (extensions,)
    if isinstance(extensions, (list, tuple)):
        extensions = tuple(
            (ext if ext.startswith(".") else f".{ext}").lower()
            for ext in extensions
            if isinstance(ext, str)
        )

    timeout = config.timeout
    if isinstance(timeout, int) and not isinstance(timeout, bool):
        timeout = float(timeout)

    return replace(config, extensions=extensions, timeout=timeout)


def validate_config(config: PreviewConfig) -> None:
    """Validate a `PreviewConfig` instance.

    Args:
        config: Configuration to validate.

    Returns:
        None.

    Raises:
        ConfigError: If the renderer or style is empty, the width is negative,
            the timeout or size limit is not positive, or no extensions are
            configured.

    Examples:
        validate_config(PreviewConfig(width=80))
    """
    config = normalize_config(config)

    if not isinstance(config.renderer, str) or not config.renderer.strip():
        raise ConfigError("`renderer` must not be empty")
    if not isinstance(config.style, str) or not config.style:
        raise ConfigError("`style` must not be empty")

    _ensure_integers({"width": config.width, "max_file_size": config.max_file_size})
    if config.width < 0:
        raise ConfigError("`width` must be >= 0")
    if config.max_file_size <= 0:
        raise ConfigError("`max_file_size` must be a positive integer")

    if isinstance(config.timeout, bool) or not isinstance(config.timeout, float):
        raise ConfigError("`timeout` must be a number")
    if config.timeout <= 0:
        raise ConfigError("`timeout` must be positive")

    if not isinstance(config.extensions, tuple) or not config.extensions:
        raise ConfigError("`extensions` must list at least one suffix")


def apply_overrides(config: PreviewConfig, **overrides: object) -> PreviewConfig:
    """Apply override values to a `PreviewConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        PreviewConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `PreviewConfig`.

    Examples:
        updated = apply_overrides(config, style="light", width=None)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def apply_environment(config: PreviewConfig) -> PreviewConfig:
    """Apply ``MD_PREVIEW_RENDERER`` and ``MD_PREVIEW_TIMEOUT`` when set.

    Raises:
        ConfigError: If the timeout variable is not a positive number.
    """
    renderer = os.environ.get(RENDERER_ENV_VAR)
    timeout_value = os.environ.get(TIMEOUT_ENV_VAR)

    timeout = None
    if timeout_value is not None:
        try:
            timeout = float(timeout_value)
        except ValueError as error:
            error_message = (
                f"Invalid value for {TIMEOUT_ENV_VAR}: {timeout_value} (expected positive number)"
            )
            raise ConfigError(error_message) from error
        if timeout <= 0:
            raise ConfigError(f"{TIMEOUT_ENV_VAR} must be a positive number, got {timeout_value}.")

    return apply_overrides(config, renderer=renderer or None, timeout=timeout)


def build_config(search_path: Path, **overrides: object) -> PreviewConfig:
    """Load, override, and validate configuration.

    Precedence, lowest first: defaults, config files, environment variables,
    explicit overrides.

    Args:
        search_path: Directory where configuration files are resolved.
        overrides: Override values keyed by configuration attributes; None values
            are ignored.

    Returns:
        PreviewConfig: Validated configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), style="light")
    """
    config = load_config(search_path)
    config = apply_environment(config)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")
