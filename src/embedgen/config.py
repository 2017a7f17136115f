"""Load embedgen.yaml settings."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from embedgen import (
    DEFAULT_FILE_ENV,
    DEFAULT_FRAGMENT_PATTERN,
    DEFAULT_LEDGER_NAME,
    DEFAULT_LINE_ENV,
)

VALID_LANGUAGES = {"go", "c"}


@dataclass
class Settings:
    language: str = "go"
    values_per_line: int = 12
    ledger_name: str = DEFAULT_LEDGER_NAME
    fragment_pattern: str = DEFAULT_FRAGMENT_PATTERN
    file_env: str = DEFAULT_FILE_ENV
    line_env: str = DEFAULT_LINE_ENV
    formatter: list[str] = field(default_factory=lambda: ["gofmt", "-w"])
    defer_splice: bool = False
    keep_directive: bool = True


def load_settings(path: Path | str | None = None) -> Settings:
    """Read settings from a YAML file, falling back to defaults.

    Args:
        path: Path to embedgen.yaml. A missing file yields defaults.

    Returns:
        Validated Settings.

    Raises:
        ValueError: If the document is not a mapping or holds bad values.
        yaml.YAMLError: If the YAML is malformed.
    """
    if path is None or not Path(path).is_file():
        return Settings()

    settings_path = Path(path)
    with open(settings_path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ValueError(f"{settings_path} is not a YAML mapping")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{settings_path}: unknown settings: {', '.join(unknown)}")

    settings = Settings(**data)
    errors = validate_settings(settings)
    if errors:
        raise ValueError(f"{settings_path}: {'; '.join(errors)}")
    return settings


def validate_settings(settings: Settings) -> list[str]:
    """Return a list of problems with a Settings instance (empty if valid)."""
    errors: list[str] = []
    if settings.language not in VALID_LANGUAGES:
        errors.append(
            f"invalid language '{settings.language}' "
            f"(valid: {', '.join(sorted(VALID_LANGUAGES))})"
        )
    per_line = settings.values_per_line
    if isinstance(per_line, bool) or not isinstance(per_line, int) or per_line < 1:
        errors.append("values_per_line must be a positive integer")
    if "{index}" not in settings.fragment_pattern:
        errors.append("fragment_pattern must contain '{index}'")
    if not isinstance(settings.formatter, list) or not all(
        isinstance(part, str) for part in settings.formatter
    ):
        errors.append("formatter must be a list of strings")
    if not isinstance(settings.defer_splice, bool):
        errors.append("defer_splice must be true or false")
    if not isinstance(settings.keep_directive, bool):
        errors.append("keep_directive must be true or false")
    return errors
