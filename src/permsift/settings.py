from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from permsift.models import ConfigError, Thresholds
from permsift.predicates import available_predicates

DEFAULT_TOKENS: tuple[str, ...] = ("Gimli", "Fili", "Ilif", "Ilmig", "Mark")
DEFAULT_PREDICATE = "palindrome"

SETTINGS_ALLOWED_KEYS = {"tokens", "predicate", "thresholds"}
THRESHOLD_ALLOWED_KEYS = {"input_size", "result_count", "elapsed_ms"}


@dataclass(frozen=True)
class SearchSettings:
    tokens: tuple[str | None, ...] | None = None
    predicate: str = DEFAULT_PREDICATE
    thresholds: Thresholds = field(default_factory=Thresholds)
    source: Path | None = None

    def resolved_tokens(self) -> tuple[str | None, ...]:
        return self.tokens if self.tokens is not None else DEFAULT_TOKENS

    def to_json(self) -> dict[str, Any]:
        return {
            "tokens": None if self.tokens is None else list(self.tokens),
            "predicate": self.predicate,
            "thresholds": self.thresholds.to_json(),
            "source": None if self.source is None else str(self.source),
        }


def _require_mapping(value: Any, *, label: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigError(f"{label} must be a mapping")
    return {str(k): v for k, v in value.items()}


def _coerce_threshold(value: Any, *, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{label} must be an integer")
    if value < 0:
        raise ConfigError(f"{label} must be >= 0")
    return int(value)


def _coerce_tokens(value: Any, *, label: str) -> tuple[str | None, ...] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ConfigError(f"{label} must be a list of strings")
    out: list[str | None] = []
    for index, item in enumerate(value):
        # Null entries are kept; the engine treats them as absent positions.
        if item is not None and not isinstance(item, str):
            raise ConfigError(f"{label}[{index}] must be a string or null")
        out.append(item)
    return tuple(out)


def _coerce_predicate_name(value: Any, *, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{label} must be a non-empty string")
    name = value.strip()
    allowed = available_predicates()
    if name not in allowed:
        raise ConfigError(f"{label} must be one of {allowed}")
    return name


def parse_thresholds(
    value: Any, *, label: str = "thresholds", base: Thresholds | None = None
) -> Thresholds:
    base = base if base is not None else Thresholds()
    if value is None:
        return base
    raw = _require_mapping(value, label=label)
    unknown = sorted(set(raw.keys()) - THRESHOLD_ALLOWED_KEYS)
    if unknown:
        raise ConfigError(
            f"{label} has unknown keys: {unknown}. "
            f"Allowed keys: {sorted(THRESHOLD_ALLOWED_KEYS)}"
        )
    updates = {
        key: _coerce_threshold(raw[key], label=f"{label}.{key}") for key in raw
    }
    return replace(base, **updates)


def parse_settings(data: Any, *, source: Path | None = None) -> SearchSettings:
    if data is None:
        data = {}
    raw = _require_mapping(data, label="settings")
    unknown = sorted(set(raw.keys()) - SETTINGS_ALLOWED_KEYS)
    if unknown:
        raise ConfigError(
            f"settings has unknown keys: {unknown}. "
            f"Allowed keys: {sorted(SETTINGS_ALLOWED_KEYS)}"
        )
    predicate = DEFAULT_PREDICATE
    if "predicate" in raw:
        predicate = _coerce_predicate_name(raw["predicate"], label="settings.predicate")
    return SearchSettings(
        tokens=_coerce_tokens(raw.get("tokens"), label="settings.tokens"),
        predicate=predicate,
        thresholds=parse_thresholds(
            raw.get("thresholds"), label="settings.thresholds"
        ),
        source=source,
    )


def load_settings(path: str | Path | None) -> SearchSettings:
    if path is None:
        return SearchSettings()
    resolved_path = Path(path).expanduser().resolve()
    if not resolved_path.exists():
        raise ConfigError(f"Settings file not found: {resolved_path}")
    try:
        loaded = yaml.safe_load(resolved_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Settings file is not valid YAML: {resolved_path}") from exc
    if loaded is not None and not isinstance(loaded, dict):
        raise ConfigError(f"Settings file root must be a mapping: {resolved_path}")
    return parse_settings(loaded, source=resolved_path)
