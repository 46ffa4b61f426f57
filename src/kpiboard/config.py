"""Board settings with code defaults, overridable from the board file and CLI."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

from kpiboard.model.entities import PRIMORDIAL_ID


@dataclass(frozen=True)
class Settings:
    primordial_id: str = PRIMORDIAL_ID
    page_size: int = 10
    coalesce_refresh: bool = True


def load_settings(data: Mapping[str, Any] | None) -> Settings:
    """Build Settings from a mapping, ignoring unknown keys.

    Values are coerced to the type of the default so that YAML strings
    like ``"20"`` or ``"false"`` behave.
    """
    settings = Settings()
    if not data:
        return settings
    known = {f.name: getattr(settings, f.name) for f in fields(Settings)}
    changes = {}
    for key, value in data.items():
        if key not in known or value is None:
            continue
        changes[key] = _coerce(value, known[key])
    return replace(settings, **changes)


def _coerce(value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    if isinstance(default, int):
        return int(value)
    return str(value)
