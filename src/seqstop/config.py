"""
Loading TestConfig from plain mappings and YAML files.

Keys may be given in snake_case (``max_looks``) or in the camelCase used by
JSON clients (``maxLooks``, ``spendingFunction``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from seqstop.errors import InvalidConfigError
from seqstop.schema import TestConfig

_ALIASES = {
    "maxLooks": "max_looks",
    "spendingFunction": "spending_function",
    "spending": "spending_function",
    "futilityThreshold": "futility_threshold",
    "futilityEffect": "futility_effect",
    "futilityStart": "futility_start",
    "informationSchedule": "information_schedule",
    "boundaryMethod": "boundary_method",
}

_FIELDS = set(TestConfig.__dataclass_fields__)


def config_from_dict(d: Mapping[str, Any]) -> TestConfig:
    if not isinstance(d, Mapping):
        raise InvalidConfigError("Config root must be a mapping.")

    kwargs: Dict[str, Any] = {}
    unknown = []
    for key, value in d.items():
        name = _ALIASES.get(str(key), str(key))
        if name not in _FIELDS:
            unknown.append(key)
            continue
        kwargs[name] = value
    if unknown:
        raise InvalidConfigError(f"Unknown config keys: {unknown}. Allowed: {sorted(_FIELDS)}")

    if kwargs.get("information_schedule") is not None:
        kwargs["information_schedule"] = tuple(kwargs["information_schedule"])
    try:
        return TestConfig(**kwargs)
    except TypeError as exc:
        raise InvalidConfigError(str(exc)) from exc


def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    data = yaml.safe_load(p.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigError("Config root must be a mapping (YAML dict).")
    return data


def load_config(path: str | Path, section: str | None = "test") -> TestConfig:
    """Read a TestConfig from YAML.

    The design may sit at the root or under a ``test:`` section (the layout
    used by ``seqstop run-config`` files).
    """
    data = load_yaml(path)
    if section and section in data:
        data = data[section] or {}
    return config_from_dict(data)
