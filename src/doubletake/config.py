"""Engine configuration.

Settings come from three layers, later ones winning:

- defaults on :class:`EngineConfig`
- a ``doubletake:`` mapping in a YAML file (:meth:`EngineConfig.from_yaml`)
- ``DOUBLETAKE_*`` environment variables (:meth:`EngineConfig.from_env`)

Unknown keys and unparsable values are logged and ignored.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "DOUBLETAKE_"
CONFIG_SECTION = "doubletake"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class EngineConfig:
    """Behavioral switches for a :class:`~doubletake.space.Space`.

    Attributes
    ----------
    strict:
        Strictness applied to doubles that did not choose one.
    allow_missing_methods:
        Whether non-strict doubles may be defined for methods the subject
        does not have.
    record_calls:
        Whether dispatched calls are appended to the space's call log.
    """

    strict: bool = False
    allow_missing_methods: bool = True
    record_calls: bool = True

    @classmethod
    def from_mapping(cls, data: dict[str, Any], base: "EngineConfig | None" = None) -> "EngineConfig":
        known = {f.name for f in fields(cls)}
        updates: dict[str, bool] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            parsed = _parse_bool(value)
            if parsed is None:
                logger.warning("Ignoring invalid value for %s: %r", key, value)
                continue
            updates[key] = parsed
        return replace(base or cls(), **updates)

    @classmethod
    def from_yaml(cls, path: str | Path, base: "EngineConfig | None" = None) -> "EngineConfig":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            document = yaml.safe_load(f) or {}
        if not isinstance(document, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        section = document.get(CONFIG_SECTION, {})
        if not isinstance(section, dict):
            raise ValueError(f"'{CONFIG_SECTION}' in {path} must be a mapping")
        return cls.from_mapping(section, base)

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, base: "EngineConfig | None" = None
    ) -> "EngineConfig":
        environ = os.environ if environ is None else environ
        data = {
            f.name: environ[ENV_PREFIX + f.name.upper()]
            for f in fields(cls)
            if ENV_PREFIX + f.name.upper() in environ
        }
        return cls.from_mapping(data, base)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "EngineConfig":
        """Defaults, then the YAML file if given, then the environment."""
        config = cls()
        if path is not None:
            config = cls.from_yaml(path, config)
        return cls.from_env(base=config)


def _parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    return None
