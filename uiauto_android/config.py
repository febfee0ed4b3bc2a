# uiauto_android/config.py
"""
@file config.py
@brief Centralized resolver configuration.

Deterministic precedence per build:
  base defaults -> preset -> YAML config file -> environment -> explicit overrides
"""

from __future__ import annotations

import json
import os
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Generator, Mapping, Optional

import yaml
from jsonschema import Draft202012Validator

from .exceptions import ConfigError
from .timings import (DIAGNOSTIC_FIELDS, MATCH_FIELDS, TIMING_FIELDS,
                      build_preset_values)

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "resolver_config.schema.json")

_TRUTHY = {"1", "true", "yes", "on"}

_validator: Optional[Draft202012Validator] = None


def _get_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
            _validator = Draft202012Validator(json.load(f))
    return _validator


def validate_document(doc: Mapping[str, Any], where: str = "config") -> None:
    """Validate a config document against the JSON schema. Raises ConfigError."""
    errors = sorted(_get_validator().iter_errors(dict(doc)), key=lambda e: [str(p) for p in e.path])
    if errors:
        lines = [f"{where}: schema validation failed:"]
        for e in errors:
            lines.append(f"- {list(e.path)}: {e.message}")
        raise ConfigError("\n".join(lines))


@dataclass(frozen=True)
class ResolverConfig:
    """Tunables for snapshot caching, matching and the retry policy."""
    containment_tolerance: float = MATCH_FIELDS["containment_tolerance"]
    proximity_radius: float = MATCH_FIELDS["proximity_radius"]
    snapshot_ttl: float = TIMING_FIELDS["snapshot_ttl"]
    stale_factor: float = TIMING_FIELDS["stale_factor"]
    retry_count: int = TIMING_FIELDS["retry_count"]
    retry_delay: float = TIMING_FIELDS["retry_delay"]
    inspect_throttle: float = TIMING_FIELDS["inspect_throttle"]
    xml_snippet_chars: int = DIAGNOSTIC_FIELDS["xml_snippet_chars"]
    save_snapshots: bool = DIAGNOSTIC_FIELDS["save_snapshots"]
    artifacts_dir: str = DIAGNOSTIC_FIELDS["artifacts_dir"]

    _default_instance = None
    _local = threading.local()
    _lock = threading.Lock()

    @property
    def stale_window(self) -> float:
        """Oldest snapshot age still served when a live fetch fails."""
        return self.snapshot_ttl * self.stale_factor

    @classmethod
    def field_names(cls) -> set:
        return {f.name for f in fields(cls)}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def with_overrides(self, **overrides: Any) -> ResolverConfig:
        """Return a copy with validated overrides applied; None values are ignored."""
        values = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(values) - self.field_names()
        if unknown:
            raise ConfigError(f"Unknown resolver config fields: {sorted(unknown)}")
        if not values:
            return self
        validate_document({"resolver": values}, where="overrides")
        return replace(self, **_coerce(values))

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> ResolverConfig:
        return cls().with_overrides(**dict(values))

    @classmethod
    def load_file(cls, path: str) -> Dict[str, Any]:
        """Read a YAML config document and validate it. Returns the raw mapping."""
        if not os.path.exists(path):
            raise ConfigError(f"Config YAML not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Config YAML must be a mapping at root.")
        validate_document(data, where=path)
        return data

    @staticmethod
    def env_overrides(env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        env = os.environ if env is None else env
        out: Dict[str, Any] = {}
        if env.get("UIAUTO_UI_SNAPSHOT", "").lower() in _TRUTHY:
            out["save_snapshots"] = True
        if env.get("UIAUTO_ARTIFACTS_DIR"):
            out["artifacts_dir"] = env["UIAUTO_ARTIFACTS_DIR"]
        return out

    @classmethod
    def build_from(
        cls,
        *,
        preset: Optional[str] = None,
        config_path: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ResolverConfig:
        """Build a deterministic config snapshot from every source."""
        file_doc: Dict[str, Any] = cls.load_file(config_path) if config_path else {}
        preset_name = preset or file_doc.get("preset") or "default"
        try:
            base = build_preset_values(preset_name)
        except ValueError as e:
            raise ConfigError(str(e)) from e

        cfg = cls.from_values(base)
        cfg = cfg.with_overrides(**(file_doc.get("resolver") or {}))
        cfg = cfg.with_overrides(**cls.env_overrides(env))
        if overrides:
            cfg = cfg.with_overrides(**overrides)
        return cfg

    @classmethod
    def default(cls) -> ResolverConfig:
        """Process default configuration (built once, from defaults and environment)."""
        if cls._default_instance is None:
            with cls._lock:
                if cls._default_instance is None:
                    cls._default_instance = cls.build_from()
        return cls._default_instance

    @classmethod
    def install_run_config(cls, config: ResolverConfig) -> None:
        cls._local.run_config = config

    @classmethod
    def clear_run_config(cls) -> None:
        cls._local.run_config = None

    @classmethod
    def current(cls) -> ResolverConfig:
        override = getattr(cls._local, "override", None)
        if override is not None:
            return override
        run_cfg = getattr(cls._local, "run_config", None)
        if run_cfg is not None:
            return run_cfg
        return cls.default()

    @classmethod
    @contextmanager
    def override(cls, **kwargs: Any) -> Generator[ResolverConfig, None, None]:
        """Context manager for temporary configuration overrides."""
        previous = getattr(cls._local, "override", None)
        new_config = cls.current().with_overrides(**kwargs)
        cls._local.override = new_config
        try:
            yield new_config
        finally:
            cls._local.override = previous

    @classmethod
    def reset_to_defaults(cls) -> None:
        with cls._lock:
            cls._default_instance = None
        cls._local.override = None
        cls._local.run_config = None


_INT_FIELDS = {"retry_count", "xml_snippet_chars"}
_BOOL_FIELDS = {"save_snapshots"}
_STR_FIELDS = {"artifacts_dir"}


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in values.items():
        if key in _INT_FIELDS:
            out[key] = int(value)
        elif key in _BOOL_FIELDS:
            out[key] = bool(value)
        elif key in _STR_FIELDS:
            out[key] = str(value)
        else:
            out[key] = float(value)
    return out
