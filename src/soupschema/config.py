"""Job configuration loader.

A job file names a document URL plus any number of extraction schemas::

    url = "https://example.com/news"

    [fetch]
    timeout = 10

    [headlines]
    selector = "article h2"
    target = "text"

YAML, TOML and JSON are accepted (picked by file suffix). String values go
through `$VAR` expansion; environment variables such as
`SOUPSCHEMA_FETCH__TIMEOUT=5` override the `fetch` and `output` sections.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from .errors import ConfigError, SchemaFormatError
from .formats import Format, loads
from .schema import RawSchemaNode

DEFAULT_ENV_PREFIX = "SOUPSCHEMA"
JOB_RESERVED_KEYS = frozenset({"url", "fetch", "output"})
JOB_ENV_SECTIONS = ("fetch", "output")

logger = logging.getLogger(__name__)


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    return value


def _merge_dicts(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides(prefix: str, sections: Iterable[str]) -> Dict[str, Any]:
    """Collect section overrides from env vars like SOUPSCHEMA_FETCH__TIMEOUT=5.

    Only `SECTION__KEY` variables naming one of `sections` are used; schema
    fields are never overridden from the environment.
    """
    overrides: Dict[str, Dict[str, Any]] = {}
    for env_key, env_val in os.environ.items():
        if not env_key.startswith(prefix + "_"):
            continue
        keys = env_key[len(prefix) + 1 :].lower().split("__")
        if len(keys) != 2 or keys[0] not in sections or not keys[1]:
            logger.debug("Ignoring environment variable %s", env_key)
            continue
        overrides.setdefault(keys[0], {})[keys[1]] = _coerce_env_value(env_val)
    return overrides


def _coerce_env_value(value: str) -> Any:
    lowered = value.lower()
    if lowered in {"true", "yes"}:
        return True
    if lowered in {"false", "no"}:
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


@dataclass
class FetchSettings:
    user_agent: str = "soupschema/0.1"
    timeout: float = 20.0
    max_retries: int = 3
    backoff_base: float = 0.6
    cache_dir: Optional[str] = None
    cache_ttl: int = 3600


@dataclass
class OutputSettings:
    format: str = Format.TOML.value
    omit_empty: bool = True
    fragment: bool = False


@dataclass
class ApiSettings:
    token: Optional[str] = None
    enable_auth: bool = False
    max_document_bytes: int = 5_000_000


@dataclass
class JobConfig:
    url: Optional[str] = None
    fetch: FetchSettings = field(default_factory=FetchSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    fields: Dict[str, RawSchemaNode] = field(default_factory=dict)


def _section(data: Dict[str, Any], cls, name: str):
    values = data.get(name) or {}
    if not isinstance(values, dict):
        raise ConfigError(f"[{name}] must be a table")
    try:
        return cls(**values)
    except TypeError as exc:
        raise ConfigError(f"invalid [{name}] settings: {exc}") from exc


def map_dict_to_config(data: Dict[str, Any]) -> JobConfig:
    url = data.get("url")
    if url is not None and not isinstance(url, str):
        raise ConfigError("'url' must be a string")
    fields: Dict[str, RawSchemaNode] = {}
    for key, value in data.items():
        if key in JOB_RESERVED_KEYS:
            continue
        fields[key] = RawSchemaNode.from_dict(value, (key,))
    return JobConfig(
        url=url,
        fetch=_section(data, FetchSettings, "fetch"),
        output=_section(data, OutputSettings, "output"),
        fields=fields,
    )


def load_config(path: Path | str, env_prefix: str = DEFAULT_ENV_PREFIX) -> JobConfig:
    """Load a job file and merge env overrides."""
    config_path = Path(path)
    try:
        fmt = Format.from_suffix(config_path)
        text = config_path.read_text(encoding="utf-8")
    except (OSError, ValueError) as exc:
        raise ConfigError(f"cannot read job file {config_path}: {exc}") from exc
    try:
        data = _expand_env(loads(text, fmt))
    except SchemaFormatError as exc:
        raise ConfigError(f"{config_path}: {exc.message}") from exc
    return map_dict_to_config(_merge_dicts(data, _env_overrides(env_prefix, JOB_ENV_SECTIONS)))


def load_api_settings(env_prefix: str = DEFAULT_ENV_PREFIX) -> ApiSettings:
    overrides = _env_overrides(env_prefix, ("api",))
    return _section(overrides, ApiSettings, "api")


__all__ = [
    "FetchSettings",
    "OutputSettings",
    "ApiSettings",
    "JobConfig",
    "load_config",
    "load_api_settings",
    "map_dict_to_config",
]
