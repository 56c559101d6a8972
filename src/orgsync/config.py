from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError
from .github.client import GITHUB_API_URL
from .sync.hierarchy import DELETE_FAILURE_POLICIES

DEFAULT_TEAM_PREFIX = "org-"

ENV_DATA_URL = "ORG_CHART_DATA_URL"
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
ENV_GITHUB_ORG = "GITHUB_ORG"

_TRUE = {"true", "yes", "on", "1"}
_FALSE = {"false", "no", "off", "0", ""}


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key} must be true or false, got {value!r}")


@dataclass
class SyncConfig:
    """
    Settings for one sync run. `raw` is the YAML mapping; `overrides` holds
    values given on the command line. Lookup order is override, environment,
    YAML, default.
    """

    raw: Dict[str, Any] = field(default_factory=dict)
    overrides: Dict[str, Any] = field(default_factory=dict)

    def _github(self) -> Dict[str, Any]:
        return self.raw.get("github") or {}

    def _pick(self, key: str, env: Optional[str], yaml_value: Any, default: Any = None) -> Any:
        if self.overrides.get(key) is not None:
            return self.overrides[key]
        if env and os.getenv(env):
            return os.getenv(env)
        if yaml_value is not None:
            return yaml_value
        return default

    @property
    def data_url(self) -> Optional[str]:
        return self._pick("data_url", ENV_DATA_URL, self.raw.get("data_url"))

    @property
    def github_token(self) -> Optional[str]:
        return self._pick("github_token", ENV_GITHUB_TOKEN, self._github().get("token"))

    @property
    def github_org(self) -> Optional[str]:
        return self._pick("github_org", ENV_GITHUB_ORG, self._github().get("org"))

    @property
    def team_prefix(self) -> str:
        return str(self._pick("team_prefix", None, self._github().get("team_prefix"), DEFAULT_TEAM_PREFIX))

    @property
    def api_url(self) -> str:
        return str(self._pick("api_url", None, self._github().get("api_url"), GITHUB_API_URL))

    @property
    def page_size(self) -> int:
        return _as_int("github.page_size", self._github().get("page_size", 100))

    @property
    def timeout_s(self) -> int:
        return _as_int("github.timeout_s", self._github().get("timeout_s", 30))

    @property
    def dry_run(self) -> bool:
        return _as_bool("dry_run", self._pick("dry_run", None, self.raw.get("dry_run"), False))

    @property
    def delete_failure(self) -> str:
        return str(self._pick("delete_failure", None, self.raw.get("delete_failure"), "propagate"))

    def validate(self) -> None:
        missing = []
        if not self.data_url:
            missing.append(f"data_url (--data-url or {ENV_DATA_URL})")
        if not self.github_token:
            missing.append(f"github token (--github-token or {ENV_GITHUB_TOKEN})")
        if not self.github_org:
            missing.append(f"github org (--github-org or {ENV_GITHUB_ORG})")
        if missing:
            raise ConfigError("Missing required settings: " + ", ".join(missing))
        if self.delete_failure not in DELETE_FAILURE_POLICIES:
            raise ConfigError(
                f"delete_failure must be one of {', '.join(DELETE_FAILURE_POLICIES)}, got '{self.delete_failure}'"
            )
        if self.page_size < 1 or self.page_size > 100:
            raise ConfigError("github.page_size must be between 1 and 100")
        if self.timeout_s < 1:
            raise ConfigError("github.timeout_s must be a positive number of seconds")
        _as_bool("dry_run", self._pick("dry_run", None, self.raw.get("dry_run"), False))


def load_config(path: Optional[Path], overrides: Optional[Dict[str, Any]] = None) -> SyncConfig:
    """
    Read the optional YAML config file. A missing file is fine when it was
    not asked for explicitly; callers pass None in that case.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Config file not found: {p}")
        try:
            data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse YAML at {p}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config at {p} must be a mapping")
    return SyncConfig(raw=data, overrides=dict(overrides or {}))
