"""
Scope Settings Management

Configuration of the scope indexer: whether scopes are produced, where the
ctags binary lives, how long it may run and how many files are analyzed in
parallel. Settings are read from config.json in the settings directory when
it exists, and environment variables override the file.
"""
import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional

from .constants import (
    CONFIG_FILE,
    DEFAULT_CTAGS_BINARY,
    DEFAULT_CTAGS_TIMEOUT,
    DEFAULT_MAX_WORKERS,
    SETTINGS_DIR,
)

logger = logging.getLogger(__name__)

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_number(name: str, value: str, kind, minimum):
    try:
        number = kind(value)
    except ValueError as e:
        raise ValueError(f"{name} must be a {kind.__name__}, got {value!r}") from e
    if number < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {number}")
    return number


def default_settings_dir() -> str:
    """Directory holding config.json (under the system temp directory)."""
    return os.path.join(tempfile.gettempdir(), SETTINGS_DIR)


@dataclass
class ScopeSettings:
    """Settings of the scope indexer."""
    enabled: bool = True
    ctags_binary: str = DEFAULT_CTAGS_BINARY
    ctags_timeout: float = DEFAULT_CTAGS_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    emit_containers: bool = False
    database_url: Optional[str] = None
    project_name: str = "default"

    def validate(self) -> "ScopeSettings":
        if not self.ctags_binary:
            raise ValueError("ctags_binary cannot be empty")
        if self.ctags_timeout <= 0:
            raise ValueError(f"ctags_timeout must be positive, got {self.ctags_timeout}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        return self

    @classmethod
    def from_env(
        cls,
        environ: Optional[Dict[str, str]] = None,
        base: Optional["ScopeSettings"] = None,
    ) -> "ScopeSettings":
        """
        Read settings from environment variables.

        Variables that are not set keep the value from ``base`` (defaults when
        no base is given).

        Variables: CODE_SCOPE_ENABLED, CODE_SCOPE_CTAGS, CODE_SCOPE_CTAGS_TIMEOUT,
        CODE_SCOPE_MAX_WORKERS, CODE_SCOPE_EMIT_CONTAINERS, CODE_SCOPE_PROJECT,
        ALLOYDB_CONNECTION_STRING.

        Raises:
            ValueError: If a variable holds an invalid value
        """
        env = os.environ if environ is None else environ
        settings = replace(base) if base is not None else cls()

        if 'CODE_SCOPE_ENABLED' in env:
            settings.enabled = _parse_bool('CODE_SCOPE_ENABLED', env['CODE_SCOPE_ENABLED'])
        if env.get('CODE_SCOPE_CTAGS'):
            settings.ctags_binary = env['CODE_SCOPE_CTAGS']
        if env.get('CODE_SCOPE_CTAGS_TIMEOUT'):
            settings.ctags_timeout = _parse_number(
                'CODE_SCOPE_CTAGS_TIMEOUT', env['CODE_SCOPE_CTAGS_TIMEOUT'], float, 0.001
            )
        if env.get('CODE_SCOPE_MAX_WORKERS'):
            settings.max_workers = _parse_number(
                'CODE_SCOPE_MAX_WORKERS', env['CODE_SCOPE_MAX_WORKERS'], int, 1
            )
        if 'CODE_SCOPE_EMIT_CONTAINERS' in env:
            settings.emit_containers = _parse_bool(
                'CODE_SCOPE_EMIT_CONTAINERS', env['CODE_SCOPE_EMIT_CONTAINERS']
            )
        if env.get('CODE_SCOPE_PROJECT'):
            settings.project_name = env['CODE_SCOPE_PROJECT']
        if env.get('ALLOYDB_CONNECTION_STRING'):
            settings.database_url = env['ALLOYDB_CONNECTION_STRING']

        return settings.validate()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScopeSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if k in known}).validate()

    @classmethod
    def from_file(cls, path: Optional[str] = None) -> "ScopeSettings":
        """
        Load settings from a JSON config file.

        Returns defaults when the file does not exist.
        """
        path = path or os.path.join(default_settings_dir(), CONFIG_FILE)
        if not os.path.exists(path):
            return cls()
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Settings file {path} must contain a JSON object")
        logger.info(f"Loaded scope settings from {path}")
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> "ScopeSettings":
        """Settings from config.json (if present) with environment overrides."""
        return cls.from_env(environ, base=cls.from_file(path))

    def to_dict(self) -> Dict[str, Any]:
        """Settings for display; the database URL is reduced to a flag."""
        data = asdict(self)
        data['database_url'] = bool(self.database_url)
        return data
