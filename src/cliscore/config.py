"""Configuration loading and result persistence for cliscore.

Settings come from, in increasing priority: built-in defaults,
``~/.keyscore-cli/config.json``, the OS keychain (API key only, when the
file has none) and ``CLISCORE_*`` environment variables. The resulting
:class:`Config` is built once by the CLI and passed explicitly to whatever
needs it.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Sequence

from cliscore import token_store
from cliscore.client import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".keyscore-cli"
CONFIG_FILE_NAME = "config.json"
DEFAULT_SPINNER_STYLE = "default"

_ENV_PREFIX = "CLISCORE_"
_UNSAFE_FILENAME_CHARS = re.compile(r"""[/\\:*?"<>| @#$%^&()+=\[\]{};',.]""")


class ConfigError(Exception):
    """Raised when the configuration or results cannot be written."""


def _config_dir(home: Path | None = None) -> Path:
    return (home or Path.home()) / CONFIG_DIR_NAME


def config_path(home: Path | None = None) -> Path:
    return _config_dir(home) / CONFIG_FILE_NAME


def config_file_exists(home: Path | None = None) -> bool:
    return config_path(home).is_file()


def default_results_dir(home: Path | None = None) -> Path:
    return _config_dir(home) / "results"


@dataclass(frozen=True)
class Config:
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    results_dir: Path = Path("results")
    save_results: bool = False
    spinner_style: str = DEFAULT_SPINNER_STYLE

    def to_json(self, include_api_key: bool = True) -> dict[str, Any]:
        return {
            "baseURL": self.base_url,
            "apiKey": self.api_key if include_api_key else "",
            "resultsDir": str(self.results_dir),
            "saveResults": self.save_results,
            "spinnerStyle": self.spinner_style,
        }


def _read_config_file(path: Path) -> dict[str, Any] | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", path)
        return None
    logger.debug("Loaded config from %s", path)
    return data


def _env_flag(value: str) -> bool:
    return value in ("true", "1")


def load_config(
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Config:
    """Build the effective configuration."""
    environ = os.environ if environ is None else environ

    values: dict[str, Any] = {
        "base_url": DEFAULT_BASE_URL,
        "api_key": "",
        "results_dir": default_results_dir(home),
        "save_results": False,
        "spinner_style": DEFAULT_SPINNER_STYLE,
    }

    stored = _read_config_file(config_path(home))
    if stored is not None:
        if stored.get("baseURL"):
            values["base_url"] = str(stored["baseURL"])
        if stored.get("apiKey"):
            values["api_key"] = str(stored["apiKey"])
        if stored.get("resultsDir"):
            values["results_dir"] = Path(stored["resultsDir"])
        values["save_results"] = bool(stored.get("saveResults", False))
        if stored.get("spinnerStyle"):
            values["spinner_style"] = str(stored["spinnerStyle"])

    if not values["api_key"]:
        values["api_key"] = token_store.load_api_key() or ""

    if environ.get(f"{_ENV_PREFIX}BASE_URL"):
        values["base_url"] = environ[f"{_ENV_PREFIX}BASE_URL"]
    if environ.get(f"{_ENV_PREFIX}API_KEY"):
        values["api_key"] = environ[f"{_ENV_PREFIX}API_KEY"]
    if environ.get(f"{_ENV_PREFIX}RESULTS_DIR"):
        values["results_dir"] = Path(environ[f"{_ENV_PREFIX}RESULTS_DIR"])
    if environ.get(f"{_ENV_PREFIX}SAVE_RESULTS"):
        values["save_results"] = _env_flag(environ[f"{_ENV_PREFIX}SAVE_RESULTS"])
    if environ.get(f"{_ENV_PREFIX}SPINNER_STYLE"):
        values["spinner_style"] = environ[f"{_ENV_PREFIX}SPINNER_STYLE"]

    return Config(**values)


def save_config(
    config: Config,
    home: Path | None = None,
    store_key_in_keychain: bool = False,
) -> Path:
    """Write *config* to the config file and return its path.

    With *store_key_in_keychain* the API key goes to the OS keychain and is
    left out of the file; if the keychain refuses it, it is written to the
    file as usual.
    """
    in_keychain = store_key_in_keychain and token_store.save_api_key(config.api_key)
    path = config_path(home)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(config.to_json(include_api_key=not in_keychain), indent=2),
            encoding="utf-8",
        )
    except OSError as exc:
        raise ConfigError(f"failed to write config file: {exc}") from exc
    return path


def make_safe_filename(value: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", value)


def results_file_path(
    config: Config,
    command: str,
    terms: Sequence[str],
    types: Sequence[str],
    now: datetime | None = None,
) -> Path:
    now = now or datetime.now()
    safe_terms = make_safe_filename("_".join(terms))
    safe_types = make_safe_filename("_".join(types))
    timestamp = now.strftime("%Y%m%d-%H%M%S")
    return Path(config.results_dir) / f"{command}_{safe_terms}_{safe_types}_{timestamp}.json"


def save_results(
    config: Config,
    data: Any,
    command: str,
    terms: Sequence[str],
    types: Sequence[str],
    now: datetime | None = None,
) -> Path | None:
    """Persist a command's results as JSON when saving is enabled.

    Returns the written path, or None if ``config.save_results`` is off.
    """
    if not config.save_results:
        return None

    now = now or datetime.now().astimezone()
    path = results_file_path(config, command, terms, types, now=now)
    document = {
        "timestamp": now.isoformat(timespec="seconds"),
        "command": command,
        "terms": list(terms),
        "types": list(types),
        "results": data,
    }
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(document, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
    except OSError as exc:
        raise ConfigError(f"failed to write results file: {exc}") from exc
    logger.debug("Saved %s results to %s", command, path)
    return path
