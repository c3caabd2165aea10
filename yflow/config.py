"""
Configuration loading for the yflow command line.

The configuration lives in a `.i18nrc.json` file. Environment variables
override file values; the override step is a pure function of the file
content and an environment snapshot so the precedence can be tested directly.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from yflow.logger import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = ".i18nrc.json"

# Transfer configuration constants
DEFAULT_BATCH_SIZE = 50  # Keys pushed per request
DEFAULT_BATCH_DELAY = 0.2  # Seconds between batches of one language
DEFAULT_MAX_RETRIES = 3  # Attempts per batch when rate limited
DEFAULT_RETRY_AFTER = 60  # Seconds, when a 429 carries no usable Retry-After
DEFAULT_TIMEOUT = 30  # Read timeout for API calls, seconds

SYNC_FILE_NAME = "sync.json"  # File created for languages with no local files
MAX_REPORTED_FAILED_KEYS = 10

# Environment variable -> config field
ENV_OVERRIDES = {
    "I18N_MESSAGES_DIR": "messagesDir",
    "I18N_PROJECT_ID": "projectId",
    "I18N_API_URL": "apiUrl",
    "I18N_API_KEY": "apiKey",
}

SAMPLE_CONFIG = {
    "messagesDir": "./src/locales",
    "projectId": 1,
    "apiUrl": "http://localhost:8080/api",
    "apiKey": "your-api-key-here",
    "languageMapping": {},
}


class ConfigError(Exception):
    """Configuration error with an actionable hint for the user."""

    def __init__(self, message: str, hint: str = None):
        super().__init__(message)
        self.hint = hint


@dataclass
class I18nConfig:
    """Validated configuration for one run."""
    messages_dir: Path
    project_id: int
    api_url: str
    api_key: str
    language_mapping: Dict[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay: float = DEFAULT_BATCH_DELAY
    max_retries: int = DEFAULT_MAX_RETRIES
    source_path: Optional[Path] = None  # Config file this was loaded from


def get_default_config_path() -> Path:
    """Get the default config file path in the current directory."""
    return Path.cwd() / CONFIG_FILENAME


def resolve_config_path(config_path: Optional[Path] = None) -> Path:
    """
    Find the configuration file.

    Search order:
    1. Explicit path (must exist)
    2. .i18nrc.json in the current directory
    3. .i18nrc.json in the user's home directory

    Raises:
        ConfigError: If no configuration file is found
    """
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(
                f"Config file not found: {path}",
                hint="Check the --config path or run 'yflow init' to create one",
            )
        return path

    current_config = get_default_config_path()
    if current_config.exists():
        return current_config

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config

    raise ConfigError(
        f"Config file not found. Expected at: {current_config} (current dir) or ~/{CONFIG_FILENAME}",
        hint="Run 'yflow init' to create a sample configuration",
    )


def config_exists(config_path: Optional[Path] = None) -> bool:
    """Check whether a configuration file can be found."""
    try:
        resolve_config_path(config_path)
        return True
    except ConfigError:
        return False


def resolve_config(base: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """
    Apply environment overrides to raw config values.

    Environment variables take precedence over file values. Empty environment
    values are ignored.

    Args:
        base: Raw config dictionary (as read from the file)
        environ: Environment snapshot, e.g. os.environ

    Returns:
        New dictionary with overrides applied

    Raises:
        ConfigError: If I18N_PROJECT_ID is not an integer
    """
    merged = dict(base)
    for env_name, config_key in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if not value:
            continue
        if config_key == "projectId":
            try:
                merged[config_key] = int(value)
            except ValueError:
                raise ConfigError(
                    f"{env_name} must be an integer, got: {value!r}",
                    hint=f"Unset {env_name} or set it to a positive project ID",
                )
        else:
            merged[config_key] = value
        logger.debug(f"Config field '{config_key}' overridden by {env_name}")
    return merged


def normalize_api_url(api_url: str) -> str:
    """Strip whitespace and trailing slashes from an API base URL."""
    return api_url.strip().rstrip('/')


def _is_positive_int(value: Any) -> bool:
    # bool is a subclass of int
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def validate_config(raw: Dict[str, Any]) -> List[str]:
    """
    Validate raw config values.

    Returns:
        List of problems (empty when the config is valid)
    """
    errors = []

    if not raw.get("messagesDir") or not isinstance(raw.get("messagesDir"), str):
        errors.append("messagesDir (messages directory path) is required")

    if not _is_positive_int(raw.get("projectId")):
        errors.append("projectId must be a positive integer")

    api_url = raw.get("apiUrl")
    if not api_url or not isinstance(api_url, str) or not api_url.strip():
        errors.append("apiUrl (API URL) is required")
    else:
        normalized = normalize_api_url(api_url)
        if not normalized.startswith(("http://", "https://")):
            errors.append(f"apiUrl must start with 'http://' or 'https://', got: {normalized}")

    if not raw.get("apiKey") or not isinstance(raw.get("apiKey"), str):
        errors.append("apiKey (API key) is required")

    mapping = raw.get("languageMapping")
    if mapping is not None:
        if not isinstance(mapping, dict) or not all(
            isinstance(k, str) and isinstance(v, str) and k and v for k, v in mapping.items()
        ):
            errors.append("languageMapping must be an object of local code -> remote code strings")

    if "timeout" in raw and not _is_positive_number(raw["timeout"]):
        errors.append("timeout must be a positive number of seconds")
    if "batchSize" in raw and not _is_positive_int(raw["batchSize"]):
        errors.append("batchSize must be a positive integer")
    if "batchDelay" in raw and (
        not isinstance(raw["batchDelay"], (int, float)) or isinstance(raw["batchDelay"], bool) or raw["batchDelay"] < 0
    ):
        errors.append("batchDelay must be a non-negative number of seconds")
    if "maxRetries" in raw and not _is_positive_int(raw["maxRetries"]):
        errors.append("maxRetries must be a positive integer")

    return errors


def build_config(raw: Dict[str, Any], base_dir: Optional[Path] = None, source_path: Optional[Path] = None) -> I18nConfig:
    """
    Validate raw values and turn them into an I18nConfig.

    Args:
        raw: Config dictionary with environment overrides already applied
        base_dir: Directory relative messagesDir values are resolved against
        source_path: Config file the values came from

    Raises:
        ConfigError: If validation fails
    """
    errors = validate_config(raw)
    if errors:
        raise ConfigError(
            "Config validation failed:\n" + "\n".join(f"  - {e}" for e in errors),
            hint=f"Fix the fields above in {source_path or CONFIG_FILENAME} or the I18N_* environment variables",
        )

    messages_dir = Path(raw["messagesDir"]).expanduser()
    if not messages_dir.is_absolute() and base_dir is not None:
        messages_dir = base_dir / messages_dir

    return I18nConfig(
        messages_dir=messages_dir,
        project_id=raw["projectId"],
        api_url=normalize_api_url(raw["apiUrl"]),
        api_key=raw["apiKey"],
        language_mapping=dict(raw.get("languageMapping") or {}),
        timeout=raw.get("timeout", DEFAULT_TIMEOUT),
        batch_size=raw.get("batchSize", DEFAULT_BATCH_SIZE),
        batch_delay=raw.get("batchDelay", DEFAULT_BATCH_DELAY),
        max_retries=raw.get("maxRetries", DEFAULT_MAX_RETRIES),
        source_path=source_path,
    )


def load_config(config_path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> I18nConfig:
    """
    Load, override and validate the configuration.

    Args:
        config_path: Optional explicit config file path
        environ: Environment snapshot (defaults to os.environ)

    Returns:
        Validated I18nConfig

    Raises:
        ConfigError: If the file is missing, unreadable, malformed or invalid
    """
    path = resolve_config_path(config_path)
    logger.debug(f"Loading config file: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"Invalid config file format: {path}: {e}",
            hint="The config file must be valid JSON",
        )
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {path}: {e}")

    if not isinstance(raw, dict):
        raise ConfigError(
            f"Invalid config file format: {path}: expected a JSON object",
            hint="Run 'yflow init' to see the expected layout",
        )

    raw = resolve_config(raw, os.environ if environ is None else environ)
    config = build_config(raw, base_dir=path.resolve().parent, source_path=path)
    logger.debug(f"Configuration loaded: project {config.project_id}, messages dir {config.messages_dir}")
    return config


def create_sample_config() -> str:
    """Return the content of a sample configuration file."""
    return json.dumps(SAMPLE_CONFIG, indent=2, ensure_ascii=False) + "\n"
