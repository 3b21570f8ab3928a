"""
Settings for youtube-uploader-cli.

Defaults can be overridden with an optional YAML file
(./youtube-uploader.yaml), for example:

    log_level: DEBUG
    archive_after_days: 14
    default_category_id: "27"
    default_privacy: unlisted
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigError
from .models import Privacy

DEFAULT_CONFIG_FILE = "youtube-uploader.yaml"

# OAuth2 scope required for YouTube upload
YOUTUBE_UPLOAD_SCOPE = "https://www.googleapis.com/auth/youtube.upload"

# Video category IDs (YouTube standard categories)
YOUTUBE_CATEGORIES = {
    "1": "Film & Animation",
    "2": "Autos & Vehicles",
    "10": "Music",
    "15": "Pets & Animals",
    "17": "Sports",
    "19": "Travel & Events",
    "20": "Gaming",
    "22": "People & Blogs",
    "23": "Comedy",
    "24": "Entertainment",
    "25": "News & Politics",
    "26": "Howto & Style",
    "27": "Education",
    "28": "Science & Technology",
    "29": "Nonprofits & Activism",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")

# Resumable chunks must be a multiple of 256 KiB
CHUNK_UNIT = 256 * 1024


@dataclass
class Settings:
    """Runtime settings, resolved to absolute paths."""

    tokens_path: Path = field(
        default_factory=lambda: Path.home() / "youtube-tokens.json"
    )
    client_secrets_path: Path = field(
        default_factory=lambda: Path.cwd() / "credentials.json"
    )
    logs_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")
    log_level: str = "INFO"
    archive_after_days: int = 7
    default_category_id: str = "22"  # People & Blogs
    default_privacy: Privacy = Privacy.PRIVATE
    upload_chunk_size: int = 32 * CHUNK_UNIT  # 8 MiB
    scopes: List[str] = field(default_factory=lambda: [YOUTUBE_UPLOAD_SCOPE])

    @property
    def category_name(self) -> str:
        return YOUTUBE_CATEGORIES.get(self.default_category_id, "Unknown")


_PATH_KEYS = {"tokens_path", "client_secrets_path", "logs_dir"}


def _resolve_path(value: Union[str, Path], base_dir: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _coerce(key: str, value: Any, base_dir: Path) -> Any:
    if key in _PATH_KEYS:
        return _resolve_path(value, base_dir)

    if key == "log_level":
        level = str(value).upper()
        if level == "WARNING":
            level = "WARN"
        if level not in LOG_LEVELS:
            raise ConfigError(
                f"Invalid log_level '{value}'. Use one of: {', '.join(LOG_LEVELS)}"
            )
        return level

    if key == "default_privacy":
        try:
            return Privacy(str(value).lower())
        except ValueError:
            raise ConfigError(
                f"Invalid default_privacy '{value}'. "
                f"Use one of: {', '.join(p.value for p in Privacy)}"
            ) from None

    if key == "archive_after_days":
        if not isinstance(value, int) or value < 0:
            raise ConfigError("archive_after_days must be a non-negative integer")
        return value

    if key == "upload_chunk_size":
        if not isinstance(value, int) or value <= 0 or value % CHUNK_UNIT:
            raise ConfigError(
                f"upload_chunk_size must be a positive multiple of {CHUNK_UNIT} bytes"
            )
        return value

    if key == "default_category_id":
        return str(value)

    if key == "scopes":
        if isinstance(value, str):
            value = [value]
        return [str(scope) for scope in value]

    return value


def load_settings(
    config_path: Optional[Union[str, Path]] = None,
    base_dir: Optional[Path] = None,
) -> Settings:
    """
    Load settings, applying overrides from a YAML file when present.

    Args:
        config_path: Path to the YAML file (default: ./youtube-uploader.yaml).
                     An explicitly given path must exist.
        base_dir: Directory relative paths are resolved against (default: cwd)

    Returns:
        Settings: Defaults merged with the file's values

    Raises:
        ConfigError: If the file is unreadable, malformed or has unknown keys
    """
    base_dir = Path(base_dir) if base_dir else Path.cwd()
    settings = Settings(
        client_secrets_path=base_dir / "credentials.json",
        logs_dir=base_dir / "logs",
    )

    if config_path is None:
        path = base_dir / DEFAULT_CONFIG_FILE
        if not path.exists():
            return settings
    else:
        path = _resolve_path(config_path, base_dir)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if data is None:
        return settings
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    overrides: Dict[str, Any] = {
        key: _coerce(key, value, base_dir) for key, value in data.items()
    }
    for key, value in overrides.items():
        setattr(settings, key, value)
    return settings
