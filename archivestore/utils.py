from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Any
import yaml


def ensure_dir(path: Path) -> None:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)


# Media file extensions
VIDEO_EXTS = {".mp4", ".webm"}
IMAGE_EXTS = {".jpg", ".jpeg", ".png"}
MEDIA_EXTS = VIDEO_EXTS | IMAGE_EXTS

# Extension sets without dots for easier matching
VIDEO_EXTS_NO_DOT = {"mp4", "webm"}
IMAGE_EXTS_NO_DOT = {"jpg", "jpeg", "png"}

# Store assets directory
STORE_ASSETS_DIR = ".archivestore"
CONFIG_FILENAME = "config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "source": "data/items.csv",
    "media_root": "data",
    "match": "substring",
    "timeout": 10.0,
}


def get_logger() -> logging.Logger:
    """Return the package logger."""
    return logging.getLogger("archivestore")


def discover_media_files(media_root: Path, extensions: Iterable[str] = MEDIA_EXTS) -> Dict[str, str]:
    """Collect all media files under a media root.

    Paths are rooted at the media root's own name, so a file at
    ``data/1979/dove/foo.mp4`` is reported as ``/data/1979/dove/foo.mp4``.

    Args:
        media_root: Directory to scan recursively
        extensions: Accepted file extensions (with leading dot)

    Returns:
        Mapping of lower-cased path to actual path, in sorted path order
    """
    log = get_logger()
    media_root = Path(media_root)
    exts = {e.lower() for e in extensions}

    if not media_root.is_dir():
        log.warning(f"Media root {media_root} does not exist; no assets will resolve")
        return {}

    base = media_root.resolve().parent
    found = []
    for entry in media_root.resolve().rglob("*"):
        if entry.is_file() and entry.suffix.lower() in exts:
            found.append("/" + entry.relative_to(base).as_posix())

    log.debug(f"Discovered {len(found)} media files under {media_root}")
    return {path.lower(): path for path in sorted(found)}


def determine_media_type(path: str) -> str:
    """Determine media type from a file path's extension.

    Args:
        path: File path (may be empty)

    Returns:
        "video", "image" or "unknown"
    """
    ext = Path(path).suffix.lower().lstrip('.')

    if ext in VIDEO_EXTS_NO_DOT:
        return "video"
    elif ext in IMAGE_EXTS_NO_DOT:
        return "image"
    else:
        return "unknown"


def load_config(config_dir: Path) -> Dict[str, Any]:
    """Load configuration from .archivestore/config.yaml if it exists.

    Args:
        config_dir: The directory to look for config in

    Returns:
        Dictionary containing config values, empty dict if no config found
    """
    config_path = Path(config_dir) / STORE_ASSETS_DIR / CONFIG_FILENAME

    if not config_path.exists():
        return {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        # A corrupted config file behaves like no config
        get_logger().warning(f"Ignoring unreadable config {config_path}: {e}")
        return {}

    return config if isinstance(config, dict) else {}


def save_config(config_dir: Path, config: Dict[str, Any]) -> Path:
    """Save configuration to .archivestore/config.yaml.

    Args:
        config_dir: The directory to save config in
        config: Configuration dictionary to save

    Returns:
        Path of the written config file
    """
    target_dir = Path(config_dir) / STORE_ASSETS_DIR
    config_path = target_dir / CONFIG_FILENAME

    ensure_dir(target_dir)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)

    return config_path


def merge_config_with_args(config: Dict[str, Any], cli_args: Dict[str, Any]) -> Dict[str, Any]:
    """Merge config values with CLI arguments, with CLI taking precedence.

    Args:
        config: Configuration from config.yaml
        cli_args: Arguments passed via CLI

    Returns:
        Merged configuration with CLI args taking precedence
    """
    merged = config.copy()

    # CLI args override config values
    for key, value in cli_args.items():
        if value is not None:  # Only override if CLI arg was actually provided
            merged[key] = value

    return merged
