"""
Settings bootstrap for pinboundary.

Every entry point (CLI, API, library callers that want file-based config)
reads configuration through `load_settings()` first. Built-in defaults mean a
missing config file still yields a working setup; the YAML only needs the
keys it changes.
"""

from __future__ import annotations

import os
import copy
from pathlib import Path
from typing import Any

import yaml

from pinboundary.log import configure_logging

DEFAULT_SETTINGS: dict[str, Any] = {
    "project": {"log_dir": "logs", "log_level": "INFO"},
    "google": {
        "geocode_url": "https://maps.googleapis.com/maps/api/geocode/json",
        "roads_url": "https://roads.googleapis.com/v1/snapToRoads",
        "places_url": "https://maps.googleapis.com/maps/api/place/nearbysearch/json",
        "country": "IN",
        "request_timeout_s": 10,
        "min_request_interval_s": 0.0,
        "max_retries": 2,
        "retry_backoff_initial_s": 0.5,
        "retry_backoff_max_s": 5.0,
    },
    "boundary": {
        "ray_count": 180,
        "jitter_min": 0.85,
        "jitter_max": 1.15,
        "default_radius_m": 1000.0,
        "min_radius_m": 500.0,
        "max_radius_m": 3000.0,
        "snap_batch_size": 90,
        "snap_batch_delay_s": 0.1,
        "min_snapped_points": 20,
        "smoothing_iterations": 3,
        "simplicity_fallback": "convex_hull",
    },
    "api": {"host": "127.0.0.1", "port": 8000},
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    # Copy the base mapping so we never mutate caller-owned dictionaries.
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        # If both sides are dictionaries, merge recursively so config files can override a nested subset.
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(path: Path) -> dict[str, Any]:
    # Treat missing YAML files as "no overrides" so the built-in defaults apply.
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        # `safe_load` avoids executing arbitrary YAML tags.
        data = yaml.safe_load(f) or {}
    # We expect config files to be YAML mappings (key/value), not lists or scalars.
    if not isinstance(data, dict):
        raise ValueError(f"YAML must be a mapping: {path}")
    return data


def _load_dotenv_if_present(dotenv_path: Path) -> None:
    # `.env` is optional; if it's missing we simply rely on the existing environment.
    if not dotenv_path.exists():
        return
    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        # Skip empty lines, comment lines, or malformed lines that are not key/value pairs.
        if not line or line.startswith("#") or "=" not in line:
            continue
        # Split only once so values may legally contain "=" characters.
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        # Do NOT override an already-set environment variable.
        os.environ.setdefault(key, value)


def _resolve_project_root(config_path: Path) -> Path:
    config_dir = config_path.resolve().parent
    # If the user points at config/default.yaml, the project root is the parent of `config/`.
    if config_dir.name == "config":
        return config_dir.parent
    return config_dir


def load_settings(config_path: Path, *, configure_logs: bool = True) -> dict[str, Any]:
    """
    Load built-in defaults merged with the YAML config file (if present).
    Also loads `.env` and initializes logging.
    """
    config_path = Path(config_path).resolve()
    root = _resolve_project_root(config_path)

    # Load `.env` before anything reads credentials from the environment.
    _load_dotenv_if_present(root / ".env")

    settings = _deep_merge(copy.deepcopy(DEFAULT_SETTINGS), _load_yaml(config_path))

    project = settings["project"]
    log_dir = root / str(project.get("log_dir", "logs"))
    if configure_logs:
        logger = configure_logging(log_dir, level=str(project.get("log_level", "INFO")))
        logger.info("Loaded settings: config=%s", config_path)

    settings["_meta"] = {"config_path": str(config_path), "exists": config_path.exists()}
    # Store resolved paths as strings so settings stays JSON-serializable.
    settings["paths"] = {"root": str(root), "logs_dir": str(log_dir)}
    return settings
