"""Configuration management for Branch Outline."""

import os
import sys
import json
from pathlib import Path

APP_NAME = "BranchOutline"

DEFAULT_CONFIG = {
    "categories": {},  # dict[str, list[str]] - category name -> repository paths
    "document_path": None,  # str | None, defaults to <config dir>/branches.org
    "status_command": "git status",  # run in a terminal by the status action
    "theme": "dark",  # "dark" | "light"
    "window_geometry": None,  # str | None
}


def _config_dir() -> Path:
    """Get the platform-specific configuration directory."""
    if sys.platform.startswith("win"):
        base = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(base) / APP_NAME
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        return Path(base) / APP_NAME


def _config_path() -> Path:
    """Get the configuration file path."""
    return _config_dir() / "settings.json"


def _defaults() -> dict:
    # categories is mutable, so never hand out the module-level dict
    return json.loads(json.dumps(DEFAULT_CONFIG))


def load_config(path: Path | None = None) -> dict:
    """Load configuration from file, falling back to defaults."""
    p = path or _config_path()
    try:
        with p.open("r", encoding="utf-8") as f:
            cfg = json.load(f)
    except (OSError, ValueError):
        return _defaults()
    if not isinstance(cfg, dict):
        return _defaults()
    for k, v in _defaults().items():
        cfg.setdefault(k, v)
    return cfg


def save_config(cfg: dict, path: Path | None = None):
    """Save configuration to file."""
    p = path or _config_path()
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.parent / f".{p.name}.tmp"
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)
    tmp.replace(p)


def get_categories(cfg: dict) -> dict[str, list[str]]:
    """Get the category -> repository paths mapping."""
    return cfg.get("categories") or {}


def add_repository(cfg: dict, category: str, repo_path: Path | str):
    """Add a repository path to a category, creating the category if needed."""
    s = str(repo_path)
    repos = cfg.setdefault("categories", {}).setdefault(category, [])
    if s not in repos:
        repos.append(s)


def remove_repository(cfg: dict, category: str, repo_path: Path | str):
    """Remove a repository path from a category; empty categories are dropped."""
    categories = cfg.get("categories", {})
    repos = categories.get(category)
    if not repos:
        return
    s = str(repo_path)
    if s in repos:
        repos.remove(s)
    if not repos:
        del categories[category]


def get_document_path(cfg: dict) -> Path:
    """Get the path of the org document holding the outline."""
    p = cfg.get("document_path")
    if p:
        return Path(p).expanduser()
    return _config_dir() / "branches.org"


def get_status_command(cfg: dict) -> str:
    """Get the command the status action runs inside a repository."""
    return cfg.get("status_command") or "git status"
