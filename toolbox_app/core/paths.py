from __future__ import annotations
import os
from pathlib import Path

APP_NAME = "MasonrySupportToolbox"


def user_data_dir() -> Path:
    """
    Writable root for run folders, logs and settings.
    %LOCALAPPDATA%\\MasonrySupportToolbox\\ on Windows, then %APPDATA%, then the home directory.
    """
    base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or str(Path.home())
    p = Path(base) / APP_NAME
    p.mkdir(parents=True, exist_ok=True)
    return p


def _subdir(name: str) -> Path:
    p = user_data_dir() / name
    p.mkdir(parents=True, exist_ok=True)
    return p


def logs_dir() -> Path:
    return _subdir("logs")


def settings_path() -> Path:
    return user_data_dir() / "settings.json"
