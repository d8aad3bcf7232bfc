# hifzquiz/settings.py
import json
import os
import sys
from pathlib import Path
from typing import Optional

import platformdirs
from colorama import Fore, Style
from pydantic import BaseModel, Field

from .utils import get_app_path

# --- Constants for platformdirs ---
APP_NAME = "HifzQuiz"
APP_AUTHOR = "HifzLab"

SETTINGS_FILENAME = "HifzQuiz-Settings.json"

# Environment variables take precedence over the settings file
ENV_OVERRIDES = {
    "HIFZQUIZ_DATA_DIR": "data_dir",
    "HIFZQUIZ_DATA_URL": "data_url",
    "HIFZQUIZ_CACHE_DIR": "cache_dir",
}


def default_settings_path() -> Path:
    """Settings file next to the executable on Windows, in the user config dir elsewhere."""
    if sys.platform == "win32":
        return Path(get_app_path(SETTINGS_FILENAME, writable=True))
    return Path(platformdirs.user_config_dir(APP_NAME, APP_AUTHOR)) / SETTINGS_FILENAME


def default_cache_dir() -> Path:
    if sys.platform == "win32":
        return Path(get_app_path('cache', writable=True)) / 'datasets'
    return Path(platformdirs.user_cache_dir(APP_NAME, APP_AUTHOR)) / 'datasets'


def default_data_dir() -> Path:
    """Datasets bundled with the application (read-only)."""
    return Path(get_app_path('data', writable=False))


class QuizSettings(BaseModel):
    data_dir: Optional[Path] = Field(default_factory=default_data_dir)
    data_url: Optional[str] = None          # base URL the datasets are downloaded from
    cache_dir: Optional[Path] = Field(default_factory=default_cache_dir)
    request_timeout: float = Field(default=10, gt=0)
    max_attempts: int = Field(default=25, ge=1)
    foreign_verse_attempts: int = Field(default=50, ge=1)
    mask_fraction: float = Field(default=0.25, gt=0, le=1)
    partial_fraction: float = Field(default=0.5, gt=0, le=1)
    theme_color: str = "red"
    arabic_reversed: bool = False          # reverse shaped Arabic for terminals that render it backwards

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "QuizSettings":
        """Load settings from the JSON settings file, then apply environment overrides."""
        path = Path(path) if path else default_settings_path()
        data = {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                print(f"{Fore.YELLOW}Settings file '{path}' is not a JSON object, using defaults.{Style.RESET_ALL}", file=sys.stderr)
                data = {}
        except FileNotFoundError:
            pass
        except json.JSONDecodeError:
            print(f"{Fore.YELLOW}Settings file '{path}' is corrupted, using defaults.{Style.RESET_ALL}", file=sys.stderr)
            data = {}

        for env_name, field_name in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                data[field_name] = value

        return cls(**data)

    def save(self, path: Optional[Path] = None):
        path = Path(path) if path else default_settings_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.model_dump_json(indent=2))
