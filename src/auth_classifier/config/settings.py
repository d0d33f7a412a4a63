import json
import os
from pathlib import Path
from typing import Any, Dict, List

# Bundled with the package
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# Per-checkout overrides, gitignored
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
USER_CONFIG_DIR = PROJECT_ROOT / "config"

# Points at a directory of overrides, checked before USER_CONFIG_DIR
CONFIG_DIR_ENV = "AUTH_CLASSIFIER_CONFIG_DIR"


class ConfigLoader:
    """
    JSON config files, looked up in order:

    1. $AUTH_CLASSIFIER_CONFIG_DIR, when set
    2. <project root>/config
    3. the package defaults

    The first directory holding the file wins; files are not merged.
    """

    @staticmethod
    def search_paths(config_name: str) -> List[Path]:
        directories = [USER_CONFIG_DIR, PACKAGE_CONFIG_DIR]

        override = os.environ.get(CONFIG_DIR_ENV)
        if override:
            directories.insert(0, Path(override).expanduser())

        return [directory / config_name for directory in directories]

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Read the first `config_name` found on the search path.

        Raises:
            FileNotFoundError: If no directory holds the file
            ValueError: If the file found is not valid JSON
        """
        candidates = ConfigLoader.search_paths(config_name)

        for path in candidates:
            if not path.is_file():
                continue
            try:
                with open(path, encoding="utf-8") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Config file {path} is not valid JSON: {e}")

        searched = "\n".join(f" - {path}" for path in candidates)
        raise FileNotFoundError(f"Config file '{config_name}' not found in:\n{searched}")

    @staticmethod
    def load_parsers_config() -> Dict[str, Any]:
        """Export formats and their parser classes"""
        return ConfigLoader.load_config("parsers.json")
