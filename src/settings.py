"""
Application settings.

Values come from the environment, with a .env file at the project root loaded
first through python-dotenv. CLI options take precedence over these values.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# .env next to pyproject.toml; variables already set in the environment win
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)

_TRUE_VALUES = ('true', '1', 'yes', 'on')


def get_setting(key: str, default: str = None) -> str:
    """
    Read a setting from the environment.

    A variable that is unset or blank (`DATA_INPUT_DIR=` in .env) falls back to
    `default`, so an empty line never turns a path into the current directory.

    Example:
        >>> SNAPSHOT_OUTPUT_DIR = get_setting('SNAPSHOT_OUTPUT_DIR', 'dist/enriched')
    """
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_flag(key: str, default: bool = False) -> bool:
    """Boolean setting: true, 1, yes or on (any case) enable it."""
    value = get_setting(key)
    if value is None:
        return default
    return value.lower() in _TRUE_VALUES


# Raw data written by the ingestion step (main/ and detailed/ folders)
DATA_INPUT_DIR = get_setting('DATA_INPUT_DIR', 'dist')

# Directory read by the serving layer
SNAPSHOT_OUTPUT_DIR = get_setting('SNAPSHOT_OUTPUT_DIR', 'dist/enriched')

# Database paths
SNAPSHOT_DB_PATH = get_setting('SNAPSHOT_DB_PATH', 'data/snapshots.db')
LOGS_DB_PATH = get_setting('LOGS_DB_PATH', 'data/logs.db')

# Print tracebacks on errors
DEBUG = get_flag('DEBUG')
