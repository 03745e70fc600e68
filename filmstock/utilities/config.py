"""Configuration management for the FilmStock inventory engine."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

from filmstock.utilities import constants

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '127.0.0.1')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
APP_VERSION: Final[str] = os.getenv('APP_VERSION', '1.0.0')
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Inventory rules
MAX_LOADED_FILMS: Final[int] = int(os.getenv('MAX_LOADED_FILMS', str(constants.MAX_LOADED_FILMS)))
EXPIRY_YEAR_MIN: Final[int] = int(os.getenv('EXPIRY_YEAR_MIN', str(constants.EXPIRY_YEAR_MIN)))
EXPIRY_YEAR_MAX: Final[int] = int(os.getenv('EXPIRY_YEAR_MAX', str(constants.EXPIRY_YEAR_MAX)))
HIDE_EMPTY_BY_DEFAULT: Final[bool] = os.getenv('HIDE_EMPTY_BY_DEFAULT', 'True').lower() == 'true'

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('FILMSTOCK_DATA_DIR', str(BASE_DIR / 'data')))
IMAGE_DIR: Final[Path] = Path(os.getenv('FILMSTOCK_IMAGE_DIR', str(DATA_DIR / 'images')))
