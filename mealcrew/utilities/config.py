"""Configuration management for the MealCrew application."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
APP_BASE_URL: Final[str] = os.getenv('APP_BASE_URL', f'http://localhost:{APP_PORT}').rstrip('/')
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# AI Configuration
OPENAI_MODEL: Final[str] = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')

# Form links
FORM_LINK_TTL_DAYS: Final[int] = int(os.getenv('FORM_LINK_TTL_DAYS', '30'))
PUBLIC_MEALS_CACHE_TTL: Final[int] = int(os.getenv('PUBLIC_MEALS_CACHE_TTL', '60'))

# Rate limiting (requests per window, window in seconds)
FORM_GEN_RATE_LIMIT: Final[int] = int(os.getenv('FORM_GEN_RATE_LIMIT', '10'))
FORM_GEN_RATE_WINDOW: Final[int] = int(os.getenv('FORM_GEN_RATE_WINDOW', '60'))
SUBMISSION_RATE_LIMIT: Final[int] = int(os.getenv('SUBMISSION_RATE_LIMIT', '5'))
SUBMISSION_RATE_WINDOW: Final[int] = int(os.getenv('SUBMISSION_RATE_WINDOW', '300'))

# Sessions
SESSION_COOKIE_NAME: Final[str] = os.getenv('SESSION_COOKIE_NAME', 'mealcrew_session')
SESSION_TTL_DAYS: Final[int] = int(os.getenv('SESSION_TTL_DAYS', '14'))
COOKIE_SECURE: Final[bool] = os.getenv('COOKIE_SECURE', 'False').lower() == 'true'

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('DATA_DIR', str(BASE_DIR / 'data')))
STATIC_DIR: Final[Path] = BASE_DIR / 'static'
TEMPLATES_DIR: Final[Path] = BASE_DIR / 'templates'
