# Application Configuration
# Centralized configuration for ports, storage directories and ARC constants
import os
from pathlib import Path


def _env_path(name, default):
    value = os.environ.get(name)
    return Path(value) if value else default


class AppConfig:
    """Centralized application configuration"""

    BASE_DIR = Path(__file__).parent.parent

    # Storage: one JSON file per skill, export artifacts kept separately
    DATA_DIR = _env_path('SKILL_DATA_DIR', BASE_DIR / 'data')
    EXPORT_DIR = _env_path('SKILL_EXPORT_DIR', BASE_DIR / 'exports')

    # Server Configuration
    BACKEND_HOST = os.environ.get('HOST', '0.0.0.0')
    BACKEND_PORT = int(os.environ.get('PORT', '5000'))
    BACKEND_URL = f"http://localhost:{BACKEND_PORT}"
    CORS_ORIGINS = [o.strip() for o in os.environ.get('SKILL_CORS_ORIGINS', '*').split(',') if o.strip()]

    # API Configuration
    API_PREFIX = "/api"

    LOG_LEVEL = os.environ.get('SKILL_LOG_LEVEL', 'INFO').upper()

    # ARC skill package constants
    ARC_VERSION = '2023.1'
    ARC_TARGET_CONTROLLER = 'EZ-B V4'
    ARC_COMPATIBLE_CONTROLLERS = ('EZ-B V4', 'EZ-B V5')
    ARC_PACKAGE_VERSION = '1.0.0'
    ARC_DEFAULT_SPEED = 10
    ARC_POSITION_PAUSE_MS = 1000

    @classmethod
    def get_api_base_url(cls):
        return f"{cls.BACKEND_URL}{cls.API_PREFIX}"


# For easy imports
DATA_DIR = AppConfig.DATA_DIR
EXPORT_DIR = AppConfig.EXPORT_DIR
BACKEND_HOST = AppConfig.BACKEND_HOST
BACKEND_PORT = AppConfig.BACKEND_PORT
BACKEND_URL = AppConfig.BACKEND_URL
API_PREFIX = AppConfig.API_PREFIX
LOG_LEVEL = AppConfig.LOG_LEVEL
