#!/usr/bin/env python3
"""
AIRA Skill Export Backend Server
Uses centralized host/port configuration from configs.appconfig
"""
from __future__ import annotations

import logging
import os
import sys

import uvicorn

# Add parent directory to path to import configs
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from configs.appconfig import AppConfig  # noqa: E402
from configs.appconfig import BACKEND_HOST  # noqa: E402
from configs.appconfig import BACKEND_PORT  # noqa: E402
from configs.logging_config import configure_logging_for_backend  # noqa: E402

logger = logging.getLogger(__name__)


def main():
    configure_logging_for_backend()
    logger.info(f'Starting skill export backend on {BACKEND_HOST}:{BACKEND_PORT}...')
    logger.info(f'API available at {AppConfig.get_api_base_url()}')
    uvicorn.run('backend.query_api:app', host=BACKEND_HOST, port=BACKEND_PORT, reload=False)


if __name__ == '__main__':
    main()
