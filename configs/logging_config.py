"""
logging_config.py - Configure logging for the backend server.
"""

import logging

from configs.appconfig import LOG_LEVEL


def configure_logging_for_backend(level=None):
    """
    Configure root logging for the API process.

    This should be called once, BEFORE uvicorn starts, so that module
    loggers (skill_tools.*, backend.*) share one handler and format.
    uvicorn keeps its own access log handlers.
    """
    level = level or LOG_LEVEL
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)-8s %(name)s: %(message)s',
    )
    logging.getLogger(__name__).debug(f'Logging configured at level {level}')
