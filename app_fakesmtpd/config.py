"""
fakesmtpd application configuration

This module provides utilities for loading and accessing environment variables
for fakesmtpd. It supports layered environment variable loading
(.env, .env.test, .env.prod) and provides convenient accessors for the
server configuration values. Command line arguments override these values.
"""
from pathlib import Path
from typing import Dict

from app_fakesmtpd.consts.fakesmtpd_const import (
    DEFAULT_HOST,
    DEFAULT_SMTP_PORT,
    DEFAULT_MESSAGE_DIR,
    DEFAULT_PIDFILE,
    DEFAULT_STARTUP_TIMEOUT,
    QUERY_PORT_OFFSET,
)
from common.utils.env_util import load_env


def get_base_dir() -> Path:
    """
    Get the project root directory.

    Returns:
        Path to the project root directory
    """
    # app_fakesmtpd/config.py -> app_fakesmtpd -> project root
    return Path(__file__).resolve().parent.parent


def get_env():
    """
    Load and return environment variables with layered support.

    Returns:
        environ.Env instance with loaded environment variables
    """
    return load_env(get_base_dir())


def get_query_port(smtp_port: int) -> int:
    """The query API always listens next to the SMTP port"""
    return smtp_port + QUERY_PORT_OFFSET


def get_app_config() -> Dict:
    """
    Get fakesmtpd configuration from environment variables.

    Returns:
        Dictionary containing fakesmtpd configuration values

    Raises:
        ConfigurationErrorException: If configuration values are invalid
    """
    from app_fakesmtpd.exceptions.configuration_error_exception import ConfigurationErrorException

    env = get_env()

    try:
        host = env("FAKESMTPD_HOST", default=DEFAULT_HOST)
        smtp_port = env.int("FAKESMTPD_SMTP_PORT", default=DEFAULT_SMTP_PORT)
        message_dir = env("FAKESMTPD_MESSAGE_DIR", default=DEFAULT_MESSAGE_DIR)
        pidfile = env("FAKESMTPD_PIDFILE", default=DEFAULT_PIDFILE)
        startup_timeout = env.float("FAKESMTPD_STARTUP_TIMEOUT", default=DEFAULT_STARTUP_TIMEOUT)
    except Exception as e:
        raise ConfigurationErrorException(
            f"Failed to load fakesmtpd configuration: {str(e)}"
        ) from e

    if not 1 <= smtp_port < 65535:
        raise ConfigurationErrorException(
            f"FAKESMTPD_SMTP_PORT must be between 1 and 65534, got {smtp_port}"
        )
    if startup_timeout <= 0:
        raise ConfigurationErrorException(
            f"FAKESMTPD_STARTUP_TIMEOUT must be positive, got {startup_timeout}"
        )

    return {
        "host": host,
        "smtp_port": smtp_port,
        "query_port": get_query_port(smtp_port),
        "message_dir": message_dir,
        "pidfile": pidfile,
        "startup_timeout": startup_timeout,
    }
