# Configuration settings should be set in app.config
# The HyperShape class attributes hold the defaults, environment variables are used as a last resort
import os
import logging
from flask import current_app
import hypershape
from typing import Any, Optional


def get_config(option: str) -> Optional[Any]:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # KeyError: not set in the app config, RuntimeError: no application context
        result = getattr(hypershape.HyperShape, option, os.environ.get(option, None))
    return result


def get_int_config(option: str) -> int:
    """
    :param option: configuration parameter
    :return: integer configuration value
    """
    value = get_config(option)
    try:
        return int(value)
    except (TypeError, ValueError):
        from .errors import ConfigurationMissingError

        raise ConfigurationMissingError(f"Invalid integer configuration {option}={value!r}")


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return hypershape.log.getEffectiveLevel() < logging.INFO
