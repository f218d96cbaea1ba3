# Configuration settings should be set in app.config
# The CLOCKTOWER class variables hold the defaults, these can be overridden
# with CLOCKTOWER(app, **kwargs) or with environment variables
import os
import logging
from flask import current_app
import clocktower
from typing import Any


def get_config(option: str) -> Any:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value, None if the option isn't set anywhere
    """
    try:
        return current_app.config[option]
    except (KeyError, RuntimeError):
        # not configured in the app or working outside of the app context
        pass

    result = getattr(clocktower.CLOCKTOWER, option, None)
    if result is None:
        result = os.environ.get(option, None)
    return result


def get_int_config(option: str) -> int:
    """
    :param option: configuration parameter
    :return: the option value as an integer (environment variables are strings)
    """
    return int(get_config(option))


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return clocktower.log.getEffectiveLevel() < logging.INFO
