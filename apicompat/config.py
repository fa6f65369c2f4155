# Copyright Red Hat
#
# apicompat/config.py - API compatibility configuration file
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
API compatibility configuration file support.
"""
from configparser import ConfigParser, Error as ConfigParserError
from dataclasses import dataclass, field
from os.path import exists, expanduser, join
from typing import List
import logging

from apicompat import ApiCompatConfigError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Default configuration file path
APICOMPAT_CFG_PATH = join(expanduser("~"), ".config", "apicompat", "apicompat.conf")

#: Main configuration file section
_APICOMPAT_CFG_GLOBAL = "Global"

#: StrictMode configuration key
_APICOMPAT_CFG_STRICT_MODE = "StrictMode"

#: NoWarn configuration key
_APICOMPAT_CFG_NO_WARN = "NoWarn"

#: ExcludeAttributesFiles configuration key
_APICOMPAT_CFG_EXCLUDE_ATTRIBUTES_FILES = "ExcludeAttributesFiles"

#: DisableRules configuration key
_APICOMPAT_CFG_DISABLE_RULES = "DisableRules"

#: Jobs configuration key
_APICOMPAT_CFG_JOBS = "Jobs"


def _split(value: str, sep: str) -> List[str]:
    return [item.strip() for item in value.split(sep) if item.strip()]


@dataclass
class ApiCompatConfig:
    """
    API compatibility configuration.
    """

    strict_mode: bool = False
    no_warn: List[str] = field(default_factory=list)
    exclude_attributes_files: List[str] = field(default_factory=list)
    disable_rules: List[str] = field(default_factory=list)
    jobs: int = 1

    @classmethod
    def from_file(cls, config_file: str) -> "ApiCompatConfig":
        """
        Load ``ApiCompatConfig`` from an INI-style configuration file located
        at ``config_file``.

        :param config_file: path to apicompat.conf
        :type config_file: ``str``.
        :returns: An ``ApiCompatConfig`` instance initialised from
                  ``config_file``.
        :rtype: ``ApiCompatConfig``
        :raises: ``ApiCompatConfigError`` if the file is malformed.
        """
        if not exists(config_file):
            return ApiCompatConfig()

        _log_debug("Loading configuration from '%s'", config_file)
        cfg = ConfigParser()
        try:
            cfg.read([config_file])
        except ConfigParserError as err:
            raise ApiCompatConfigError(
                f"Malformed configuration file '{config_file}': {err}"
            ) from err

        config = ApiCompatConfig()
        if not cfg.has_section(_APICOMPAT_CFG_GLOBAL):
            return config

        section = cfg[_APICOMPAT_CFG_GLOBAL]
        try:
            if cfg.has_option(_APICOMPAT_CFG_GLOBAL, _APICOMPAT_CFG_STRICT_MODE):
                config.strict_mode = section.getboolean(_APICOMPAT_CFG_STRICT_MODE)
            if cfg.has_option(_APICOMPAT_CFG_GLOBAL, _APICOMPAT_CFG_JOBS):
                config.jobs = section.getint(_APICOMPAT_CFG_JOBS)
        except ValueError as err:
            raise ApiCompatConfigError(
                f"Invalid value in configuration file '{config_file}': {err}"
            ) from err

        if config.jobs < 1:
            raise ApiCompatConfigError(
                f"Invalid {_APICOMPAT_CFG_JOBS} value in '{config_file}': {config.jobs}"
            )

        if cfg.has_option(_APICOMPAT_CFG_GLOBAL, _APICOMPAT_CFG_NO_WARN):
            config.no_warn = _split(section[_APICOMPAT_CFG_NO_WARN], ";")
        if cfg.has_option(_APICOMPAT_CFG_GLOBAL, _APICOMPAT_CFG_EXCLUDE_ATTRIBUTES_FILES):
            config.exclude_attributes_files = _split(
                section[_APICOMPAT_CFG_EXCLUDE_ATTRIBUTES_FILES], ","
            )
        if cfg.has_option(_APICOMPAT_CFG_GLOBAL, _APICOMPAT_CFG_DISABLE_RULES):
            config.disable_rules = _split(section[_APICOMPAT_CFG_DISABLE_RULES], ",")

        return config


__all__ = ["APICOMPAT_CFG_PATH", "ApiCompatConfig"]
