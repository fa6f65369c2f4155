# Copyright Red Hat
#
# apicompat/_apicompat.py - API compatibility global definitions
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level apicompat package.
"""
import logging

_log = logging.getLogger("apicompat")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Apicompat debugging subsystem mask
APICOMPAT_DEBUG_COMPARE = 1
APICOMPAT_DEBUG_SUPPRESSION = 2
APICOMPAT_DEBUG_RUNNER = 4
APICOMPAT_DEBUG_COMMAND = 8
APICOMPAT_DEBUG_ALL = (
    APICOMPAT_DEBUG_COMPARE
    | APICOMPAT_DEBUG_SUPPRESSION
    | APICOMPAT_DEBUG_RUNNER
    | APICOMPAT_DEBUG_COMMAND
)

# Apicompat debugging subsystem names
APICOMPAT_SUBSYSTEM_COMPARE = "apicompat.compare"
APICOMPAT_SUBSYSTEM_SUPPRESSION = "apicompat.suppression"
APICOMPAT_SUBSYSTEM_RUNNER = "apicompat.runner"
APICOMPAT_SUBSYSTEM_COMMAND = "apicompat.command"

_DEBUG_MASK_TO_SUBSYSTEM = {
    APICOMPAT_DEBUG_COMPARE: APICOMPAT_SUBSYSTEM_COMPARE,
    APICOMPAT_DEBUG_SUPPRESSION: APICOMPAT_SUBSYSTEM_SUPPRESSION,
    APICOMPAT_DEBUG_RUNNER: APICOMPAT_SUBSYSTEM_RUNNER,
    APICOMPAT_DEBUG_COMMAND: APICOMPAT_SUBSYSTEM_COMMAND,
}

_debug_subsystems = set()

#
# Diagnostic identifiers
#

#: Prefix shared by all compatibility diagnostics.
COMPAT_DIAGNOSTIC_PREFIX = "CP"

#: A type present in the left surface is missing from the right.
DIAG_TYPE_MUST_EXIST = "CP0001"
#: A member present in the left surface is missing from the right.
DIAG_MEMBER_MUST_EXIST = "CP0002"
#: An attribute was removed from a declaration.
DIAG_CANNOT_REMOVE_ATTRIBUTE = "CP0014"
#: An attribute's arguments changed on a declaration.
DIAG_CANNOT_CHANGE_ATTRIBUTE = "CP0015"
#: An attribute was added to a declaration.
DIAG_CANNOT_ADD_ATTRIBUTE = "CP0016"
#: The accessibility of a declaration changed.
DIAG_CANNOT_CHANGE_VISIBILITY = "CP0019"
#: The static/virtual/abstract/sealed/readonly modifiers changed.
DIAG_CANNOT_CHANGE_MODIFIERS = "CP0020"
#: The constraints on a generic parameter changed.
DIAG_CANNOT_CHANGE_GENERIC_CONSTRAINT = "CP0021"
#: The type of a field, property, event or return value changed.
DIAG_CANNOT_CHANGE_TYPE = "CP0022"
#: A referenced assembly or declaration could not be resolved.
DIAG_UNRESOLVED_REFERENCE = "CP1002"


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        # Always pass non-DEBUG messages.
        if record.levelno != logging.DEBUG:
            return True

        # Always pass DEBUG messages that aren't for a specific subsystem.
        if not hasattr(record, "subsystem"):
            return True

        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``apicompat`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    apicompat_log = logging.getLogger("apicompat")

    for handler in apicompat_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``apicompat`` package.

    :param mask: the logical OR of the ``APICOMPAT_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > APICOMPAT_DEBUG_ALL:
        raise ValueError(f"Invalid apicompat debug mask: {mask}")

    enabled_subsystems = []
    for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items():
        if mask & flag:
            enabled_subsystems.append(subsystem_name)

    apicompat_log = logging.getLogger("apicompat")
    for handler in apicompat_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


def is_compat_diagnostic(diagnostic_id):
    """
    Return ``True`` if ``diagnostic_id`` belongs to the compatibility
    diagnostic family (ids beginning with ``CP``, compared without regard
    to case).

    :param diagnostic_id: The diagnostic identifier to test.
    :type diagnostic_id: ``str``
    :rtype: ``bool``
    """
    return diagnostic_id[: len(COMPAT_DIAGNOSTIC_PREFIX)].upper() == (
        COMPAT_DIAGNOSTIC_PREFIX
    )


#
# Apicompat exception types
#


class ApiCompatError(Exception):
    """
    Base class for API compatibility errors.
    """


class ApiCompatConfigError(ApiCompatError):
    """
    An invalid run configuration was supplied: for e.g. unequal numbers
    of left and right inputs when a work item per assembly is requested.
    """


class ApiCompatNotFoundError(ApiCompatError):
    """
    The requested input does not exist.
    """


class ApiCompatParseError(ApiCompatError):
    """
    An error parsing a surface file or other structured input.
    """


class ApiCompatSuppressionError(ApiCompatError):
    """
    The suppression file could not be read or is malformed.
    """


class ApiCompatSystemError(ApiCompatError):
    """
    An error when calling the operating system.
    """


__all__ = [
    "APICOMPAT_DEBUG_COMPARE",
    "APICOMPAT_DEBUG_SUPPRESSION",
    "APICOMPAT_DEBUG_RUNNER",
    "APICOMPAT_DEBUG_COMMAND",
    "APICOMPAT_DEBUG_ALL",
    "APICOMPAT_SUBSYSTEM_COMPARE",
    "APICOMPAT_SUBSYSTEM_SUPPRESSION",
    "APICOMPAT_SUBSYSTEM_RUNNER",
    "APICOMPAT_SUBSYSTEM_COMMAND",
    "COMPAT_DIAGNOSTIC_PREFIX",
    "DIAG_TYPE_MUST_EXIST",
    "DIAG_MEMBER_MUST_EXIST",
    "DIAG_CANNOT_REMOVE_ATTRIBUTE",
    "DIAG_CANNOT_CHANGE_ATTRIBUTE",
    "DIAG_CANNOT_ADD_ATTRIBUTE",
    "DIAG_CANNOT_CHANGE_VISIBILITY",
    "DIAG_CANNOT_CHANGE_MODIFIERS",
    "DIAG_CANNOT_CHANGE_GENERIC_CONSTRAINT",
    "DIAG_CANNOT_CHANGE_TYPE",
    "DIAG_UNRESOLVED_REFERENCE",
    "SubsystemFilter",
    "get_debug_mask",
    "set_debug_mask",
    "is_compat_diagnostic",
    "ApiCompatError",
    "ApiCompatConfigError",
    "ApiCompatNotFoundError",
    "ApiCompatParseError",
    "ApiCompatSuppressionError",
    "ApiCompatSystemError",
]
