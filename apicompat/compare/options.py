# Copyright Red Hat
#
# apicompat/compare/options.py - API compatibility run options
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
API compatibility comparison options.
"""
from dataclasses import dataclass, field, fields
from typing import Optional, Tuple, TYPE_CHECKING
from argparse import Namespace
import logging

if TYPE_CHECKING:
    from apicompat.config import ApiCompatConfig

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Option fields holding sequences of values.
_TUPLE_FIELDS = (
    "no_warn",
    "exclude_attributes_files",
    "left_transformation_patterns",
    "right_transformation_patterns",
    "disable_rules",
)


@dataclass(frozen=True)
class CompatOptions:
    """
    API compatibility run options.
    """

    #: Also report declarations that only exist in the right surface
    strict_mode: bool = False
    #: Diagnostic ids that are never reported
    no_warn: Tuple[str, ...] = field(default_factory=tuple)
    #: Write every difference found to the suppression file
    generate_suppression_file: bool = False
    #: Path to the suppression file to read and/or write
    suppression_file: Optional[str] = None
    #: Files listing attribute type ids to ignore
    exclude_attributes_files: Tuple[str, ...] = field(default_factory=tuple)
    #: Create one work item per left/right input pair
    create_work_item_per_assembly: bool = False
    #: ``(pattern, replacement)`` pairs deriving left assembly ids
    left_transformation_patterns: Tuple[Tuple[str, str], ...] = field(
        default_factory=tuple
    )
    #: ``(pattern, replacement)`` pairs deriving right assembly ids
    right_transformation_patterns: Tuple[Tuple[str, str], ...] = field(
        default_factory=tuple
    )
    #: Names of rules to skip
    disable_rules: Tuple[str, ...] = field(default_factory=tuple)
    #: Number of work items to execute concurrently
    jobs: int = 1

    def __str__(self):
        """
        Return a human readable string representation of this
        ``CompatOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """

        def _join_tuple(val: Tuple) -> str:
            return " ".join(
                "=".join(item) if isinstance(item, tuple) else item for item in val
            )

        items = [
            (key, val) if not isinstance(val, tuple) else (key, _join_tuple(val))
            for key, val in self.__dict__.items()
        ]
        return "\n".join(f"{key}={val}" for key, val in items)

    @classmethod
    def from_cmd_args(
        cls,
        cmd_args: Namespace,
        config: Optional["ApiCompatConfig"] = None,
    ) -> "CompatOptions":
        """
        Initialise CompatOptions from command line arguments.

        Construct a new ``CompatOptions`` object from the command line
        arguments in ``cmd_args``. Values that were not given on the command
        line are taken from ``config`` when it is set.

        :param cmd_args: The command line selection arguments.
        :type cmd_args: ``Namespace``
        :param config: Optional configuration file values.
        :type config: ``Optional[ApiCompatConfig]``
        :returns: A new ``CompatOptions`` instance
        :rtype: ``CompatOptions``
        """

        def get_value(name: str):
            attr = getattr(cmd_args, name)
            if isinstance(attr, list):
                return tuple(tuple(a) if isinstance(a, list) else a for a in attr)
            if attr is None and name in _TUPLE_FIELDS:
                return ()
            return attr

        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: get_value(name)
            for name in field_names
            if hasattr(cmd_args, name) and getattr(cmd_args, name) is not None
        }

        if config is not None:
            if not kwargs.get("strict_mode"):
                kwargs["strict_mode"] = config.strict_mode
            if not kwargs.get("jobs"):
                kwargs["jobs"] = config.jobs
            kwargs["no_warn"] = tuple(config.no_warn) + kwargs.get("no_warn", ())
            kwargs["exclude_attributes_files"] = tuple(
                config.exclude_attributes_files
            ) + kwargs.get("exclude_attributes_files", ())
            kwargs["disable_rules"] = tuple(config.disable_rules) + kwargs.get(
                "disable_rules", ()
            )

        options = cls(**kwargs)
        _log_debug("Initialised CompatOptions from arguments: %s", repr(options))
        return options
