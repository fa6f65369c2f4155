# Copyright Red Hat
#
# apicompat/rules/__init__.py - API compatibility rules
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
API compatibility rule helpers.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Sequence
from os.path import exists
import logging

from apicompat import ApiCompatConfigError, ApiCompatNotFoundError
from apicompat.compare.difftypes import DifferenceType
from apicompat.compare.engine import CompareContext, CompatDifference
from apicompat.compare.symbols import DeclarationNode

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def load_exclusion_files(paths: Sequence[str]) -> FrozenSet[str]:
    """
    Read attribute exclusion files.

    Each file lists one attribute type id per line. Blank lines are
    ignored and surrounding whitespace is stripped.

    :param paths: Paths to exclusion files.
    :type paths: ``Sequence[str]``
    :returns: The union of all excluded attribute type ids.
    :rtype: ``FrozenSet[str]``
    :raises: ``ApiCompatNotFoundError`` if a file does not exist or
             ``ApiCompatConfigError`` if it cannot be read.
    """
    excluded = set()
    for path in paths:
        if not exists(path):
            raise ApiCompatNotFoundError(f"Attribute exclusion file '{path}' not found")
        try:
            with open(path, "r", encoding="utf8") as fp:
                for line in fp:
                    line = line.strip()
                    if line:
                        excluded.add(line)
        except (OSError, UnicodeDecodeError) as err:
            raise ApiCompatConfigError(
                f"Failed to read attribute exclusion file '{path}': {err}"
            ) from err
        _log_debug("Loaded attribute exclusions from '%s'", path)
    return frozenset(excluded)


@dataclass(frozen=True)
class RuleSettings:
    """
    Read-only configuration shared by every rule in a run.
    """

    #: Report declarations that only exist on the right
    strict_mode: bool = False
    #: Attribute type ids that are never compared
    excluded_attributes: FrozenSet[str] = field(default_factory=frozenset)


class Rule:
    """
    Abstract base class for API compatibility rules.

    A rule inspects declarations handed to it by the ``ApiComparer`` and
    returns the differences it finds. Rules must not keep mutable state
    between calls: one rule instance is shared by every work item of a run.
    """

    name = "rule"
    #: Position in the rule catalog; lower values run first.
    order = 100

    def __init__(self, settings: Optional[RuleSettings] = None):
        self.settings = settings or RuleSettings()

    def matched(
        self,
        left: DeclarationNode,
        right: DeclarationNode,
        context: CompareContext,
    ) -> Iterable[CompatDifference]:
        """
        Inspect a pair of declarations present on both sides.

        :param left: The left declaration.
        :param right: The right declaration with the same stable id.
        :param context: The comparison context.
        :returns: Differences found for this pair.
        """
        return ()

    def removed(
        self, left: DeclarationNode, context: CompareContext
    ) -> Iterable[CompatDifference]:
        """
        Inspect a declaration only present on the left.

        :param left: The left declaration.
        :param context: The comparison context.
        :returns: Differences found for this declaration.
        """
        return ()

    def added(
        self, right: DeclarationNode, context: CompareContext
    ) -> Iterable[CompatDifference]:
        """
        Inspect a declaration only present on the right. Only called in
        strict mode.

        :param right: The right declaration.
        :param context: The comparison context.
        :returns: Differences found for this declaration.
        """
        return ()

    @staticmethod
    def difference(
        diagnostic_id: str,
        difference_type: DifferenceType,
        member_id: str,
        context: CompareContext,
        message: str = "",
    ) -> CompatDifference:
        """
        Build a ``CompatDifference`` carrying the assembly context of
        ``context``.
        """
        return CompatDifference(
            diagnostic_id,
            difference_type,
            member_id,
            left=context.left_metadata,
            right=context.right_metadata,
            message=message,
        )

    def info(self):
        """
        Return rule name and position.
        """
        return {"name": self.name, "order": self.order}
