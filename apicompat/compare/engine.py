# Copyright Red Hat
#
# apicompat/compare/engine.py - API compatibility comparison engine
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
API compatibility comparison engine
"""
from dataclasses import dataclass, field
from typing import (
    Any,
    Dict,
    Iterator,
    List,
    Optional,
    Sequence,
    TYPE_CHECKING,
)
from datetime import datetime
import logging
import json

from apicompat import APICOMPAT_SUBSYSTEM_COMPARE

from .difftypes import DifferenceType
from .options import CompatOptions
from .symbols import DeclarationNode, MetadataInformation, SymbolForest

if TYPE_CHECKING:
    from apicompat.rules import Rule

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_compare(msg, *args, **kwargs):
    """A wrapper for compare subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": APICOMPAT_SUBSYSTEM_COMPARE}, **kwargs)


@dataclass(frozen=True)
class CompatDifference:
    """
    A single detected difference between the left and right surfaces.

    Equality covers the diagnostic id, difference type, member id and
    both assembly contexts. The message is descriptive only.
    """

    #: The diagnostic id, e.g. ``CP0002``
    diagnostic_id: str
    #: Whether the declaration was added, removed or changed
    difference_type: DifferenceType
    #: Stable reference of the declaration the difference is scoped to
    member_id: str
    #: The left assembly context
    left: Optional[MetadataInformation] = None
    #: The right assembly context
    right: Optional[MetadataInformation] = None
    #: Human readable description
    message: str = field(default="", compare=False)

    def __str__(self) -> str:
        """
        Return a one line representation of this ``CompatDifference``.

        :returns: ``<diagnostic id> <difference type> <member id>[: message]``
        :rtype: ``str``
        """
        line = f"{self.diagnostic_id} {self.difference_type.value} {self.member_id}"
        return f"{line}: {self.message}" if self.message else line

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``CompatDifference`` into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "diagnostic_id": self.diagnostic_id,
            "difference_type": self.difference_type.value,
            "member_id": self.member_id,
            "left": str(self.left) if self.left else None,
            "right": str(self.right) if self.right else None,
            "message": self.message,
        }


@dataclass(frozen=True)
class CompareContext:
    """
    Position of the declarations handed to a rule callback.
    """

    #: The assembly contributing the left declaration (or its closest
    #: left ancestor)
    left_metadata: Optional[MetadataInformation] = None
    #: The assembly contributing the right declaration (or its closest
    #: right ancestor)
    right_metadata: Optional[MetadataInformation] = None
    #: The parent of the left declaration
    left_parent: Optional[DeclarationNode] = None
    #: The parent of the right declaration
    right_parent: Optional[DeclarationNode] = None

    def enter(
        self,
        left: Optional[DeclarationNode],
        right: Optional[DeclarationNode],
    ) -> "CompareContext":
        """
        Return the context for the declarations ``left`` and ``right``
        found below this context's parents.
        """
        return CompareContext(
            left_metadata=(left.metadata if left and left.metadata else None)
            or self.left_metadata,
            right_metadata=(right.metadata if right and right.metadata else None)
            or self.right_metadata,
            left_parent=self.left_parent,
            right_parent=self.right_parent,
        )

    def descend(
        self,
        left: Optional[DeclarationNode],
        right: Optional[DeclarationNode],
    ) -> "CompareContext":
        """
        Return the context for the children of ``left`` and ``right``.
        """
        return CompareContext(
            left_metadata=self.left_metadata,
            right_metadata=self.right_metadata,
            left_parent=left,
            right_parent=right,
        )


class ApiComparer:
    """
    Core class for generating API compatibility comparisons.

    The comparer pairs declarations level by level on their keys (the
    stable id, or a type independent key for return values) and
    hands every matched, left-only and (in strict mode) right-only
    declaration to each rule in catalog order.
    """

    def __init__(self, rules: Sequence["Rule"]):
        """
        Initialise a new ``ApiComparer`` instance.

        :param rules: The ordered rule catalog to apply.
        :type rules: ``Sequence[Rule]``
        """
        self.rules = tuple(rules)

    def compare(
        self,
        left: SymbolForest,
        right: SymbolForest,
        options: Optional[CompatOptions] = None,
    ) -> List[CompatDifference]:
        """
        Compare the ``left`` and ``right`` forests.

        :param left: The left (baseline) forest.
        :type left: ``SymbolForest``
        :param right: The right (candidate) forest.
        :type right: ``SymbolForest``
        :param options: Options to apply to the comparison.
        :type options: ``CompatOptions``
        :returns: Differences in traversal order.
        :rtype: ``List[CompatDifference]``
        """
        if options is None:
            options = CompatOptions()

        differences: List[CompatDifference] = []
        context = CompareContext(
            left_metadata=left.default_metadata,
            right_metadata=right.default_metadata,
        )

        _log_debug_compare(
            "Comparing %d left namespaces with %d right namespaces (strict=%s)",
            len(left.roots),
            len(right.roots),
            options.strict_mode,
        )
        start_time = datetime.now()
        self._compare_level(left.roots, right.roots, context, options, differences)
        _log_debug_compare(
            "Found %d differences in %s", len(differences), datetime.now() - start_time
        )
        return differences

    def _compare_level(
        self,
        left: Sequence[DeclarationNode],
        right: Sequence[DeclarationNode],
        context: CompareContext,
        options: CompatOptions,
        out: List[CompatDifference],
    ):
        right_by_key = {node.key: node for node in right}
        left_keys = set()

        # Matched pairs and removals are reported in left declaration order.
        for node in left:
            left_keys.add(node.key)
            other = right_by_key.get(node.key)
            if other is None:
                self._visit_removed(node, context, options, out)
            else:
                self._visit_matched(node, other, context, options, out)

        if not options.strict_mode:
            return

        for node in right:
            if node.key not in left_keys:
                self._visit_added(node, context, options, out)

    def _visit_matched(
        self,
        left: DeclarationNode,
        right: DeclarationNode,
        context: CompareContext,
        options: CompatOptions,
        out: List[CompatDifference],
    ):
        _log_debug_compare("Matched %s", left.stable_id)
        node_context = context.enter(left, right)
        for rule in self.rules:
            out.extend(rule.matched(left, right, node_context))
        self._compare_level(
            left.children,
            right.children,
            node_context.descend(left, right),
            options,
            out,
        )

    def _visit_removed(
        self,
        left: DeclarationNode,
        context: CompareContext,
        options: CompatOptions,
        out: List[CompatDifference],
    ):
        _log_debug_compare("Left only %s", left.stable_id)
        node_context = context.enter(left, None)
        for rule in self.rules:
            out.extend(rule.removed(left, node_context))
        if left.kind.is_container:
            self._compare_level(
                left.children, (), node_context.descend(left, None), options, out
            )

    def _visit_added(
        self,
        right: DeclarationNode,
        context: CompareContext,
        options: CompatOptions,
        out: List[CompatDifference],
    ):
        _log_debug_compare("Right only %s", right.stable_id)
        node_context = context.enter(None, right)
        for rule in self.rules:
            out.extend(rule.added(right, node_context))
        if right.kind.is_container:
            self._compare_level(
                (), right.children, node_context.descend(None, right), options, out
            )


class CompatResults:
    """Container for API compatibility results with formatting methods."""

    def __init__(
        self,
        differences: List[CompatDifference],
        timestamp: Optional[int] = None,
    ):
        self._differences = differences
        self.timestamp = (
            timestamp if timestamp is not None else int(datetime.now().timestamp())
        )

    def __repr__(self) -> str:
        return f"CompatResults([...], {self.timestamp})"

    # List-like interface
    def __iter__(self) -> Iterator[CompatDifference]:
        """
        Implement iter(self).
        """
        return iter(self._differences)

    def __len__(self):
        """
        Implement len(self).
        """
        return len(self._differences)

    def __getitem__(self, index: int) -> CompatDifference:
        """
        Return self[index]

        :param index: The index to return.
        :type index: ``int``
        """
        return self._differences[index]

    def __bool__(self) -> bool:
        return bool(self._differences)

    @property
    def added(self) -> List[CompatDifference]:
        """
        Return added differences in this ``CompatResults`` instance.

        :rtype: ``List[CompatDifference]``
        """
        return [
            d for d in self._differences if d.difference_type == DifferenceType.ADDED
        ]

    @property
    def removed(self) -> List[CompatDifference]:
        """
        Return removed differences in this ``CompatResults`` instance.

        :rtype: ``List[CompatDifference]``
        """
        return [
            d
            for d in self._differences
            if d.difference_type == DifferenceType.REMOVED
        ]

    @property
    def changed(self) -> List[CompatDifference]:
        """
        Return changed differences in this ``CompatResults`` instance.

        :rtype: ``List[CompatDifference]``
        """
        return [
            d
            for d in self._differences
            if d.difference_type == DifferenceType.CHANGED
        ]

    def lines(self) -> List[str]:
        """
        Return one line per difference.

        :rtype: ``List[str]``
        """
        return [str(difference) for difference in self._differences]

    def summary(self) -> str:
        """
        Return a short summary of the differences found.

        :rtype: ``str``
        """
        return (
            f"{len(self)} differences ({len(self.removed)} removed, "
            f"{len(self.changed)} changed, {len(self.added)} added)"
        )

    def json(self, pretty=False) -> str:
        """
        Return a string representation of these results in JSON notation.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        :returns: A JSON representation of this instance.
        """
        return json.dumps(
            [difference.to_dict() for difference in self._differences],
            indent=4 if pretty else None,
        )


__all__ = [
    "ApiComparer",
    "CompareContext",
    "CompatDifference",
    "CompatResults",
]
