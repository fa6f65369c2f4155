# Copyright Red Hat
#
# apicompat/rules/members.py - Type and member existence rule
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Rule reporting types and members that exist on only one side.
"""
from apicompat import DIAG_MEMBER_MUST_EXIST, DIAG_TYPE_MUST_EXIST
from apicompat.compare.difftypes import DeclarationKind, DifferenceType

from . import Rule


def _diagnostic_id(kind):
    if kind == DeclarationKind.TYPE:
        return DIAG_TYPE_MUST_EXIST
    if kind.is_member:
        return DIAG_MEMBER_MUST_EXIST
    return None


class MembersMustExist(Rule):
    """
    Report types and members removed from the right surface, and in
    strict mode those only present in the right surface.
    """

    name = "members"
    order = 10

    def removed(self, left, context):
        diagnostic_id = _diagnostic_id(left.kind)
        if diagnostic_id is None:
            return []
        return [
            self.difference(
                diagnostic_id,
                DifferenceType.REMOVED,
                left.stable_id,
                context,
                f"{left.kind.value.capitalize()} '{left.stable_id}' exists on "
                f"[{context.left_metadata}] but not on [{context.right_metadata}]",
            )
        ]

    def added(self, right, context):
        diagnostic_id = _diagnostic_id(right.kind)
        if diagnostic_id is None:
            return []
        return [
            self.difference(
                diagnostic_id,
                DifferenceType.ADDED,
                right.stable_id,
                context,
                f"{right.kind.value.capitalize()} '{right.stable_id}' exists on "
                f"[{context.right_metadata}] but not on [{context.left_metadata}]",
            )
        ]


__all__ = ["MembersMustExist"]
