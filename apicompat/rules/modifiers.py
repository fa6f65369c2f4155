# Copyright Red Hat
#
# apicompat/rules/modifiers.py - Visibility, modifier and constraint rule
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Rule comparing the declared accessibility, modifiers, generic constraints
and declared types of matched declarations.
"""
from apicompat import (
    DIAG_CANNOT_CHANGE_GENERIC_CONSTRAINT,
    DIAG_CANNOT_CHANGE_MODIFIERS,
    DIAG_CANNOT_CHANGE_VISIBILITY,
    DIAG_CANNOT_CHANGE_TYPE,
)
from apicompat.compare.difftypes import DeclarationKind, DifferenceType

from . import Rule

#: Modifiers that change how a declaration may be used or overridden.
COMPARED_MODIFIERS = frozenset(
    ("static", "virtual", "abstract", "sealed", "readonly", "override")
)

#: Declarations whose declared type is part of their contract.
TYPED_KINDS = frozenset(
    (
        DeclarationKind.FIELD,
        DeclarationKind.PROPERTY,
        DeclarationKind.EVENT,
        DeclarationKind.RETURN_VALUE,
    )
)


def _format_modifiers(modifiers):
    return " ".join(sorted(modifiers)) or "none"


class ModifiersMustMatch(Rule):
    """
    Report changes to accessibility, modifiers, generic constraints and
    declared types.
    """

    name = "modifiers"
    order = 20

    def _type_changed(self, left, right, context):
        if left.kind == DeclarationKind.RETURN_VALUE:
            owner = context.left_parent.stable_id if context.left_parent else left.name
            message = f"Return type of '{owner}'"
        else:
            message = f"Type of '{left.stable_id}'"
        return self.difference(
            DIAG_CANNOT_CHANGE_TYPE,
            DifferenceType.CHANGED,
            left.stable_id,
            context,
            f"{message} changed from '{left.type_name}' to '{right.type_name}'",
        )

    def matched(self, left, right, context):
        differences = []

        if left.kind == DeclarationKind.GENERIC_PARAMETER:
            if set(left.constraints) != set(right.constraints):
                differences.append(
                    self.difference(
                        DIAG_CANNOT_CHANGE_GENERIC_CONSTRAINT,
                        DifferenceType.CHANGED,
                        left.stable_id,
                        context,
                        f"Constraints on '{left.name}' changed from "
                        f"'{', '.join(left.constraints) or 'none'}' to "
                        f"'{', '.join(right.constraints) or 'none'}'",
                    )
                )
            return differences

        if left.kind != DeclarationKind.TYPE and not left.kind.is_member:
            if left.kind in TYPED_KINDS and left.type_name != right.type_name:
                differences.append(self._type_changed(left, right, context))
            return differences

        if left.accessibility != right.accessibility:
            differences.append(
                self.difference(
                    DIAG_CANNOT_CHANGE_VISIBILITY,
                    DifferenceType.CHANGED,
                    left.stable_id,
                    context,
                    f"Visibility of '{left.stable_id}' changed from "
                    f"'{left.accessibility}' to '{right.accessibility}'",
                )
            )

        left_modifiers = left.modifiers & COMPARED_MODIFIERS
        right_modifiers = right.modifiers & COMPARED_MODIFIERS
        if left_modifiers != right_modifiers:
            differences.append(
                self.difference(
                    DIAG_CANNOT_CHANGE_MODIFIERS,
                    DifferenceType.CHANGED,
                    left.stable_id,
                    context,
                    f"Modifiers of '{left.stable_id}' changed from "
                    f"'{_format_modifiers(left_modifiers)}' to "
                    f"'{_format_modifiers(right_modifiers)}'",
                )
            )

        if left.kind in TYPED_KINDS and left.type_name != right.type_name:
            differences.append(self._type_changed(left, right, context))
        return differences


__all__ = ["ModifiersMustMatch"]
