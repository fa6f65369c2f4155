# Copyright Red Hat
#
# apicompat/rules/attributes.py - Attribute equality rule
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Rule comparing the attributes applied to matched declarations.

Attributes are grouped by attribute type id. A group present on both
sides must contain the same attribute instances (same constructor
arguments and named arguments, in any order); otherwise one ``Changed``
difference is reported for the group. Groups present only on the left are
``Removed`` and groups present only on the right are ``Added``. Attribute
types listed in the exclusion files are skipped.
"""
from collections import Counter
from typing import Dict, List, Sequence

from apicompat import (
    DIAG_CANNOT_ADD_ATTRIBUTE,
    DIAG_CANNOT_CHANGE_ATTRIBUTE,
    DIAG_CANNOT_REMOVE_ATTRIBUTE,
)
from apicompat.compare.difftypes import DifferenceType
from apicompat.compare.symbols import AttributeData, attribute_reference

from . import Rule


class AttributesMustMatch(Rule):
    """
    Report attributes added, removed or changed on a declaration.
    """

    name = "attributes"
    order = 30

    def _group(
        self, attributes: Sequence[AttributeData]
    ) -> Dict[str, List[AttributeData]]:
        """
        Group ``attributes`` by type id in order of first appearance,
        dropping excluded attribute types.
        """
        groups: Dict[str, List[AttributeData]] = {}
        for attribute in attributes:
            if attribute.type_id in self.settings.excluded_attributes:
                continue
            groups.setdefault(attribute.type_id, []).append(attribute)
        return groups

    def matched(self, left, right, context):
        if not left.attributes and not right.attributes:
            return []

        left_groups = self._group(left.attributes)
        right_groups = self._group(right.attributes)
        differences = []

        for type_id, left_group in left_groups.items():
            reference = attribute_reference(left.stable_id, type_id)
            right_group = right_groups.get(type_id)
            if right_group is None:
                differences.append(
                    self.difference(
                        DIAG_CANNOT_REMOVE_ATTRIBUTE,
                        DifferenceType.REMOVED,
                        reference,
                        context,
                        f"Attribute '{type_id}' exists on '{left.stable_id}' in "
                        f"[{context.left_metadata}] but not in "
                        f"[{context.right_metadata}]",
                    )
                )
            elif Counter(left_group) != Counter(right_group):
                differences.append(
                    self.difference(
                        DIAG_CANNOT_CHANGE_ATTRIBUTE,
                        DifferenceType.CHANGED,
                        reference,
                        context,
                        f"Attribute '{type_id}' on '{left.stable_id}' changed "
                        f"from '{', '.join(str(a) for a in left_group)}' to "
                        f"'{', '.join(str(a) for a in right_group)}'",
                    )
                )

        for type_id in right_groups:
            if type_id in left_groups:
                continue
            differences.append(
                self.difference(
                    DIAG_CANNOT_ADD_ATTRIBUTE,
                    DifferenceType.ADDED,
                    attribute_reference(left.stable_id, type_id),
                    context,
                    f"Attribute '{type_id}' exists on '{left.stable_id}' in "
                    f"[{context.right_metadata}] but not in "
                    f"[{context.left_metadata}]",
                )
            )

        return differences


__all__ = ["AttributesMustMatch"]
