# Copyright Red Hat
#
# apicompat/compare/difftypes.py - API compatibility diff types
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
API compatibility difference and declaration types
"""
from enum import Enum


class DifferenceType(Enum):
    """
    Enum for different difference types.
    """

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


class Side(Enum):
    """
    Enum for the two sides of a comparison.
    """

    LEFT = "left"
    RIGHT = "right"


class DeclarationKind(Enum):
    """
    Enum for the kinds of declaration found in a public surface.
    """

    NAMESPACE = "namespace"
    TYPE = "type"
    FIELD = "field"
    PROPERTY = "property"
    METHOD = "method"
    EVENT = "event"
    CONSTRUCTOR = "constructor"
    RETURN_VALUE = "return_value"
    PARAMETER = "parameter"
    GENERIC_PARAMETER = "generic_parameter"

    @property
    def is_member(self) -> bool:
        """``True`` for type members that can be added or removed."""
        return self in _MEMBER_KINDS

    @property
    def is_container(self) -> bool:
        """
        ``True`` for kinds that group declarations without being part of
        the surface themselves.
        """
        return self is DeclarationKind.NAMESPACE


_MEMBER_KINDS = frozenset(
    (
        DeclarationKind.FIELD,
        DeclarationKind.PROPERTY,
        DeclarationKind.METHOD,
        DeclarationKind.EVENT,
        DeclarationKind.CONSTRUCTOR,
    )
)
