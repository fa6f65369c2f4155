# Copyright Red Hat
#
# tests/compare/_util.py - API compatibility test utilities.
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
import json
import os

from apicompat.compare.difftypes import Side
from apicompat.compare.engine import ApiComparer
from apicompat.compare.options import CompatOptions
from apicompat.compare.provider import _SurfaceLoader
from apicompat.compare.symbols import MetadataInformation, SymbolForest
from apicompat.rules import RuleSettings
from apicompat.rules.attributes import AttributesMustMatch
from apicompat.rules.members import MembersMustExist
from apicompat.rules.modifiers import ModifiersMustMatch

LEFT_META = MetadataInformation("Lib", "left/Lib.json", "left/Lib.json")
RIGHT_META = MetadataInformation("Lib", "right/Lib.json", "right/Lib.json")

NAMESPACE = "CompatTests"


def attr(type_id, *arguments, **named_arguments):
    """Return a surface attribute entry."""
    return {
        "type": type_id,
        "arguments": list(arguments),
        "named_arguments": named_arguments,
    }


def make_type(name, members=(), attributes=(), **kwargs):
    """Return a surface type entry."""
    entry = {
        "name": name,
        "kind": kwargs.pop("kind", "class"),
        "accessibility": kwargs.pop("accessibility", "public"),
        "attributes": list(attributes),
        "members": list(members),
    }
    entry.update(kwargs)
    return entry


def make_member(kind, name=None, parameters=(), attributes=(), **kwargs):
    """
    Return a surface member entry. ``parameters`` are ``(name, type)``
    pairs or full parameter dictionaries.
    """
    entry = {
        "kind": kind,
        "accessibility": kwargs.pop("accessibility", "public"),
        "attributes": list(attributes),
        "parameters": [
            p if isinstance(p, dict) else {"name": p[0], "type": p[1]}
            for p in parameters
        ],
    }
    if name is not None:
        entry["name"] = name
    entry.update(kwargs)
    return entry


def make_method(name, parameters=(), attributes=(), **kwargs):
    """Return a surface method entry."""
    return make_member("method", name, parameters, attributes, **kwargs)


def make_surface(*types, namespace=NAMESPACE, references=None, name="Lib"):
    """Return a surface with ``types`` in a single namespace."""
    return {
        "name": name,
        "references": list(references or []),
        "namespaces": [{"name": namespace, "types": list(types)}],
    }


def load(surface, side, metadata=None):
    """Build a ``SymbolForest`` from an in-memory surface."""
    if metadata is None:
        metadata = LEFT_META if side == Side.LEFT else RIGHT_META
    forest = SymbolForest(side, [metadata])
    _SurfaceLoader(surface, metadata, forest).load()
    return forest


def make_rules(strict_mode=False, excluded=frozenset()):
    """Return the default rule catalog."""
    settings = RuleSettings(strict_mode=strict_mode, excluded_attributes=excluded)
    return [
        MembersMustExist(settings),
        ModifiersMustMatch(settings),
        AttributesMustMatch(settings),
    ]


def compare(left_surface, right_surface, strict_mode=False, excluded=frozenset()):
    """Compare two in-memory surfaces with the default rule catalog."""
    comparer = ApiComparer(make_rules(strict_mode, frozenset(excluded)))
    return comparer.compare(
        load(left_surface, Side.LEFT),
        load(right_surface, Side.RIGHT),
        CompatOptions(strict_mode=strict_mode),
    )


def write_surface(directory, file_name, surface):
    """Write ``surface`` as JSON to ``directory/file_name``."""
    path = os.path.join(directory, file_name)
    with open(path, "w", encoding="utf8") as fp:
        json.dump(surface, fp)
    return path
