# Copyright Red Hat
#
# apicompat/compare/__init__.py - API compatibility comparison package
#
# This file is part of the apicompat project.
#
# SPDX-License-Identifier: Apache-2.0
"""
API compatibility comparison package.

Provides the structural comparer that pairs declarations of two public
surfaces, the suppression engine that filters accepted differences and the
runner that executes queued comparisons. The main entry points are
``validate_assemblies()`` in ``apicompat.compare.validate``,
``ApiComparer`` and ``CompatOptions``.
"""
from .difftypes import DeclarationKind, DifferenceType, Side
from .symbols import (
    AttributeData,
    DeclarationNode,
    MetadataInformation,
    SymbolForest,
)
from .engine import ApiComparer, CompareContext, CompatDifference, CompatResults
from .options import CompatOptions
from .suppression import ReaderWriterLock, Suppression, SuppressionEngine
from .discovery import RegexStringTransformer
from .provider import SurfaceFileProvider, SymbolProvider
from .runner import ApiCompatRunner, WorkItem

__all__ = [
    "ApiCompatRunner",
    "ApiComparer",
    "AttributeData",
    "CompareContext",
    "CompatDifference",
    "CompatOptions",
    "CompatResults",
    "DeclarationKind",
    "DeclarationNode",
    "DifferenceType",
    "MetadataInformation",
    "ReaderWriterLock",
    "RegexStringTransformer",
    "Side",
    "SurfaceFileProvider",
    "Suppression",
    "SuppressionEngine",
    "SymbolForest",
    "SymbolProvider",
    "WorkItem",
]
